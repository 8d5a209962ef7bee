"""
Restore Admission — CLI entrypoint.

Usage:
    restore-admission --help
    restore-admission review request.json --cluster cluster.yml
    restore-admission review request.json --kubectl --json
    restore-admission config check
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from restore_admission import __version__
from restore_admission.core.config.loader import AdmissionConfig, ConfigError, load_config
from restore_admission.core.observability.logging_config import resolve_level, setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="restore-admission")
@click.option("--verbose", "-v", is_flag=True, help="Log each decision.")
@click.option("--quiet", "-q", is_flag=True, help="Only log errors; review reports by exit status alone.")
@click.option("--debug", is_flag=True, help="Log every cluster lookup.")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to restore-admission.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Restore Admission — validate VirtualMachineRestore requests."""
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_logging(level=resolve_level(debug=debug, verbose=verbose, quiet=quiet))


def _load_config(ctx: click.Context) -> AdmissionConfig:
    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(2)


@cli.command()
@click.argument("request_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--cluster",
    "cluster_fixture",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML fixture with the cluster objects to review against.",
)
@click.option("--kubectl", "use_kubectl", is_flag=True, help="Read the live cluster with kubectl.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Print the AdmissionReview response.")
@click.pass_context
def review(
    ctx: click.Context,
    request_file: Path,
    cluster_fixture: Path | None,
    use_kubectl: bool,
    as_json: bool,
) -> None:
    """Review an AdmissionReview request for a VirtualMachineRestore.

    Exit status: 0 allowed, 1 denied, 2 error.
    """
    from restore_admission.core.use_cases.review import (
        ReviewInputError,
        build_lookups,
        review_file,
    )

    config = _load_config(ctx)
    try:
        lookups = build_lookups(config, cluster_fixture=cluster_fixture, use_kubectl=use_kubectl)
        result = review_file(request_file, config, lookups)
    except ReviewInputError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(2)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(result.exit_code)

    # Exit status alone carries the decision
    if ctx.obj.get("quiet"):
        sys.exit(result.exit_code)

    response = result.response
    request = result.review.request
    assert request is not None  # guaranteed by load_review
    label = f"{request.operation} {request.namespace}/{request.name}".rstrip("/")

    if result.outcome == "allowed":
        click.secho(f"✅ {label}: allowed", fg="green")
    elif result.outcome == "denied":
        click.secho(f"❌ {label}: denied", fg="red", bold=True)
        for cause in response.causes:
            click.echo(f"   • {cause.field}: {cause.message}")
    else:
        message = response.status.message if response.status else ""
        click.secho(f"💥 {label}: error — {message}", fg="yellow")

    sys.exit(result.exit_code)


@cli.group()
def config() -> None:
    """Configuration management commands."""


@config.command("check")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def config_check(ctx: click.Context, as_json: bool) -> None:
    """Validate restore-admission.yml."""
    from restore_admission.core.use_cases.config_check import check_config

    result = check_config(config_path=ctx.obj.get("config_path"))

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.valid else 1)

    if result.valid:
        click.secho("✅ Configuration is valid", fg="green", bold=True)
        if result.config_path:
            click.echo(f"   File: {result.config_path}")
        if result.config:
            gates = ", ".join(result.config.feature_gates) or "(none)"
            click.echo(f"   Feature gates: {gates}")
    else:
        click.secho("❌ Configuration has errors", fg="red", bold=True)

    for err in result.errors:
        click.secho(f"   ✗ {err}", fg="red")
    for warn in result.warnings:
        click.secho(f"   ⚠ {warn}", fg="yellow")

    sys.exit(0 if result.valid else 1)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
