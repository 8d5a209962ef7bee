"""
Shared base for Kubernetes-shaped models.

Cluster objects arrive as camelCase JSON. Every model decodes from the
wire names and can still be built with snake_case keyword arguments.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class K8sModel(BaseModel):
    """Base model: camelCase aliases, unknown fields ignored."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_wire(self) -> dict:
        """Dump using wire (camelCase) names, dropping unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class ObjectMeta(K8sModel):
    """The subset of metadata the admitter reads."""

    name: str = ""
    namespace: str = ""
    uid: str | None = None
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)

    @field_validator("name", "namespace", mode="before")
    @classmethod
    def _null_name(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def _null_map(cls, value: object) -> object:
        return {} if value is None else value
