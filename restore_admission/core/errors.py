"""
Admission errors — the transport-level failure channel.

Anything raised from here aborts the admission call: no decision is
rendered and the caller receives an error response without field
attribution. Validation findings about the submitted object are never
raised; they are returned as status causes.
"""

from __future__ import annotations


class AdmissionError(Exception):
    """Base for every failure that aborts an admission call."""


class UnexpectedResource(AdmissionError):
    """The webhook was called for a resource it does not serve."""


class FeatureGateDisabled(AdmissionError):
    """A feature gate required by the operation is off."""


class UnexpectedOperation(AdmissionError):
    """The operation is neither CREATE nor UPDATE."""


class DecodeError(AdmissionError):
    """The candidate or previous object could not be decoded."""


class LookupFault(AdmissionError):
    """A cluster read failed for a reason other than "not found",
    or returned data that is internally inconsistent."""


class ReviewCancelled(AdmissionError):
    """The caller's context was cancelled or its deadline passed."""
