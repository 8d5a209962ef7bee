"""
Admission envelope — the request/response contract of a webhook call.

The request carries the candidate object (and, for updates, the previous
version) as raw JSON. The response is either a bare allow, a structured
denial with field-attributed causes, or an error with no attribution.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import Field

from restore_admission.core.models.base import K8sModel

ADMISSION_API_VERSION = "admission.k8s.io/v1"
ADMISSION_KIND = "AdmissionReview"

# HTTP-style codes carried in the response status
CODE_BAD_REQUEST = 400
CODE_UNPROCESSABLE = 422


class Operation(StrEnum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CONNECT = "CONNECT"


class CauseType(StrEnum):
    """Kubernetes status cause types used by the admitter."""

    NOT_FOUND = "FieldValueNotFound"
    INVALID = "FieldValueInvalid"


class StatusCause(K8sModel):
    """One field-attributed reason a request was denied."""

    type: CauseType
    message: str
    field: str = ""

    @classmethod
    def invalid(cls, message: str, field: str) -> StatusCause:
        return cls(type=CauseType.INVALID, message=message, field=field)

    @classmethod
    def not_found(cls, message: str, field: str) -> StatusCause:
        return cls(type=CauseType.NOT_FOUND, message=message, field=field)


class GroupVersionResource(K8sModel):
    group: str = ""
    version: str = ""
    resource: str = ""


class AdmissionRequest(K8sModel):
    """The request half of an AdmissionReview.

    ``object`` and ``old_object`` are left undecoded: a mapping, a JSON
    string or JSON bytes. Decoding is the admitter's job so that a bad
    payload becomes an admission error rather than an envelope error.
    """

    uid: str = ""
    resource: GroupVersionResource = Field(default_factory=GroupVersionResource)
    operation: str = ""
    namespace: str = ""
    name: str = ""
    object: Any = None
    old_object: Any = None


class StatusDetails(K8sModel):
    causes: list[StatusCause] = Field(default_factory=list)


class ResponseStatus(K8sModel):
    """metav1.Status subset carried on a rejection."""

    message: str = ""
    reason: str | None = None
    code: int = CODE_BAD_REQUEST
    details: StatusDetails | None = None


class AdmissionResponse(K8sModel):
    uid: str = ""
    allowed: bool = False
    status: ResponseStatus | None = None

    @property
    def causes(self) -> list[StatusCause]:
        if self.status is None or self.status.details is None:
            return []
        return self.status.details.causes

    @property
    def errored(self) -> bool:
        """True for a transport-level failure (no field attribution)."""
        return (
            not self.allowed
            and self.status is not None
            and self.status.details is None
        )

    @classmethod
    def allow(cls, uid: str = "") -> AdmissionResponse:
        return cls(uid=uid, allowed=True)

    @classmethod
    def deny(cls, causes: list[StatusCause], uid: str = "") -> AdmissionResponse:
        """Structured denial — messages joined, every cause attached."""
        return cls(
            uid=uid,
            allowed=False,
            status=ResponseStatus(
                message=", ".join(c.message for c in causes),
                reason="Invalid",
                code=CODE_UNPROCESSABLE,
                details=StatusDetails(causes=list(causes)),
            ),
        )

    @classmethod
    def error(cls, message: str, uid: str = "") -> AdmissionResponse:
        return cls(
            uid=uid,
            allowed=False,
            status=ResponseStatus(message=message, code=CODE_BAD_REQUEST),
        )


class AdmissionReview(K8sModel):
    api_version: str = ADMISSION_API_VERSION
    kind: str = ADMISSION_KIND
    request: AdmissionRequest | None = None
    response: AdmissionResponse | None = None

    @classmethod
    def for_response(cls, response: AdmissionResponse) -> AdmissionReview:
        return cls(response=response)
