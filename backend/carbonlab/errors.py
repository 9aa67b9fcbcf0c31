"""Error taxonomy shared by services and routes."""

from __future__ import annotations

from typing import Any

from fastapi import HTTPException, status

# purpose: give callers a machine-readable kind alongside every rejected mutation
# status: active


class LabDataError(RuntimeError):
    """Base error for lab record operations."""

    kind = "LabDataError"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra: Any) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra

    def to_detail(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, **self.extra}


class InvalidRequest(LabDataError):
    """Raised when caller input fails a precondition."""

    kind = "InvalidRequest"
    status_code = status.HTTP_400_BAD_REQUEST


class Conflict(LabDataError):
    """Raised when a mutation would violate a data model invariant."""

    kind = "Conflict"
    status_code = status.HTTP_409_CONFLICT


class ExperimentsAlreadyAssigned(Conflict):
    """Raised when biochar experiments already belong to a lot."""

    def __init__(self, experiment_numbers: list[str], experiment_ids: list[str]) -> None:
        super().__init__(
            "some experiments already assigned",
            experiment_numbers=experiment_numbers,
            experiment_ids=experiment_ids,
        )
        self.experiment_numbers = experiment_numbers
        self.experiment_ids = experiment_ids


class RecordNotFound(LabDataError):
    """Raised when a referenced record does not exist."""

    kind = "NotFound"
    status_code = status.HTTP_404_NOT_FOUND


class StorageError(LabDataError):
    """Raised when the underlying transaction fails outside our control."""

    kind = "StorageError"


def to_http(exc: LabDataError) -> HTTPException:
    """Translate a lab error into the HTTP error FastAPI will render."""

    return HTTPException(status_code=exc.status_code, detail=exc.to_detail())
