# app/core/exceptions.py

from uuid import UUID
from typing import Any

from fastapi import HTTPException, status


# ------------------------------------------------------------
# Service-layer errors.
# They subclass ValueError so existing "except ValueError"
# handlers in routers keep working; routers that care map the
# subclasses to specific status codes.
# ------------------------------------------------------------
class HostelError(ValueError):
    """Base class for business-rule failures raised by services."""


class NotFoundError(HostelError):
    pass


class ValidationError(HostelError):
    """Missing/invalid input or an operation not allowed in the current state."""


class PermissionDeniedError(HostelError):
    pass


class CapacityExceededError(HostelError):
    def __init__(self, room_number: str, max_occupancy: int, current_occupancy: int, requested: int):
        self.room_number = room_number
        self.max_occupancy = max_occupancy
        self.current_occupancy = current_occupancy
        self.requested = requested
        super().__init__(
            f"Cannot assign {requested} student(s) to room {room_number}. "
            f"Room capacity is {max_occupancy}, current occupancy is {current_occupancy}"
        )


class AssignmentConflictError(HostelError):
    """
    One or more students already hold an active assignment.
    `conflicts` is a list of dicts: student_id, room_id, room_number.
    """

    def __init__(self, conflicts: list[dict[str, Any]], message: str | None = None):
        self.conflicts = conflicts
        super().__init__(
            message
            or f"{len(conflicts)} student(s) already have an active room assignment"
        )

    def to_detail(self) -> dict[str, Any]:
        return {
            "message": str(self),
            "conflicts": [
                {
                    key: str(value) if isinstance(value, UUID) else value
                    for key, value in conflict.items()
                }
                for conflict in self.conflicts
            ],
        }


# ------------------------------------------------------------
# Router helper: service error -> HTTPException
# ------------------------------------------------------------
def http_error(exc: ValueError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, PermissionDeniedError):
        return HTTPException(status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, AssignmentConflictError):
        return HTTPException(status.HTTP_409_CONFLICT, detail=exc.to_detail())
    if isinstance(exc, CapacityExceededError):
        return HTTPException(status.HTTP_409_CONFLICT, detail=str(exc))
    return HTTPException(status.HTTP_400_BAD_REQUEST, detail=str(exc))
