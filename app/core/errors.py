import uuid


class AppError(Exception):
    """
    Base class for domain errors raised by the service layer.

    Each subclass maps to one HTTP status; the API layer renders them
    through `app_error_handler`.
    """
    status_code: int = 500

    def __init__(self, message: str, data: dict | None = None):
        super().__init__(message)
        self.message = message
        self.data = data or {}


class ValidationError(AppError, ValueError):
    """Malformed month, start > end, month outside group range, capacity reached."""
    status_code = 400


class NotFound(AppError):
    status_code = 404

    def __init__(self, entity: str, entity_id: object):
        super().__init__(f"{entity} not found", {"entity": entity, "id": str(entity_id)})
        self.entity = entity
        self.entity_id = entity_id


class DuplicateMonthClaim(AppError):
    """
    The (group, month) pair is already held by a member.
    """
    status_code = 409

    def __init__(self, group_id: uuid.UUID, month: str, reserved_by: str | None = None):
        if reserved_by:
            message = f"Month {month} is already assigned to {reserved_by} in this group"
        else:
            message = f"Month {month} is already assigned to another member in this group"
        super().__init__(
            message,
            {"group_id": str(group_id), "month": month, "reserved_by": reserved_by},
        )
        self.group_id = group_id
        self.month = month
        self.reserved_by = reserved_by


class TransientIOError(AppError):
    """
    The store could not be reached. Not retried here; the caller decides.
    """
    status_code = 503
