"""Service-level exceptions.

Routers translate these into HTTP responses; see ``command_x.api.app``.
"""

from __future__ import annotations


class CommandXError(Exception):
    """Base class for errors raised by the services."""

    code = "ERROR"


class ValidationError(CommandXError):
    """Raised when input is malformed or out of range, before any write."""

    code = "VALIDATION_ERROR"

    def __init__(self, operation: str, errors: list[str] | str):
        self.operation = operation
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__(f"{operation} failed: {'; '.join(self.errors)}")


class NotFoundError(CommandXError):
    """Raised when a referenced row does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: object):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class PermissionDeniedError(CommandXError):
    """Raised when the caller's role may not record the requested decision."""

    code = "PERMISSION_DENIED"

    def __init__(self, role: str | None, reason: str | None = None):
        self.role = role
        self.reason = reason
        msg = f"Role '{role}' may not record approvals" if role else "No role supplied"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
