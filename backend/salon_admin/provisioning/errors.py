from collections.abc import Iterable

from ..errors import ConflictError, PermissionError, ValidationError


class MissingFieldsError(ValidationError):
    """Raised before submission when required form fields are empty."""

    code = "MISSING_FIELDS"
    message = "Please fill in all required fields"

    def __init__(self, fields: Iterable[str]):
        self.fields = tuple(fields)
        super().__init__(details={"fields": list(self.fields)})


class UnknownPermissionError(ValidationError):
    """Raised when a permission key outside the catalog is selected."""

    code = "UNKNOWN_PERMISSION"

    def __init__(self, permission: str):
        self.permission = permission
        super().__init__(
            f"Unknown permission '{permission}'",
            details={"permission": permission},
        )


class InvalidTransitionError(ConflictError):
    """Raised when a workflow operation is not allowed in the current state."""

    code = "INVALID_TRANSITION"

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(
            f"Cannot {operation} while the form is {state}",
            details={"operation": operation, "state": state},
        )


class SelfRemovalError(ConflictError):
    """Raised when an admin tries to remove their own account."""

    code = "SELF_REMOVAL"
    message = "You cannot remove your own admin account"


class RemovalNotAllowedError(PermissionError):
    """Raised when the acting principal may not remove admin accounts."""

    message = "Only main admins can remove admin accounts"
