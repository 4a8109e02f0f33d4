"""Exceptions for files app.

Missing rows surface as the models' own ``DoesNotExist`` and bad input as
``django.core.exceptions.ValidationError``; the classes below cover the
remaining failure kinds of the domain.
"""


class NameConflictError(Exception):
    """Raised when a project or section name is already taken."""

    def __init__(
        self,
        message: str,
        errors: dict[str, str] | None = None,
    ) -> None:
        """Initialize NameConflictError.

        Args:
            message: Human readable summary.
            errors: Optional mapping of rejected name to reason.
        """
        self.errors = errors or {}
        super().__init__(message)


class StorageOperationError(Exception):
    """Raised when a filesystem operation guarding a DB change fails."""

    def __init__(self, operation: str, path: str) -> None:
        """Initialize StorageOperationError.

        Args:
            operation: Short description of the failed operation.
            path: Path the operation was applied to.
        """
        self.operation = operation
        self.path = path
        super().__init__(f'Storage operation failed: {operation} ({path})')


class LabelGenerationError(Exception):
    """Raised when the QR code or the label PDF cannot be rendered."""
