"""Exception and warning types for gpkern."""


class KernelError(Exception):
    """Base class for all kernel framework errors."""


class InvalidConfigurationError(KernelError, ValueError):
    """Bad construction arguments (columns, parameters or family)."""


class MissingColumnError(KernelError, KeyError):
    """A configured feature column is absent from a dataset."""

    def __init__(self, column: str, available=None):
        self.column = column
        self.available = list(available) if available is not None else None
        message = f"Column '{column}' not found in data"
        if self.available is not None:
            message += f". Available columns: {self.available}"
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError quotes its argument by default
        return self.args[0]


class TypeMismatchError(KernelError, TypeError):
    """A selected feature column is not numeric."""


class InvalidModeError(KernelError, ValueError):
    """Diagonal-only evaluation requested together with a second dataset."""


class DiagonalOffsetWarning(UserWarning):
    """
    The diagonal fast path ignores a non-zero offset.

    Diagonal-only evaluation of the linear kernel returns sigma^2 * ||x||^2,
    while the full matrix uses sigma^2 * ||x - c||^2. The two only agree
    when c == 0.
    """
