"""Custom exceptions for the multicontext engine."""

from typing import Sequence


class MulticontextError(Exception):
    """Base class for all errors raised by the engine."""


class NotFoundError(MulticontextError, KeyError):
    """Raised when a referenced item or context does not exist.

    Attributes:
        value: The item value that could not be found
        context: The path the lookup was made from (may be empty)
    """

    def __init__(self, value: str | None, context: Sequence[str] = ()):
        self.value = value
        self.context = tuple(context)
        if self.context:
            message = f'Unknown key: "{value}", from context: {",".join(self.context)}'
        else:
            message = f'Unknown key: "{value}"'
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return self.message


class InvariantViolationError(MulticontextError):
    """Raised when the item store and the context children index disagree.

    Never triggered by user input; the consistency checker raises it so
    tests can assert against a broken mutation.

    Attributes:
        problems: Human-readable description of every mismatch found
    """

    def __init__(self, problems: list[str]):
        self.problems = problems
        summary = "; ".join(problems[:5])
        if len(problems) > 5:
            summary += f" (and {len(problems) - 5} more)"
        super().__init__(f"Index invariant violated: {summary}")


class EmptyContextError(MulticontextError):
    """Raised under the 'error' redirect policy when a derived context is empty.

    Attributes:
        path: The focus path whose only subheading has no children
        redirect_to: The bare signifier path the caller could navigate to
    """

    def __init__(self, path: Sequence[str], redirect_to: Sequence[str]):
        self.path = tuple(path)
        self.redirect_to = tuple(redirect_to)
        super().__init__(
            f"Context {'/'.join(self.path)} has no children in its only subheading"
        )


class StoreCorruptedError(MulticontextError, ValueError):
    """Raised when a persisted store file cannot be parsed.

    Attributes:
        path: Path to the offending file
    """

    def __init__(self, path: str, message: str = "Malformed store file"):
        self.path = path
        self.message = message
        super().__init__(f"{message}: {path}")
