class FitnessLogError(Exception):
    """Base class for workout log errors."""


class ValidationError(FitnessLogError, ValueError):
    """Caller supplied data that violates an entity invariant."""


class ParseError(FitnessLogError, ValueError):
    """A free-text weight, sets or reps field is not a number."""

    def __init__(self, text: object) -> None:
        super().__init__(f"not a number: {text!r}")
        self.text = text


class StorageError(FitnessLogError, RuntimeError):
    """The underlying SQLite database could not be read or written."""
