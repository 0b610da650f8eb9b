"""Exception hierarchy surfaced by the automessage core."""

from __future__ import annotations


class AutoMessageError(Exception):
    """Base class for every error the CLI reports to the user."""


class ConfigurationError(AutoMessageError):
    """Configuration is missing or invalid, or a client cannot be built from it."""


class RepositoryError(AutoMessageError):
    """The path is not a repository, or a git operation failed."""


class CommitNotFoundError(RepositoryError):
    """A reference could not be resolved to a commit."""

    def __init__(self, reference: str) -> None:
        self.reference = reference
        super().__init__(f"Cannot resolve {reference!r} to a commit")


class InvalidRangeError(RepositoryError):
    """A range expression is not of the form ``start..end``."""

    def __init__(self, expression: str) -> None:
        self.expression = expression
        super().__init__(
            f"Invalid range {expression!r}: expected 'start..end' (e.g. v1.0.0..v1.1.0)"
        )


class TagExistsError(RepositoryError):
    """The tag name is already taken."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Tag {name!r} already exists")


class GenerationFailed(AutoMessageError):
    """The remote generation call did not produce a response."""

    def __init__(self, message: str, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(message)


class GenerationTimeout(GenerationFailed):
    """The last attempt ran past its time budget."""


class TransportError(GenerationFailed):
    """The provider or the network failed on every attempt."""


class DocumentMergeError(AutoMessageError):
    """The changelog file could not be read or rewritten."""
