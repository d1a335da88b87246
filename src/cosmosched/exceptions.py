"""Custom exceptions for cosmosched."""


class CosmoschedError(Exception):
    """Base exception for all cosmosched errors."""

    pass


class ValidationError(CosmoschedError):
    """Raised when validation fails."""

    pass


class CatalogError(ValidationError):
    """Raised when a task template catalog is malformed."""

    pass


class MissingReferenceError(ValidationError):
    """Raised when a referenced ID does not exist."""

    pass


class ParseError(CosmoschedError):
    """Raised when YAML parsing fails."""

    pass


class ConfigError(CosmoschedError):
    """Raised when a configuration file is missing or invalid."""

    pass


class UnknownTaskError(CosmoschedError):
    """Raised when a task ID is not in the task store."""

    pass


class CommitRejectedError(CosmoschedError):
    """Raised when a task update fails validation and is not applied."""

    pass
