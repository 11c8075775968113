"""Shared domain error messages and error types."""

from typing import Iterable, Optional

from queststats.domain.entities import DataSource


class DomainError(ValueError):
    """Base class for domain-level errors.

    Subclasses provide semantic categories while preserving ValueError
    compatibility for existing error handling.
    """


class ValidationError(DomainError):
    """Invalid input or failed validation in domain logic."""


class NotFoundError(DomainError):
    """Requested domain entity or path does not exist."""


class ConfigValidationError(ValidationError):
    """Chart configuration is not computable.

    Raised before any records are fetched.
    """

    def __init__(self, problems: Iterable[str]):
        self.problems = tuple(problems)
        super().__init__("Invalid chart configuration: " + "; ".join(self.problems))


class MissingFieldError(NotFoundError):
    """A configured field id does not exist for the data source."""

    def __init__(self, data_source: DataSource, field_id: Optional[str]):
        self.data_source = data_source
        self.field_id = field_id
        super().__init__(field_not_found(data_source, field_id))


class DataSourceUnavailableError(DomainError):
    """The repository of a data source failed to produce records."""

    def __init__(self, data_source: DataSource, reason: str):
        self.data_source = data_source
        super().__init__(f"Data source '{data_source.value}' unavailable: {reason}")


def field_not_found(data_source: DataSource, field_id: Optional[str]) -> str:
    """Return message for an unknown field id."""
    return f"Field '{field_id}' not found for data source '{data_source.value}'"


def template_not_found(name: str) -> str:
    """Return message for missing chart template."""
    return f"Chart template '{name}' not found"
