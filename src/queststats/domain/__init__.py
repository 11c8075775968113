"""Domain layer for queststats: the chart engine."""

from queststats.domain.entities import ChartDataResult, DynamicChartConfig
from queststats.domain.errors import (
    ConfigValidationError,
    DataSourceUnavailableError,
    DomainError,
    MissingFieldError,
)

__all__ = [
    "ChartDataResult",
    "DynamicChartConfig",
    "DomainError",
    "ConfigValidationError",
    "MissingFieldError",
    "DataSourceUnavailableError",
]
