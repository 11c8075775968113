"""Utility functions for queststats."""

from queststats.utils.date_parser import coerce_datetime, parse_date, parse_datetime, to_naive

__all__ = ["parse_date", "parse_datetime", "coerce_datetime", "to_naive"]
