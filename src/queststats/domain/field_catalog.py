"""Field catalog: the queryable fields of every data source.

The catalog is an immutable lookup table keyed by ``(data_source, field_id)``.
Each entry pairs a ``DataField`` descriptor with the extraction function that
reads and normalizes the field's value from a record. Extraction never raises
for missing or malformed attributes; such values extract as ``None``.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Iterable, Mapping, Optional

from queststats.domain.entities import DataField, DataSource, FieldDataType, Record
from queststats.domain.errors import MissingFieldError
from queststats.utils.date_parser import coerce_datetime

Extractor = Callable[[Record], Any]


def to_number(value: Any) -> Optional[float]:
    """Normalize a NUMBER value to float; booleans are not numbers."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def to_boolean(value: Any) -> Optional[bool]:
    """Normalize a BOOLEAN value."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "yes", "1"):
            return True
        if lowered in ("false", "no", "0"):
            return False
    return None


def to_enum(value: Any) -> Optional[str]:
    """Normalize an ENUM value to its member name."""
    if value is None:
        return None
    if isinstance(value, Enum):
        return value.name
    text = str(value)
    return text if text else None


def to_string(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


_CONVERTERS: dict[FieldDataType, Callable[[Any], Any]] = {
    FieldDataType.NUMBER: to_number,
    FieldDataType.STRING: to_string,
    FieldDataType.DATE: coerce_datetime,
    FieldDataType.ENUM: to_enum,
    FieldDataType.BOOLEAN: to_boolean,
}


def column(field_id: str, data_type: FieldDataType) -> Extractor:
    """Build an extractor that reads one key and normalizes it by type."""
    convert = _CONVERTERS[data_type]

    def extract(record: Record) -> Any:
        return convert(record.get(field_id))

    return extract


def _event_duration_minutes(record: Record) -> Optional[float]:
    """Duration of a calendar event, derived from its bounds if not stored."""
    stored = to_number(record.get("duration_minutes"))
    if stored is not None:
        return stored
    starts_at = coerce_datetime(record.get("starts_at"))
    ends_at = coerce_datetime(record.get("ends_at"))
    if starts_at is None or ends_at is None:
        return None
    return (ends_at - starts_at).total_seconds() / 60.0


@dataclass(frozen=True)
class CatalogEntry:
    """A field descriptor together with its extraction function."""

    field: DataField
    extractor: Extractor


class FieldCatalog:
    """Static registry of queryable fields per data source."""

    def __init__(
        self,
        entries: Iterable[CatalogEntry],
        time_fields: Mapping[DataSource, str],
        scope_keys: Mapping[DataSource, str],
    ):
        """Initialize the catalog.

        Args:
            entries: Catalog entries in display order
            time_fields: Default timestamp field id per data source
            scope_keys: Record key holding the category id per data source
        """
        by_key: dict[tuple[DataSource, str], CatalogEntry] = {}
        by_source: dict[DataSource, list[DataField]] = {source: [] for source in DataSource}
        for entry in entries:
            key = (entry.field.data_source, entry.field.id)
            if key in by_key:
                raise ValueError(f"Duplicate field '{entry.field.id}' for {entry.field.data_source.name}")
            by_key[key] = entry
            by_source[entry.field.data_source].append(entry.field)

        for source, field_id in time_fields.items():
            entry = by_key.get((source, field_id))
            if entry is None or entry.field.data_type != FieldDataType.DATE:
                raise ValueError(f"Time field '{field_id}' of {source.name} must be a DATE field")

        self._entries = MappingProxyType(by_key)
        self._fields = MappingProxyType({source: tuple(fields) for source, fields in by_source.items()})
        self._time_fields = MappingProxyType(dict(time_fields))
        self._scope_keys = MappingProxyType(dict(scope_keys))

    def fields_for(self, data_source: DataSource) -> tuple[DataField, ...]:
        """Return the fields of a data source in catalog order."""
        return self._fields.get(data_source, ())

    def find(self, data_source: DataSource, field_id: Optional[str]) -> Optional[DataField]:
        """Return the field for an id, or None if unknown."""
        if field_id is None:
            return None
        entry = self._entries.get((data_source, field_id))
        return entry.field if entry is not None else None

    def resolve(self, data_source: DataSource, field_id: Optional[str]) -> DataField:
        """Return the field for an id.

        Raises:
            MissingFieldError: If the id is unknown for the data source
        """
        found = self.find(data_source, field_id)
        if found is None:
            raise MissingFieldError(data_source, field_id)
        return found

    def extract(self, data_source: DataSource, field_id: str, record: Record) -> Any:
        """Extract a normalized field value from a record (None when absent)."""
        entry = self._entries.get((data_source, field_id))
        if entry is None:
            raise MissingFieldError(data_source, field_id)
        return entry.extractor(record)

    def extractor(self, field: DataField) -> Extractor:
        """Return the extraction function of a resolved field."""
        return self._entries[(field.data_source, field.id)].extractor

    def time_field(self, data_source: DataSource, x_field: Optional[DataField] = None) -> Optional[DataField]:
        """Return the date field used for time-range filtering.

        The X field is used when it is a DATE field; otherwise the data
        source's default timestamp field.
        """
        if x_field is not None and x_field.data_type == FieldDataType.DATE:
            return x_field
        field_id = self._time_fields.get(data_source)
        return self.find(data_source, field_id)

    def scope_value(self, data_source: DataSource, record: Record) -> Any:
        """Return the category id a record belongs to, for category scoping."""
        key = self._scope_keys.get(data_source)
        if key is None:
            return None
        return record.get(key)


def _build_entries() -> list[CatalogEntry]:
    specs: list[tuple[DataSource, str, str, FieldDataType]] = [
        (DataSource.TASKS, "title", "Title", FieldDataType.STRING),
        (DataSource.TASKS, "category_name", "Category", FieldDataType.ENUM),
        (DataSource.TASKS, "priority", "Priority", FieldDataType.ENUM),
        (DataSource.TASKS, "difficulty", "Difficulty", FieldDataType.NUMBER),
        (DataSource.TASKS, "xp_reward", "XP reward", FieldDataType.NUMBER),
        (DataSource.TASKS, "is_completed", "Completed", FieldDataType.BOOLEAN),
        (DataSource.TASKS, "is_overdue", "Overdue", FieldDataType.BOOLEAN),
        (DataSource.TASKS, "completed_at", "Completion date", FieldDataType.DATE),
        (DataSource.TASKS, "created_at", "Creation date", FieldDataType.DATE),
        (DataSource.TASKS, "due_date", "Due date", FieldDataType.DATE),
        (DataSource.TASKS, "estimated_minutes", "Estimated minutes", FieldDataType.NUMBER),
        (DataSource.XP_TRANSACTIONS, "amount", "XP amount", FieldDataType.NUMBER),
        (DataSource.XP_TRANSACTIONS, "source", "XP source", FieldDataType.ENUM),
        (DataSource.XP_TRANSACTIONS, "timestamp", "Timestamp", FieldDataType.DATE),
        (DataSource.CATEGORIES, "name", "Category name", FieldDataType.STRING),
        (DataSource.CATEGORIES, "level", "Level", FieldDataType.NUMBER),
        (DataSource.CATEGORIES, "xp", "XP", FieldDataType.NUMBER),
        (DataSource.CATEGORIES, "total_xp", "Total XP", FieldDataType.NUMBER),
        (DataSource.CATEGORIES, "is_active", "Active", FieldDataType.BOOLEAN),
        (DataSource.CATEGORIES, "created_at", "Creation date", FieldDataType.DATE),
        (DataSource.CALENDAR_EVENTS, "title", "Title", FieldDataType.STRING),
        (DataSource.CALENDAR_EVENTS, "category_name", "Category", FieldDataType.ENUM),
        (DataSource.CALENDAR_EVENTS, "status", "Status", FieldDataType.ENUM),
        (DataSource.CALENDAR_EVENTS, "xp", "XP", FieldDataType.NUMBER),
        (DataSource.CALENDAR_EVENTS, "rewarded", "Rewarded", FieldDataType.BOOLEAN),
        (DataSource.CALENDAR_EVENTS, "starts_at", "Start", FieldDataType.DATE),
        (DataSource.CALENDAR_EVENTS, "ends_at", "End", FieldDataType.DATE),
    ]
    entries = [
        CatalogEntry(DataField(field_id, label, data_type, source), column(field_id, data_type))
        for source, field_id, label, data_type in specs
    ]
    entries.append(
        CatalogEntry(
            DataField("duration_minutes", "Duration (minutes)", FieldDataType.NUMBER, DataSource.CALENDAR_EVENTS),
            _event_duration_minutes,
        )
    )
    return entries


DEFAULT_CATALOG = FieldCatalog(
    _build_entries(),
    time_fields={
        DataSource.TASKS: "created_at",
        DataSource.XP_TRANSACTIONS: "timestamp",
        DataSource.CATEGORIES: "created_at",
        DataSource.CALENDAR_EVENTS: "starts_at",
    },
    scope_keys={
        DataSource.TASKS: "category_id",
        DataSource.XP_TRANSACTIONS: "category_id",
        DataSource.CATEGORIES: "id",
        DataSource.CALENDAR_EVENTS: "category_id",
    },
)


def fields_for(data_source: DataSource) -> tuple[DataField, ...]:
    """Return the fields of a data source from the default catalog."""
    return DEFAULT_CATALOG.fields_for(data_source)
