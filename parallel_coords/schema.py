from __future__ import annotations

import math
import numbers
from dataclasses import dataclass, field
from typing import Any, Hashable, Iterable, Literal, Mapping, Sequence


ValueKind = Literal["numeric", "categorical"]
VALUE_KINDS: tuple[str, ...] = ("numeric", "categorical")


@dataclass(frozen=True)
class Column:
    index: int
    name: str
    value_kind: ValueKind = "numeric"

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("Column.index must be >= 0")
        if not self.name.strip():
            raise ValueError("Column.name must be non-empty")
        if self.value_kind not in VALUE_KINDS:
            raise ValueError(f"Unsupported column value kind: {self.value_kind}")

    @property
    def is_numeric(self) -> bool:
        return self.value_kind == "numeric"


@dataclass(frozen=True)
class Schema:
    columns: tuple[Column, ...]

    def __post_init__(self) -> None:
        for pos, column in enumerate(self.columns):
            if column.index != pos:
                raise ValueError(f"Schema column at position {pos} has index {column.index}")
        names = [c.name for c in self.columns]
        if len(set(names)) != len(names):
            raise ValueError("Schema column names must be unique")

    @classmethod
    def from_names(cls, names: Sequence[str], *, categorical: Iterable[str] = ()) -> "Schema":
        categorical_set = set(categorical)
        return cls(
            columns=tuple(
                Column(index=i, name=name, value_kind="categorical" if name in categorical_set else "numeric")
                for i, name in enumerate(names)
            )
        )

    def __len__(self) -> int:
        return len(self.columns)

    def column(self, index: int) -> Column:
        return self.columns[index]

    def index_of(self, name: str) -> int:
        for column in self.columns:
            if column.name == name:
                return column.index
        raise KeyError(name)


@dataclass(frozen=True, eq=False)
class Record:
    """One session group: an identity plus a value (or nothing) per column index.

    Records compare by identity only through :attr:`record_id`; the engine never relies on
    object identity, so a fresh instance carrying the same id is the same record.
    """

    record_id: Hashable
    values: Mapping[int, Any] = field(default_factory=dict)

    def value(self, column_index: int) -> Any:
        return self.values.get(column_index)

    def has_value(self, column_index: int) -> bool:
        return is_present(self.values.get(column_index))


def is_present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, numbers.Real) and not isinstance(value, int) and not math.isfinite(value):
        return False
    return True


def is_valid_record(record: Record, schema: Schema) -> bool:
    return all(record.has_value(column.index) for column in schema.columns)


def valid_records(records: Iterable[Record], schema: Schema) -> tuple[Record, ...]:
    # Records missing any column value are excluded from scales and rendering alike.
    return tuple(r for r in records if is_valid_record(r, schema))


def domain_values(records: Sequence[Record], column_index: int) -> list[Any]:
    return [r.value(column_index) for r in records if r.has_value(column_index)]


def record_ids(records: Iterable[Record]) -> dict[Hashable, Record]:
    out: dict[Hashable, Record] = {}
    for record in records:
        out.setdefault(record.record_id, record)
    return out
