from __future__ import annotations

from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any, Hashable

import numpy as np

from parallel_coords.errors import PlotDataError
from parallel_coords.schema import Column, Record, Schema, is_present


try:
    import pandas as pd
except Exception:  # pragma: no cover - optional dependency
    pd = None  # type: ignore[assignment]

try:
    import torch
except Exception:  # pragma: no cover - optional dependency
    torch = None  # type: ignore[assignment]


def schema_from_dict(payload: Mapping[str, object]) -> Schema:
    """Builds a schema from ``{"columns": [{"name": ..., "kind": "numeric"|"categorical"}]}``."""
    raw_columns = payload.get("columns")
    if not isinstance(raw_columns, list):
        raise TypeError("`columns` must be a list")
    columns: list[Column] = []
    for i, raw in enumerate(raw_columns):
        if isinstance(raw, str):
            columns.append(Column(index=i, name=raw))
            continue
        if not isinstance(raw, Mapping):
            raise TypeError("Each column must be a mapping or a name")
        columns.append(
            Column(
                index=i,
                name=str(raw["name"]),
                value_kind=str(raw.get("kind", raw.get("value_kind", "numeric"))),  # type: ignore[arg-type]
            )
        )
    return Schema(columns=tuple(columns))


def records_from_rows(
    rows: Sequence[Mapping[str, Any]],
    schema: Schema,
    *,
    id_key: str = "id",
) -> tuple[Record, ...]:
    """Session-group rows to records.

    A row is either ``{"id": ..., "values": {column name or index: value}}`` or a flat mapping
    keyed by column name plus ``id_key``. Rows without an id are numbered by position.
    """
    out: list[Record] = []
    for pos, row in enumerate(rows):
        if not isinstance(row, Mapping):
            raise TypeError("Each row must be a mapping")
        record_id: Hashable = row.get(id_key, pos)
        raw_values = row.get("values", row)
        if not isinstance(raw_values, Mapping):
            raise TypeError("`values` must be a mapping")
        values: dict[int, Any] = {}
        for column in schema.columns:
            raw = raw_values.get(column.name, raw_values.get(column.index))
            value = _coerce_cell(raw, numeric=column.is_numeric, label=column.name)
            if is_present(value):
                values[column.index] = value
        out.append(Record(record_id=record_id, values=values))
    return tuple(out)


def records_from_frame(
    data: Any,
    *,
    id_column: str | None = None,
    categorical: Sequence[str] = (),
) -> tuple[Schema, tuple[Record, ...]]:
    """One record per DataFrame row; non-numeric dtypes become categorical columns."""
    if pd is None:
        raise PlotDataError("pandas is required for DataFrame input")
    if not isinstance(data, pd.DataFrame):
        raise PlotDataError("`data` must be a pandas DataFrame")
    if id_column is not None and id_column not in data.columns:
        raise PlotDataError(f"column not found: {id_column}")

    names = [str(c) for c in data.columns if c != id_column]
    forced = set(categorical)
    kinds = {
        str(c): ("numeric" if _is_numeric_dtype(data[c]) and str(c) not in forced else "categorical")
        for c in data.columns
        if c != id_column
    }
    schema = Schema(columns=tuple(Column(index=i, name=n, value_kind=kinds[n]) for i, n in enumerate(names)))  # type: ignore[arg-type]
    ids = data[id_column].tolist() if id_column is not None else data.index.tolist()
    rows = [
        {"id": rid, "values": {name: raw for name, raw in zip(names, values, strict=True)}}
        for rid, values in zip(ids, data[[c for c in data.columns if c != id_column]].itertuples(index=False, name=None), strict=True)
    ]
    return schema, records_from_rows(rows, schema)


def records_from_array(
    values: Any,
    names: Sequence[str],
    *,
    ids: Sequence[Hashable] | None = None,
) -> tuple[Schema, tuple[Record, ...]]:
    """Numeric 2-D input (rows x columns) from numpy or torch; NaN cells are absent."""
    arr = _coerce_2d_numeric(values)
    if arr.shape[1] != len(names):
        raise PlotDataError(f"column count mismatch: {arr.shape[1]} != {len(names)}")
    if ids is not None and len(ids) != arr.shape[0]:
        raise PlotDataError(f"id count mismatch: {len(ids)} != {arr.shape[0]}")
    schema = Schema.from_names(names)
    records = []
    for i, row in enumerate(arr.tolist()):
        cells = {j: v for j, v in enumerate(row) if np.isfinite(v)}
        records.append(Record(record_id=ids[i] if ids is not None else i, values=cells))
    return schema, tuple(records)


def _is_numeric_dtype(series: Any) -> bool:
    if pd is None:
        return False
    try:
        return bool(pd.api.types.is_numeric_dtype(series)) and not pd.api.types.is_bool_dtype(series)
    except Exception:
        return False


def _coerce_cell(raw: Any, *, numeric: bool, label: str) -> Any:
    if raw is None:
        return None
    if pd is not None and raw is pd.NA:
        return None
    if not numeric:
        if isinstance(raw, float) and not np.isfinite(raw):
            return None
        return raw
    if isinstance(raw, Decimal):
        return float(raw)
    if isinstance(raw, np.generic):
        raw = raw.item()
    try:
        value = float(raw)
    except (TypeError, ValueError) as exc:
        raise PlotDataError(f"{label} contains non-numeric value: {raw!r}") from exc
    return value if np.isfinite(value) else None


def _coerce_2d_numeric(value: Any) -> np.ndarray:
    if torch is not None and isinstance(value, torch.Tensor):
        tensor = value.detach()
        if tensor.ndim != 2:
            raise PlotDataError("values must be 2-D")
        if tensor.is_cuda:
            tensor = tensor.cpu()
        return tensor.to(torch.float64).numpy()

    arr = np.asarray(value)
    if arr.ndim != 2:
        raise PlotDataError("values must be 2-D")
    if arr.dtype.kind not in {"i", "u", "f", "b"}:
        raise PlotDataError(f"unsupported dtype for numeric input: {arr.dtype}")
    return arr.astype(np.float64, copy=False)
