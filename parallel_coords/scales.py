from __future__ import annotations

import math
import numbers
from bisect import bisect_right
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Hashable, Literal, Sequence, Union

import numpy as np

from parallel_coords.brush import CategorySet, ClosedInterval, HalfOpenInterval
from parallel_coords.errors import EmptyDomainError, ScaleDomainError


ScaleKind = Literal["continuous", "logarithmic", "quantile", "point"]
SCALE_KINDS: tuple[str, ...] = ("continuous", "logarithmic", "quantile", "point")
NUMERIC_SCALE_KINDS: tuple[str, ...] = ("continuous", "logarithmic", "quantile")

DEFAULT_QUANTILE_COUNT = 20
DEFAULT_POINT_PADDING = 0.5
DEFAULT_TICK_TARGET = 6

# Relative slack applied when inverting pixels back to values, so that a value whose pixel
# sits exactly on a brush edge survives the float round trip.
_INVERT_EPS = 1e-9


@dataclass(frozen=True)
class ContinuousScale:
    """Linear value -> pixel map from ``[vmin, vmax]`` onto ``[0, extent]``."""

    vmin: float
    vmax: float
    extent: float
    kind: ScaleKind = field(default="continuous", init=False)

    @property
    def degenerate(self) -> bool:
        return self.vmin == self.vmax

    def _forward(self, value: Any) -> float:
        return float(value)

    def _backward(self, t: float) -> float:
        return t

    def __call__(self, value: Any) -> float:
        if self.degenerate:
            return self.extent / 2.0
        t = self._forward(value)
        lo = self._forward(self.vmin)
        hi = self._forward(self.vmax)
        return (t - lo) / (hi - lo) * self.extent

    def invert(self, pixel: float) -> float:
        if self.degenerate:
            return self.vmin
        lo = self._forward(self.vmin)
        hi = self._forward(self.vmax)
        return self._backward(lo + (float(pixel) / self.extent) * (hi - lo))

    def invert_range(self, p0: float, p1: float) -> ClosedInterval:
        lo_px, hi_px = sorted((float(p0), float(p1)))
        if self.degenerate:
            mid = self.extent / 2.0
            if lo_px <= mid <= hi_px:
                return ClosedInterval(self.vmin, self.vmax)
            return ClosedInterval.empty()
        lo = self.invert(lo_px)
        hi = self.invert(hi_px)
        slack = (self.vmax - self.vmin) * _INVERT_EPS
        return ClosedInterval(lo - slack, hi + slack)

    def ticks(self, target: int = DEFAULT_TICK_TARGET) -> list[tuple[float, float]]:
        values = generate_nice_ticks(self.vmin, self.vmax, target)
        inside = values[(values >= self.vmin - 1e-12) & (values <= self.vmax + 1e-12)]
        if inside.size == 0:
            inside = np.asarray([self.vmin, self.vmax], dtype=np.float64)
        return [(float(v), self(float(v))) for v in np.unique(inside)]

    def tick_labels(self, target: int = DEFAULT_TICK_TARGET) -> list[tuple[str, float]]:
        ticks = self.ticks(target)
        labels = format_ticks_for_axis(np.asarray([v for v, _ in ticks], dtype=np.float64))
        return [(label, px) for label, (_, px) in zip(labels, ticks, strict=True)]


@dataclass(frozen=True)
class LogScale(ContinuousScale):
    """Continuous scale in log10 space. Requires a strictly positive domain."""

    kind: ScaleKind = field(default="logarithmic", init=False)

    def __post_init__(self) -> None:
        if self.vmin <= 0 or self.vmax <= 0:
            raise ScaleDomainError("logarithmic scale requires strictly positive values")

    def _forward(self, value: Any) -> float:
        return math.log10(float(value))

    def _backward(self, t: float) -> float:
        return float(10.0**t)

    def invert_range(self, p0: float, p1: float) -> ClosedInterval:
        lo_px, hi_px = sorted((float(p0), float(p1)))
        if self.degenerate:
            return super().invert_range(lo_px, hi_px)
        lo = self.invert(lo_px)
        hi = self.invert(hi_px)
        return ClosedInterval(lo * (1.0 - _INVERT_EPS), hi * (1.0 + _INVERT_EPS))

    def ticks(self, target: int = DEFAULT_TICK_TARGET) -> list[tuple[float, float]]:
        lo_exp = math.ceil(math.log10(self.vmin) - 1e-12)
        hi_exp = math.floor(math.log10(self.vmax) + 1e-12)
        values = [10.0**e for e in range(lo_exp, hi_exp + 1)]
        if len(values) < 2:
            values = sorted({self.vmin, self.vmax})
        return [(v, self(v)) for v in values]

    def tick_labels(self, target: int = DEFAULT_TICK_TARGET) -> list[tuple[str, float]]:
        return [(format_tick(v), px) for v, px in self.ticks(target)]


@dataclass(frozen=True)
class QuantileScale:
    """Rank-bucketed scale: a value lands on the pixel of its quantile bucket.

    ``thresholds`` are the ``count - 1`` interior quantiles of the sorted domain. Bucket ``i``
    holds values ``v`` with ``thresholds[i - 1] <= v < thresholds[i]``; the first bucket starts
    at the domain minimum and the last one is unbounded above. A single-valued domain sits at
    the axis midpoint.
    """

    domain_min: float
    domain_max: float
    thresholds: tuple[float, ...]
    extent: float
    kind: ScaleKind = field(default="quantile", init=False)

    @classmethod
    def from_values(cls, values: Sequence[float], extent: float, count: int = DEFAULT_QUANTILE_COUNT) -> "QuantileScale":
        if count < 2:
            raise ValueError("quantile count must be >= 2")
        arr = np.sort(np.asarray(values, dtype=np.float64))
        probs = np.arange(1, count, dtype=np.float64) / float(count)
        thresholds = np.quantile(arr, probs)
        return cls(
            domain_min=float(arr[0]),
            domain_max=float(arr[-1]),
            thresholds=tuple(float(t) for t in thresholds),
            extent=float(extent),
        )

    @property
    def degenerate(self) -> bool:
        return self.domain_min == self.domain_max

    @property
    def bucket_count(self) -> int:
        return len(self.thresholds) + 1

    def bucket(self, value: Any) -> int:
        return bisect_right(self.thresholds, float(value))

    def bucket_pixel(self, bucket: int) -> float:
        return self.extent * bucket / float(self.bucket_count - 1)

    def bucket_bounds(self, bucket: int) -> tuple[float, float]:
        lo = self.thresholds[bucket - 1] if bucket > 0 else self.domain_min
        hi = self.thresholds[bucket] if bucket < len(self.thresholds) else math.inf
        return (lo, hi)

    def __call__(self, value: Any) -> float:
        if self.degenerate:
            return self.extent / 2.0
        return self.bucket_pixel(self.bucket(value))

    def invert_range(self, p0: float, p1: float) -> HalfOpenInterval:
        lo_px, hi_px = sorted((float(p0), float(p1)))
        if self.degenerate:
            if lo_px <= self.extent / 2.0 <= hi_px:
                return HalfOpenInterval(self.domain_min, math.nextafter(self.domain_min, math.inf))
            return HalfOpenInterval.empty()
        covered = [b for b in range(self.bucket_count) if lo_px <= self.bucket_pixel(b) <= hi_px]
        if not covered:
            return HalfOpenInterval.empty()
        lo, _ = self.bucket_bounds(covered[0])
        _, hi = self.bucket_bounds(covered[-1])
        return HalfOpenInterval(lo, hi)

    def ticks(self, target: int = DEFAULT_TICK_TARGET) -> list[tuple[float, float]]:
        if self.degenerate:
            return [(self.domain_min, self.extent / 2.0)]
        # Ticks sit on quantile boundaries so that collapsed buckets never stack labels.
        out: list[tuple[float, float]] = [(self.domain_min, self(self.domain_min))]
        seen_px = {out[0][1]}
        for t in self.thresholds:
            px = self(t)
            if px in seen_px:
                continue
            seen_px.add(px)
            out.append((t, px))
        return out

    def tick_labels(self, target: int = DEFAULT_TICK_TARGET) -> list[tuple[str, float]]:
        return [(format_tick(v), px) for v, px in self.ticks(target)]


@dataclass(frozen=True)
class PointScale:
    """Evenly spaced ticks, one per category, padded by ``padding`` steps at both ends."""

    categories: tuple[Hashable, ...]
    extent: float
    padding: float = DEFAULT_POINT_PADDING
    kind: ScaleKind = field(default="point", init=False)

    def __post_init__(self) -> None:
        if not self.categories:
            raise EmptyDomainError()
        if self.padding < 0:
            raise ValueError("point padding must be >= 0")
        if len(set(self.categories)) != len(self.categories):
            raise ValueError("point scale categories must be distinct")

    @property
    def step(self) -> float:
        n = len(self.categories)
        return self.extent / max(1.0, n - 1 + 2.0 * self.padding)

    @cached_property
    def positions(self) -> tuple[float, ...]:
        n = len(self.categories)
        step = self.step
        start = (self.extent - step * (n - 1)) / 2.0
        return tuple(start + step * i for i in range(n))

    @cached_property
    def _lookup(self) -> dict[Hashable, float]:
        return dict(zip(self.categories, self.positions, strict=True))

    def __call__(self, value: Any) -> float:
        try:
            return self._lookup[value]
        except (KeyError, TypeError) as exc:
            raise ScaleDomainError(f"value {value!r} is not a category of this axis") from exc

    def invert_range(self, p0: float, p1: float) -> CategorySet:
        lo_px, hi_px = sorted((float(p0), float(p1)))
        picked = [c for c, px in zip(self.categories, self.positions, strict=True) if lo_px <= px <= hi_px]
        return CategorySet(frozenset(picked))

    def ticks(self, target: int = DEFAULT_TICK_TARGET) -> list[tuple[Hashable, float]]:
        return list(zip(self.categories, self.positions, strict=True))

    def tick_labels(self, target: int = DEFAULT_TICK_TARGET) -> list[tuple[str, float]]:
        return [(_format_category(c), px) for c, px in self.ticks(target)]


AxisScale = Union[ContinuousScale, LogScale, QuantileScale, PointScale]


def build_scale(
    domain_values: Sequence[Any],
    extent: float,
    kind: ScaleKind,
    *,
    quantile_count: int = DEFAULT_QUANTILE_COUNT,
    padding: float = DEFAULT_POINT_PADDING,
    category_order: Sequence[Hashable] | None = None,
    column: str | int | None = None,
) -> AxisScale:
    if kind not in SCALE_KINDS:
        raise ValueError(f"unsupported scale kind: {kind}")
    if extent <= 0:
        raise ValueError("scale pixel extent must be > 0")
    if len(domain_values) == 0:
        raise EmptyDomainError(column)

    if kind == "point":
        return PointScale(categories=_ordered_categories(domain_values, category_order), extent=float(extent), padding=padding)

    numeric = _coerce_numeric(domain_values, column=column)
    vmin = float(np.min(numeric))
    vmax = float(np.max(numeric))
    if kind == "continuous":
        return ContinuousScale(vmin=vmin, vmax=vmax, extent=float(extent))
    if kind == "logarithmic":
        return LogScale(vmin=vmin, vmax=vmax, extent=float(extent))
    return QuantileScale.from_values(numeric, extent=float(extent), count=quantile_count)


def natural_sort_key(value: Any) -> tuple[int, float, str]:
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return (0, float(value), "")
    if isinstance(value, str):
        return (1, 0.0, value)
    return (2, 0.0, f"{type(value).__name__}:{value!r}")


def _ordered_categories(values: Sequence[Any], category_order: Sequence[Hashable] | None) -> tuple[Hashable, ...]:
    distinct = list(dict.fromkeys(values))
    if category_order is None:
        return tuple(sorted(distinct, key=natural_sort_key))
    present = set(distinct)
    ordered = [c for c in dict.fromkeys(category_order) if c in present]
    listed = set(ordered)
    # Values the caller did not list keep natural order after the listed ones.
    ordered.extend(sorted((v for v in distinct if v not in listed), key=natural_sort_key))
    return tuple(ordered)


def _coerce_numeric(values: Sequence[Any], *, column: str | int | None) -> np.ndarray:
    out = np.empty(len(values), dtype=np.float64)
    for i, raw in enumerate(values):
        try:
            out[i] = float(raw)
        except (TypeError, ValueError) as exc:
            raise ScaleDomainError(f"column {column!r} has non-numeric value {raw!r}") from exc
    if not np.all(np.isfinite(out)):
        raise ScaleDomainError(f"column {column!r} has non-finite values")
    return out


def _format_category(value: Any) -> str:
    if isinstance(value, float):
        return format_tick(value)
    return str(value)


def generate_nice_ticks(vmin: float, vmax: float, target: int) -> np.ndarray:
    """Multiples of a 1/2/5 x 10^k step that fall inside ``[vmin, vmax]``."""
    if target <= 0:
        raise ValueError("target must be > 0")
    if vmin == vmax:
        return np.asarray([vmin], dtype=np.float64)
    step = _nice_step((vmax - vmin) / max(target - 1, 1))
    first = math.ceil(vmin / step - 1e-9)
    last = math.floor(vmax / step + 1e-9)
    ticks = np.arange(first, last + 1, dtype=np.float64) * step
    # Float drift near zero would otherwise print as "-0".
    ticks[np.abs(ticks) < step * 1e-9] = 0.0
    return ticks


def format_tick(value: float, *, step: float | None = None) -> str:
    if not math.isfinite(value):
        return str(value)
    if step is None or not step > 0:
        out = f"{value:.6g}"
    else:
        if abs(value) < step * 1e-9:
            value = 0.0
        out = f"{value:.{_decimals_for_step(step)}f}"
        if "." in out:
            out = out.rstrip("0").rstrip(".")
    return "0" if out == "-0" else out


def format_ticks_for_axis(ticks: np.ndarray) -> list[str]:
    """Labels sharing one precision, taken from the spacing of the first two ticks."""
    if ticks.size < 2:
        return [format_tick(float(v)) for v in ticks]
    step = float(abs(ticks[1] - ticks[0]))
    return [format_tick(float(v), step=step) for v in ticks]


def _nice_step(raw: float) -> float:
    exp = math.floor(math.log10(raw))
    frac = raw / 10.0**exp
    for limit, nice in ((1.5, 1.0), (3.0, 2.0), (7.0, 5.0)):
        if frac < limit:
            return nice * 10.0**exp
    return 10.0 ** (exp + 1)


def _decimals_for_step(step: float) -> int:
    decimals = max(0, -math.floor(math.log10(step)))
    while decimals < 12 and abs(round(step, decimals) - step) > step * 1e-9:
        decimals += 1
    return decimals
