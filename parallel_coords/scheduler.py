from __future__ import annotations

from dataclasses import dataclass
from typing import Literal


RecomputeTier = Literal["records", "scales", "geometry"]
TIER_ORDER: tuple[RecomputeTier, ...] = ("records", "scales", "geometry")

DEFAULT_DEBOUNCE_S = 0.1


@dataclass
class DebouncedRecompute:
    """Coalesces bursts of upstream changes into a single dependency-ordered recompute.

    Tiers run in ``TIER_ORDER``; dirtying a tier also reruns every tier after it. Each request
    pushes the deadline back by ``debounce_s`` so only a quiet period triggers the redraw.
    """

    debounce_s: float = DEFAULT_DEBOUNCE_S
    _pending: RecomputeTier | None = None
    _due_at: float | None = None

    def __post_init__(self) -> None:
        if self.debounce_s < 0:
            raise ValueError("debounce_s must be >= 0")

    @property
    def pending(self) -> RecomputeTier | None:
        return self._pending

    @property
    def due_at(self) -> float | None:
        return self._due_at

    def request(self, tier: RecomputeTier, now: float) -> None:
        if tier not in TIER_ORDER:
            raise ValueError(f"unknown recompute tier: {tier}")
        if self._pending is None or TIER_ORDER.index(tier) < TIER_ORDER.index(self._pending):
            self._pending = tier
        self._due_at = float(now) + self.debounce_s

    def due(self, now: float) -> bool:
        return self._due_at is not None and now >= self._due_at

    def take(self, now: float) -> tuple[RecomputeTier, ...]:
        if not self.due(now):
            return ()
        return self.flush()

    def flush(self) -> tuple[RecomputeTier, ...]:
        if self._pending is None:
            return ()
        tiers = TIER_ORDER[TIER_ORDER.index(self._pending) :]
        self._pending = None
        self._due_at = None
        return tiers
