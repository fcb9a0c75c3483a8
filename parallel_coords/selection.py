from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable

from parallel_coords.schema import Record, record_ids


SelectionListener = Callable[["Record | None", "Record | None"], None]


@dataclass
class SelectionState:
    """Selected and hovered record, exposed to the host application.

    Records are matched by ``record_id`` so that a rebuilt record set keeps the same selection.
    """

    selected: Record | None = None
    hovered: Record | None = None
    listener: SelectionListener | None = None

    def set_hovered(self, record: Record | None) -> bool:
        if self.hovered is record:
            return False
        self.hovered = record
        self._notify()
        return True

    def clear_hovered(self) -> bool:
        return self.set_hovered(None)

    def click(self) -> bool:
        """Background click: select the hovered record, or toggle the selection off."""
        before = self.selected
        if self.hovered is not None and not _same(self.hovered, self.selected):
            self.selected = self.hovered
        else:
            self.selected = None
        if before is self.selected:
            return False
        self._notify()
        return True

    def resolve(self, records: Iterable[Record]) -> bool:
        """Re-resolve both references against a new record set; stale ones become None."""
        lookup = record_ids(records)
        selected = _resolve(self.selected, lookup)
        hovered = _resolve(self.hovered, lookup)
        if selected is self.selected and hovered is self.hovered:
            return False
        self.selected = selected
        self.hovered = hovered
        self._notify()
        return True

    def _notify(self) -> None:
        if self.listener is not None:
            self.listener(self.selected, self.hovered)


def _same(a: Record | None, b: Record | None) -> bool:
    if a is None or b is None:
        return a is b
    return a.record_id == b.record_id


def _resolve(record: Record | None, lookup: dict[object, Record]) -> Record | None:
    if record is None:
        return None
    return lookup.get(record.record_id)
