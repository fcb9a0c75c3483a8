from __future__ import annotations


class PlotDataError(ValueError):
    """Raised when plot input data cannot be turned into axes or lines."""


class EmptyDomainError(PlotDataError):
    """A column has no valid record providing a value, so no scale can be built for it."""

    def __init__(self, column: str | int | None = None) -> None:
        self.column = column
        if column is None:
            super().__init__("scale domain is empty")
        else:
            super().__init__(f"scale domain is empty for column {column!r}")


class ScaleDomainError(PlotDataError):
    """The domain is non-empty but unusable for the requested scale kind."""
