"""
Error taxonomy for the FIFA value analysis pipeline.

Parsing, normalisation and aggregation errors are fatal for a run.
Model fit errors are fatal only for the model family that raised them.
"""
from __future__ import annotations

from typing import Any, Hashable, Optional


class FifaValueAnalysisError(Exception):
    """Base class for every error raised by this package."""


class _FieldError(FifaValueAnalysisError, ValueError):
    """Shared shape of row-level field faults."""

    kind = "invalid"

    def __init__(self, field: str, raw: Any, row: Optional[Hashable] = None):
        self.field = field
        self.raw = raw
        self.row = row
        location = f" (row {row!r})" if row is not None else ""
        super().__init__(f"{self.kind} {field}: {raw!r}{location}")

    def with_row(self, row: Hashable) -> "_FieldError":
        """Return the same fault annotated with its row label."""
        return type(self)(self.field, self.raw, row)

    def __reduce__(self):
        return type(self), (self.field, self.raw, self.row)


class MalformedFieldError(_FieldError):
    """A raw string field could not be converted to its numeric unit."""

    kind = "malformed"


class UnknownCategoryError(_FieldError):
    """A raw categorical value lies outside the closed vocabulary."""

    kind = "unknown category for"


class IncompleteLeagueDataError(FifaValueAnalysisError, ValueError):
    """The club → league lookup lacks roster information needed for bucketing."""


class ModelFitError(FifaValueAnalysisError, RuntimeError):
    """A model family could not be fit on a given fold."""

    def __init__(self, model: str, fold: Optional[int], reason: str):
        self.model = model
        self.fold = fold
        self.reason = reason
        where = "global selection" if fold is None else f"fold {fold}"
        super().__init__(f"{model} failed on {where}: {reason}")

    def __reduce__(self):
        return type(self), (self.model, self.fold, self.reason)


class DegenerateFoldError(ModelFitError):
    """A fold has fewer training rows than the model family requires."""

    def __init__(self, model: str, fold: Optional[int], n_rows: int, minimum: int):
        self.n_rows = n_rows
        self.minimum = minimum
        super().__init__(model, fold, f"{n_rows} rows, needs at least {minimum}")

    def __reduce__(self):
        return type(self), (self.model, self.fold, self.n_rows, self.minimum)
