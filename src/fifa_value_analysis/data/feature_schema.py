"""
FeatureSchema - canonical column lists for preprocessing & modelling.
"""
from dataclasses import dataclass, field
from typing import List


@dataclass
class FeatureSchema:
    """Container class listing every column by semantic type."""
    numerical: List[str] = field(default_factory=list)
    ordinal:   List[str] = field(default_factory=list)      # ordered categories
    nominal:   List[str] = field(default_factory=list)      # unordered categories
    identity:  List[str] = field(default_factory=list)      # display-only, never modelled
    target:    str        = "value"

    # ───── convenience helpers ────────────────────────────────────
    @property
    def model_features(self) -> List[str]:
        """All predictors in modelling order."""
        return self.numerical + self.ordinal + self.nominal

    @property
    def required(self) -> List[str]:
        """Columns that must be non-missing for a row to be kept."""
        return [self.target] + self.model_features

    def assert_in_dataframe(self, df) -> None:
        """Raise if any declared column is missing from df.columns."""
        missing = [c for c in self.model_features + [self.target]
                   if c not in df.columns]
        if missing:
            raise ValueError(f"FeatureSchema mismatch - missing cols: {missing}")
