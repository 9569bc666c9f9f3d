"""Exchange rate feed model."""

from dataclasses import dataclass
from fractions import Fraction


@dataclass(frozen=True)
class Rate:
    pool_identifier: str
    base_asset: int
    derived_asset: int

    @property
    def ratio(self) -> Fraction:
        """Derived units per base unit. Raises ZeroDivisionError on an empty base."""
        return Fraction(self.derived_asset, self.base_asset)
