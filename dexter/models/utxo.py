"""UTxO snapshot as returned by the indexer."""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from dexter.utils import LOVELACE


@dataclass(frozen=True)
class Unit:
    """Quantity of one unit (`lovelace` or policy id + asset name) held by a UTxO."""
    unit: str
    quantity: int


@dataclass(frozen=True)
class Utxo:
    address: str
    tx_hash: str
    tx_index: int
    output_index: int
    amount: Tuple[Unit, ...]
    block: str = ""
    datum_hash: Optional[str] = None
    inline_datum: Optional[str] = None  # hex CBOR
    script_hash: Optional[str] = None
    _quantities: dict = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "_quantities", {u.unit: u.quantity for u in self.amount})

    @property
    def utxo_id(self) -> str:
        return f"{self.tx_hash}#{self.output_index}"

    @property
    def has_datum(self) -> bool:
        return bool(self.datum_hash or self.inline_datum)

    @property
    def units(self) -> List[str]:
        return [u.unit for u in self.amount]

    def quantity(self, unit: str) -> int:
        return self._quantities.get(unit, 0)

    def has_unit(self, unit: str) -> bool:
        return unit in self._quantities

    def non_lovelace_units(self) -> List[Unit]:
        return [u for u in self.amount if u.unit != LOVELACE]

    def units_with_policy(self, policy_id: str) -> List[Unit]:
        return [u for u in self.amount if u.unit.startswith(policy_id)]
