"""Common Plutus datum structures and tolerant field access shared across DEX decoders."""

from collections import UserList
from dataclasses import dataclass
from typing import Any, ClassVar, List, Optional

import cbor2
from cbor2 import CBORTag
from pycardano import PlutusData

from dexter.utils import LOVELACE

# Constructor tags: 121..127 -> 0..6, 1280..1400 -> 7..127, 102 -> [index, fields]
SMALL_CONSTR_TAG = 121
LARGE_CONSTR_TAG = 1280
GENERAL_CONSTR_TAG = 102


# Common Plutus structures
@dataclass
class PlutusToken(PlutusData):
    """On-chain token (policy ID + asset name). Empty bytes for ADA."""
    policy_id: bytes
    token_name: bytes
    CONSTR_ID: ClassVar[int] = 0

    def unit(self) -> str:
        policy_id = as_hex(self.policy_id)
        return policy_id + as_hex(self.token_name) if policy_id else LOVELACE


# Untyped access for datums that are only partially fixed
def decode_datum(datum_cbor: bytes) -> Any:
    return cbor2.loads(datum_cbor)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, UserList))


def constr_index(value: Any) -> Optional[int]:
    """Constructor index of a Plutus constr, or None if `value` is not one."""
    if not isinstance(value, CBORTag):
        return None
    if SMALL_CONSTR_TAG <= value.tag <= SMALL_CONSTR_TAG + 6:
        return value.tag - SMALL_CONSTR_TAG
    if LARGE_CONSTR_TAG <= value.tag <= LARGE_CONSTR_TAG + 120:
        return value.tag - LARGE_CONSTR_TAG + 7
    if value.tag == GENERAL_CONSTR_TAG and _is_sequence(value.value) and len(value.value) == 2:
        return int(value.value[0])
    return None


def constr_fields(value: Any, min_fields: int = 0) -> List[Any]:
    """Fields of a Plutus constr. Raises ValueError if not a constr or too short."""
    index = constr_index(value)
    if index is None:
        raise ValueError(f"expected a Plutus constructor, got {type(value).__name__}")
    fields = value.value[1] if value.tag == GENERAL_CONSTR_TAG else value.value
    if not _is_sequence(fields):
        raise ValueError("constructor fields are not a list")
    fields = list(fields)
    if len(fields) < min_fields:
        raise ValueError(f"expected at least {min_fields} fields, got {len(fields)}")
    return fields


def is_nonempty_constr(value: Any) -> bool:
    return constr_index(value) is not None and len(constr_fields(value)) > 0


def as_int(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"expected an integer, got {type(value).__name__}")
    return value


def as_list(value: Any) -> List[Any]:
    if not _is_sequence(value):
        raise ValueError(f"expected a list, got {type(value).__name__}")
    return list(value)


def as_hex(value: Any) -> str:
    """Bytes field as hex. Accepts pycardano's ByteString wrapper."""
    value = getattr(value, "value", value)
    if not isinstance(value, (bytes, bytearray)):
        raise ValueError(f"expected bytes, got {type(value).__name__}")
    return bytes(value).hex()


def asset_unit(value: Any) -> str:
    """`Constr 0 [policy, name]` as a joined unit; empty policy and name is lovelace."""
    policy_id, name = (as_hex(f) for f in constr_fields(value, 2)[:2])
    return policy_id + name if policy_id else LOVELACE
