"""Helpers for Cardano unit strings and Kupo patterns."""

from typing import Tuple

LOVELACE = "lovelace"
POLICY_ID_LENGTH = 56


def join_policy_id(unit: str) -> str:
    """`policy.name` -> `policyname`. `lovelace` is returned unchanged."""
    return unit.replace(".", "")


def split_policy_id(unit: str) -> Tuple[str, str]:
    """Split a joined unit into (policy_id, asset_name). Lovelace is ("", "")."""
    unit = join_policy_id(unit)
    if unit == LOVELACE:
        return "", ""
    return unit[:POLICY_ID_LENGTH], unit[POLICY_ID_LENGTH:]


def asset_pattern(unit: str) -> str:
    """Kupo match pattern for an asset unit (`policy.name`, or `policy.*` for a bare policy)."""
    policy_id, name = split_policy_id(unit)
    return f"{policy_id}.{name or '*'}"


def is_hex(value: str) -> bool:
    return all(c in "0123456789abcdefABCDEF" for c in value)
