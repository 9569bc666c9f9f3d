"""
Token identity for the Cardano native coin and native assets.

Identifiers are either the literal `lovelace` or a 56 hex char policy id
followed by a hex encoded asset name (at most 32 bytes).
"""

from dataclasses import dataclass, field
from typing import Union

from dexter.errors import InvalidTokenId
from dexter.utils import LOVELACE, POLICY_ID_LENGTH, is_hex

ADA_DECIMALS = 6
MAX_ASSET_NAME_HEX = 64


@dataclass(frozen=True)
class Token:
    """
    Represents a Cardano native token.

    ADA is represented with empty policy_id and name.
    Name is stored as hex (not decoded). Decimals are display metadata and
    do not take part in equality.
    """
    policy_id: str
    name: str  # hex encoded
    decimals: int = field(default=0, compare=False)

    @property
    def is_ada(self) -> bool:
        return self.policy_id == "" and self.name == ""

    @classmethod
    def ada(cls) -> "Token":
        return cls(policy_id="", name="", decimals=ADA_DECIMALS)

    @classmethod
    def from_identifier(cls, identifier: str, decimals: int = 0) -> "Token":
        """Parse `lovelace` or policy id + asset name hex. Raises InvalidTokenId."""
        if identifier == LOVELACE:
            return cls.ada()
        if len(identifier) < POLICY_ID_LENGTH:
            raise InvalidTokenId(identifier, f"shorter than a {POLICY_ID_LENGTH} char policy id")
        policy_id, name = identifier[:POLICY_ID_LENGTH], identifier[POLICY_ID_LENGTH:]
        if not is_hex(policy_id):
            raise InvalidTokenId(identifier, "policy id is not hex")
        if not is_hex(name):
            raise InvalidTokenId(identifier, "asset name is not hex")
        if len(name) % 2:
            raise InvalidTokenId(identifier, "asset name has odd length")
        if len(name) > MAX_ASSET_NAME_HEX:
            raise InvalidTokenId(identifier, "asset name longer than 32 bytes")
        return cls(policy_id=policy_id, name=name, decimals=decimals)

    @classmethod
    def coerce(cls, token: "TokenLike") -> "Token":
        return token if isinstance(token, Token) else cls.from_identifier(token)

    def identifier(self) -> str:
        """Inverse of from_identifier."""
        return LOVELACE if self.is_ada else self.policy_id + self.name

    @property
    def display_name(self) -> str:
        if self.is_ada:
            return "ADA"
        try:
            return bytes.fromhex(self.name).decode("utf-8")
        except (ValueError, UnicodeDecodeError):
            return self.name

    def with_decimals(self, decimals: int) -> "Token":
        return Token(self.policy_id, self.name, decimals)

    def __str__(self) -> str:
        if self.is_ada:
            return "ADA"
        return f"{self.policy_id[:8]}..{self.display_name}"

    def __repr__(self) -> str:
        if self.is_ada:
            return "Token(ADA)"
        return f"Token({self.policy_id[:8]}..{self.name[:8] if self.name else ''})"


TokenLike = Union[Token, str]

# Common tokens
ADA = Token.ada()
