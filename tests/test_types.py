import pytest

from dexter.errors import InvalidTokenId
from dexter.types import ADA, Token
from dexter.utils import asset_pattern, join_policy_id, split_policy_id
from tests.factories import HOSKY, HOSKY_POLICY, MIN, MIN_POLICY


class TestTokenIdentifier:
    @pytest.mark.parametrize("identifier", ["lovelace", MIN, HOSKY, MIN_POLICY])
    def test_round_trip(self, identifier):
        assert Token.from_identifier(identifier).identifier() == identifier

    def test_lovelace_is_ada(self):
        token = Token.from_identifier("lovelace")
        assert token.is_ada
        assert token == ADA
        assert token.decimals == 6

    def test_policy_and_name_split(self):
        token = Token.from_identifier(HOSKY)
        assert token.policy_id == HOSKY_POLICY
        assert token.name == "484f534b59"
        assert token.display_name == "HOSKY"

    @pytest.mark.parametrize("identifier", [
        "",
        "abc",
        "zz" + MIN[2:],
        MIN + "4",
        MIN_POLICY + "4d" * 33,
        MIN_POLICY + ".4d494e",
    ])
    def test_invalid(self, identifier):
        with pytest.raises(InvalidTokenId) as info:
            Token.from_identifier(identifier)
        assert info.value.identifier == identifier

    def test_invalid_is_value_error(self):
        with pytest.raises(ValueError):
            Token.from_identifier("ADA")

    def test_decimals_do_not_affect_equality(self):
        assert Token.from_identifier(MIN, 6) == Token.from_identifier(MIN)
        assert hash(Token.from_identifier(MIN, 6)) == hash(Token.from_identifier(MIN))

    def test_non_utf8_name_displays_as_hex(self):
        token = Token.from_identifier(MIN_POLICY + "ff00")
        assert token.display_name == "ff00"

    def test_coerce(self):
        token = Token.from_identifier(MIN)
        assert Token.coerce(token) is token
        assert Token.coerce(MIN) == token


class TestUnits:
    def test_join_policy_id(self):
        assert join_policy_id(f"{MIN_POLICY}.4d494e") == MIN
        assert join_policy_id("lovelace") == "lovelace"

    def test_split_policy_id(self):
        assert split_policy_id(MIN) == (MIN_POLICY, "4d494e")
        assert split_policy_id("lovelace") == ("", "")

    def test_asset_pattern(self):
        assert asset_pattern(MIN) == f"{MIN_POLICY}.4d494e"
        assert asset_pattern(MIN_POLICY) == f"{MIN_POLICY}.*"
