import json
import os

import pytest

from dexter.cache import MetadataCache, PoolMetadata
from dexter.errors import CacheIOError
from dexter.types import ADA, Token
from tests.factories import HOSKY, MIN

ENTRY = PoolMetadata(pool_id="nft1", asset_a="lovelace", asset_b=MIN, decimals_b=6, pool_address="addr1vyfi")


def test_missing_file_is_empty(tmp_path):
    cache = MetadataCache.load(str(tmp_path / "pools.json"))
    assert len(cache) == 0
    assert not cache.dirty


def test_save_and_load(tmp_path):
    path = str(tmp_path / "pools.json")
    cache = MetadataCache(path)
    cache.merge({"nft1": ENTRY})
    cache.save()
    loaded = MetadataCache.load(path)
    assert loaded.get("nft1") == ENTRY
    assert not loaded.dirty


def test_save_leaves_no_temporary_files(tmp_path):
    path = tmp_path / "pools.json"
    MetadataCache(str(path), {"nft1": ENTRY}).save()
    assert os.listdir(tmp_path) == ["pools.json"]
    assert json.loads(path.read_text())["nft1"]["asset_b"] == MIN


def test_corrupt_file(tmp_path):
    path = tmp_path / "pools.json"
    path.write_text("{not json")
    with pytest.raises(CacheIOError) as info:
        MetadataCache.load(str(path))
    assert info.value.path == str(path)


def test_invalid_entries(tmp_path):
    path = tmp_path / "pools.json"
    path.write_text(json.dumps({"nft1": {"pool_id": "nft1"}}))
    with pytest.raises(CacheIOError):
        MetadataCache.load(str(path))


def test_unwritable_location(tmp_path):
    cache = MetadataCache(str(tmp_path / "missing" / "pools.json"), {"nft1": ENTRY})
    with pytest.raises(CacheIOError):
        cache.save()


def test_merge_only_adds_absent_ids(tmp_path):
    cache = MetadataCache(str(tmp_path / "pools.json"), {"nft1": ENTRY})
    replacement = ENTRY.model_copy(update={"decimals_b": 0})
    other = ENTRY.model_copy(update={"pool_id": "nft2", "asset_b": HOSKY})
    assert cache.merge({"nft1": replacement, "nft2": other}) == 1
    assert cache.get("nft1").decimals_b == 6
    assert "nft2" in cache
    assert cache.dirty


def test_context_manager_saves_when_dirty(tmp_path):
    path = str(tmp_path / "pools.json")
    with MetadataCache.open(path) as cache:
        cache.merge({"nft1": ENTRY})
    assert "nft1" in MetadataCache.load(path)


def test_context_manager_skips_save_on_error(tmp_path):
    path = str(tmp_path / "pools.json")
    with pytest.raises(RuntimeError):
        with MetadataCache.open(path) as cache:
            cache.merge({"nft1": ENTRY})
            raise RuntimeError("interrupted")
    assert not os.path.exists(path)


def test_trades_is_unordered():
    assert ENTRY.trades(ADA, Token.from_identifier(MIN))
    assert ENTRY.trades(Token.from_identifier(MIN), ADA)
    assert not ENTRY.trades(ADA, Token.from_identifier(HOSKY))
    assert ENTRY.decimals_of(MIN) == 6
