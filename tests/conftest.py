import pytest

from tests.factories import FakeIndexer, make_fetcher


@pytest.fixture
def indexer():
    return FakeIndexer()


@pytest.fixture
def fetcher(indexer):
    return make_fetcher(indexer)
