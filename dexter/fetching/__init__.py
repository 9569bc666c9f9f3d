"""Chain data fetching."""

from .client import IndexerClient
from .fetcher import Fetcher, OutcomeStatus, ScanOutcome, matches_pair, with_deadline
from .kupo_client import KupoClient, utxo_from_kupo
from .retry import DEFAULT_RETRY_POLICY, RetryPolicy, is_transient, with_retry

__all__ = [
    "IndexerClient", "Fetcher", "OutcomeStatus", "ScanOutcome", "matches_pair", "with_deadline",
    "KupoClient", "utxo_from_kupo",
    "DEFAULT_RETRY_POLICY", "RetryPolicy", "is_transient", "with_retry",
]
