"""Protocol adapters for all supported DEXes."""

from typing import Dict, Type

from dexter.fetching import Fetcher
from .base import BaseDex, Decoder
from .chadswap import ChadSwap
from .concentrated import ConcentratedLiquidity
from .cswap import CSwap
from .minswap_stable import MinswapStable
from .minswap_v1 import MinswapV1
from .minswap_v2 import MinswapV2
from .sundaeswap_v1 import SundaeSwapV1
from .sundaeswap_v3 import SundaeSwapV3
from .vyfi_bar import VyfiBar
from .vyfinance import VyFinance
from .wingriders import WingRiders
from .wingriders_v2 import WingRidersV2

# Adapter registry
DEXES: Dict[str, Type] = {
    "minswap": MinswapV1,
    "minswap-v2": MinswapV2,
    "minswap-stable": MinswapStable,
    "sundaeswap": SundaeSwapV1,
    "sundaeswap-v3": SundaeSwapV3,
    "wingriders": WingRiders,
    "wingriders-v2": WingRidersV2,
    "cswap": CSwap,
    "vyfinance": VyFinance,
    "concentrated": ConcentratedLiquidity,
    "chadswap": ChadSwap,
    "vyfi-bar": VyfiBar,
}

# Adapters that need no per-pool configuration
POOL_SCANNERS = [
    "minswap", "minswap-v2", "sundaeswap", "sundaeswap-v3",
    "wingriders", "wingriders-v2", "cswap", "vyfinance",
]


def create_dex(name: str, fetcher: Fetcher, **kwargs) -> Decoder:
    try:
        dex_cls = DEXES[name]
    except KeyError:
        raise ValueError(f"Unknown DEX {name!r}, expected one of {', '.join(DEXES)}") from None
    return dex_cls(fetcher, **kwargs)


__all__ = [
    "BaseDex", "Decoder",
    "ChadSwap", "ConcentratedLiquidity", "CSwap", "MinswapStable", "MinswapV1", "MinswapV2",
    "SundaeSwapV1", "SundaeSwapV3", "VyfiBar", "VyFinance", "WingRiders", "WingRidersV2",
    "DEXES", "POOL_SCANNERS", "create_dex",
]
