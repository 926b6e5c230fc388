"""
Pool Registry - (token0, token1, fee) → 풀

풀 배포자 역할. 정렬된 토큰 쌍과 수수료 티어당 풀은 하나뿐이다.
"""

import logging
from typing import Dict, Optional, Tuple

from ..addresses import derive_address
from ..constants import TICK_SPACINGS
from ..errors import PoolError
from ..ledger import TokenLedger
from .pool import ConcentratedPool

logger = logging.getLogger(__name__)


class PoolRegistry:
    """풀 레지스트리

    사용법:
        registry = PoolRegistry()
        pool = registry.create_pool(weth, usdc, 3000)
        same = registry.get_pool(usdc, weth, 3000)
    """

    def __init__(self, address: str = "0x" + "f" * 40):
        self.address = address.lower()
        self._pools: Dict[Tuple[str, str, int], ConcentratedPool] = {}

    def __len__(self) -> int:
        return len(self._pools)

    def fee_enabled(self, fee: int) -> bool:
        return fee in TICK_SPACINGS

    def get_pool(self, token_a: TokenLedger, token_b: TokenLedger, fee: int) -> Optional[ConcentratedPool]:
        token0, token1 = _sorted(token_a, token_b)
        return self._pools.get((token0.address, token1.address, fee))

    def create_pool(self, token_a: TokenLedger, token_b: TokenLedger, fee: int) -> ConcentratedPool:
        """풀 생성

        Raises:
            PoolError: 같은 토큰, 지원하지 않는 수수료, 이미 존재하는 풀
        """
        if token_a.address == token_b.address:
            raise PoolError("pool registry: identical tokens")
        if not self.fee_enabled(fee):
            raise PoolError(f"pool registry: fee tier {fee} not enabled")

        token0, token1 = _sorted(token_a, token_b)
        key = (token0.address, token1.address, fee)
        if key in self._pools:
            raise PoolError("pool registry: pool exists")

        pool = ConcentratedPool(
            address=derive_address(self.address, *key),
            token0=token0,
            token1=token1,
            fee=fee,
            tick_spacing=TICK_SPACINGS[fee],
        )
        self._pools[key] = pool
        logger.info("created pool %s for %s/%s fee=%d", pool.address, token0.symbol, token1.symbol, fee)
        return pool


def _sorted(token_a: TokenLedger, token_b: TokenLedger) -> Tuple[TokenLedger, TokenLedger]:
    return (token_a, token_b) if token_a.address < token_b.address else (token_b, token_a)
