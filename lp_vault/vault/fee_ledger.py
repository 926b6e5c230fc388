"""
Fee Ledger - 서브 포지션별 미수령 수수료

harvest-on-touch: 포지션 유동성이 바뀌기 전에 항상 accrue()로 수수료를
정산한다. observe()는 상태를 바꾸지 않는 조회다.
"""

import logging
from typing import Tuple

from ..pool.pool import ConcentratedPool
from .position import Position

logger = logging.getLogger(__name__)


class FeeLedger:
    """볼트 소유 포지션의 수수료 장부

    Args:
        pool: 볼트가 바인딩된 풀
        owner: 포지션 소유자 (볼트 주소)
    """

    def __init__(self, pool: ConcentratedPool, owner: str):
        self.pool = pool
        self.owner = owner

    def observe(self, position: Position) -> Tuple[int, int]:
        """현재 시점의 미수령 수수료 (정산하지 않음)"""
        if not position.deployed:
            return 0, 0
        return self.pool.uncollected_fees(self.owner, position.tick_lower, position.tick_upper)

    def accrue(self, position: Position) -> Tuple[int, int]:
        """수수료를 풀 포지션의 tokens_owed로 정산하고 장부에 기록

        Returns:
            (fee0, fee1) 현재 적립된 미수령 수수료 전체
        """
        if position.liquidity == 0:
            return position.uncollected_fee0, position.uncollected_fee1

        self.pool.burn(self.owner, position.tick_lower, position.tick_upper, 0)
        info = self.pool.position(self.owner, position.tick_lower, position.tick_upper)
        position.uncollected_fee0 = info.tokens_owed_0
        position.uncollected_fee1 = info.tokens_owed_1

        logger.debug(
            "%s fees accrued: (%d, %d)", position.kind, position.uncollected_fee0, position.uncollected_fee1
        )
        return position.uncollected_fee0, position.uncollected_fee1
