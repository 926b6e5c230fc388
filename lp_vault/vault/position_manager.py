"""
Position Manager - 볼트 소유 범위 포지션의 생성/평가/회수

풀 협력자를 통해 유동성을 넣고 빼며, 수수료 정산은 FeeLedger에 맡긴다.
배포 시에는 현재 가격에서 가능한 최대 유동성만 민트하고, 남는 토큰은
볼트 idle 잔고로 남는다.
"""

import logging
from typing import Tuple

from ..errors import VaultError
from ..math.tick_math import get_sqrt_ratio_at_tick
from ..math.liquidity_math import get_liquidity_for_amounts, get_amounts_for_liquidity
from ..pool.pool import ConcentratedPool
from .fee_ledger import FeeLedger
from .position import Position, PositionSnapshot, Harvest

logger = logging.getLogger(__name__)


class PositionManager:
    """볼트 한 개의 base/limit 포지션 관리자

    사용법:
        manager = PositionManager(pool, vault.address)
        liquidity = manager.deploy(position, -1800, 1800, amount0, amount1)
        amount0, amount1 = manager.current_amounts(position)
        harvest = manager.withdraw_all(position)
    """

    def __init__(self, pool: ConcentratedPool, owner: str):
        self.pool = pool
        self.owner = owner
        self.fees = FeeLedger(pool, owner)

    def principal(self, position: Position) -> Tuple[int, int]:
        """포지션 유동성이 현재 가격에서 보유한 원금 (내림)"""
        if position.liquidity == 0:
            return 0, 0
        return get_amounts_for_liquidity(
            self.pool.sqrt_price_x96,
            get_sqrt_ratio_at_tick(position.tick_lower),
            get_sqrt_ratio_at_tick(position.tick_upper),
            position.liquidity,
        )

    def current_amounts(self, position: Position) -> Tuple[int, int]:
        """원금 + 미수령 수수료 (조회 전용)"""
        amount0, amount1 = self.principal(position)
        fee0, fee1 = self.fees.observe(position)
        return amount0 + fee0, amount1 + fee1

    def snapshot(self, position: Position) -> PositionSnapshot:
        amount0, amount1 = self.current_amounts(position)
        return PositionSnapshot(position.liquidity, amount0, amount1)

    def deploy(self, position: Position, tick_lower: int, tick_upper: int, amount0: int, amount1: int) -> int:
        """가용 토큰으로 범위에 최대 유동성 배포

        유동성이 0이 되는 경우(한쪽 토큰만 필요한 범위에 그 토큰이 없을 때)에도
        범위는 기록한다.

        Returns:
            민트한 유동성
        """
        if position.liquidity != 0:
            raise VaultError(f"{position.kind} position must be withdrawn before redeploy")

        position.tick_lower = tick_lower
        position.tick_upper = tick_upper
        position.reset_fees()

        liquidity = get_liquidity_for_amounts(
            self.pool.sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_lower),
            get_sqrt_ratio_at_tick(tick_upper),
            amount0,
            amount1,
        )
        if liquidity > 0:
            paid0, paid1 = self.pool.mint(self.owner, tick_lower, tick_upper, liquidity, payer=self.owner)
            logger.debug(
                "%s deployed [%d, %d] L=%d paid=(%d, %d)",
                position.kind, tick_lower, tick_upper, liquidity, paid0, paid1
            )
        position.liquidity = liquidity
        return liquidity

    def withdraw_all(self, position: Position) -> Harvest:
        """유동성 전체 회수, 원금과 수수료를 볼트로 수령

        유동성이 0이면 아무것도 하지 않고 0을 반환한다.
        """
        if position.liquidity == 0:
            return Harvest(0, 0, 0, 0)

        fee0, fee1 = self.fees.accrue(position)
        amount0, amount1 = self.pool.burn(
            self.owner, position.tick_lower, position.tick_upper, position.liquidity
        )
        self.pool.collect(
            self.owner, position.tick_lower, position.tick_upper, self.owner,
            amount0 + fee0, amount1 + fee1
        )

        position.liquidity = 0
        position.reset_fees()
        logger.debug(
            "%s withdrawn: principal=(%d, %d) fees=(%d, %d)", position.kind, amount0, amount1, fee0, fee1
        )
        return Harvest(amount0, amount1, fee0, fee1)

    def withdraw_share(self, position: Position, shares: int, total_supply: int, recipient: str) -> Tuple[int, int]:
        """shares / total_supply 비율만큼 유동성과 수수료를 recipient에게 지급

        유동성과 수수료 모두 내림. 남은 수수료는 포지션에 그대로 적립된다.

        Returns:
            (amount0, amount1) recipient가 받은 토큰
        """
        if position.liquidity == 0:
            return 0, 0

        fee0, fee1 = self.fees.accrue(position)
        liquidity = position.liquidity * shares // total_supply
        fee_share0 = fee0 * shares // total_supply
        fee_share1 = fee1 * shares // total_supply

        amount0 = amount1 = 0
        if liquidity > 0:
            amount0, amount1 = self.pool.burn(
                self.owner, position.tick_lower, position.tick_upper, liquidity
            )
        paid0, paid1 = self.pool.collect(
            self.owner, position.tick_lower, position.tick_upper, recipient,
            amount0 + fee_share0, amount1 + fee_share1
        )

        position.liquidity -= liquidity
        position.uncollected_fee0 = fee0 - fee_share0
        position.uncollected_fee1 = fee1 - fee_share1
        return paid0, paid1
