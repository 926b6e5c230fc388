"""
Concentrated Liquidity Pool - 인-프로세스 풀 협력자

볼트가 바인딩되는 단일 풀. 틱 수학, 유동성 수학, 수수료 장부는 전부
lp_vault.math 함수로 계산한다 (백서 Section 6).

상태:
- Global State: sqrt_price_x96, tick, liquidity, fee_growth_global_{0,1}_x128
- Tick-Indexed State: ticks[tick] -> TickInfo
- Position-Indexed State: positions[(owner, lower, upper)] -> PositionInfo
"""

import bisect
import logging
from dataclasses import replace
from typing import Dict, Optional, Tuple, Any

from ..constants import MIN_TICK, MAX_TICK, UINT256_MOD
from ..errors import PoolError
from ..ledger import TokenLedger
from ..math.tick_math import (
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    get_sqrt_ratio_at_tick,
    get_tick_at_sqrt_ratio,
    is_aligned,
)
from ..math.liquidity_math import get_amounts_for_liquidity
from ..math.fee_math import fee_growth_inside, calculate_uncollected_fees, fee_growth_for_amount
from ..math.swap_math import compute_swap_step
from ..state import transaction
from .types import TickInfo, PositionInfo, PositionKey, SwapResult

logger = logging.getLogger(__name__)


class ConcentratedPool:
    """Uniswap V3 방식의 집중 유동성 풀

    사용법:
        pool = ConcentratedPool(address, token0, token1, fee=3000, tick_spacing=60)
        pool.initialize(encode_price_sqrt(1, 1))
        pool.mint(owner, -600, 600, liquidity, payer=owner)
        pool.swap(trader, trader, zero_for_one=True, amount_in=10 ** 18)
    """

    def __init__(
        self,
        address: str,
        token0: TokenLedger,
        token1: TokenLedger,
        fee: int,
        tick_spacing: int
    ):
        if token0.address >= token1.address:
            raise PoolError("pool: token0 must sort before token1")

        self.address = address.lower()
        self.token0 = token0
        self.token1 = token1
        self.fee = fee
        self.tick_spacing = tick_spacing

        self.sqrt_price_x96 = 0
        self.tick = 0
        self.liquidity = 0
        self.fee_growth_global_0_x128 = 0
        self.fee_growth_global_1_x128 = 0

        self.ticks: Dict[int, TickInfo] = {}
        self.positions: Dict[PositionKey, PositionInfo] = {}

    def __repr__(self) -> str:
        return f"ConcentratedPool({self.token0.symbol}/{self.token1.symbol} fee={self.fee})"

    # ------------------------------------------------------------------
    # Global state
    # ------------------------------------------------------------------

    @property
    def initialized(self) -> bool:
        return self.sqrt_price_x96 != 0

    def initialize(self, sqrt_price_x96: int) -> None:
        """최초 가격 설정 (1회)"""
        if self.initialized:
            raise PoolError("pool: already initialized")
        self.sqrt_price_x96 = sqrt_price_x96
        self.tick = get_tick_at_sqrt_ratio(sqrt_price_x96)
        logger.info("pool %s initialized at tick %d", self.address, self.tick)

    def current_tick(self) -> int:
        self._require_initialized()
        return self.tick

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def position(self, owner: str, tick_lower: int, tick_upper: int) -> PositionInfo:
        """포지션 상태 사본"""
        info = self.positions.get((owner.lower(), tick_lower, tick_upper))
        return replace(info) if info else PositionInfo()

    def uncollected_fees(self, owner: str, tick_lower: int, tick_upper: int) -> Tuple[int, int]:
        """포지션의 미수령 수수료 관측 (상태 변경 없음)

        tokens_owed + 마지막 정산 이후 누적된 수수료.
        """
        info = self.positions.get((owner.lower(), tick_lower, tick_upper))
        if info is None:
            return 0, 0
        inside0, inside1 = self._fee_growth_inside(tick_lower, tick_upper)
        fee0 = info.tokens_owed_0 + calculate_uncollected_fees(
            info.liquidity, inside0, info.fee_growth_inside_0_last_x128
        )
        fee1 = info.tokens_owed_1 + calculate_uncollected_fees(
            info.liquidity, inside1, info.fee_growth_inside_1_last_x128
        )
        return fee0, fee1

    def mint(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity: int,
        payer: str
    ) -> Tuple[int, int]:
        """범위에 유동성 추가, 필요한 토큰을 payer에게서 가져온다 (올림)

        Returns:
            (amount0, amount1) 지불한 토큰
        """
        if liquidity <= 0:
            raise PoolError("pool: mint amount must be positive")

        with transaction(self, self.token0, self.token1):
            amount0, amount1 = self._modify_position(owner, tick_lower, tick_upper, liquidity)
            if amount0 > 0:
                self.token0.transfer(payer, self.address, amount0)
            if amount1 > 0:
                self.token1.transfer(payer, self.address, amount1)

        logger.debug(
            "mint %s [%d, %d] L=%d -> (%d, %d)", owner, tick_lower, tick_upper, liquidity, amount0, amount1
        )
        return amount0, amount1

    def burn(self, owner: str, tick_lower: int, tick_upper: int, liquidity: int) -> Tuple[int, int]:
        """범위에서 유동성 제거 (내림), 원금은 tokens_owed에 적립된다

        liquidity=0은 수수료 정산(poke)만 수행한다.

        Returns:
            (amount0, amount1) 제거된 원금
        """
        if liquidity < 0:
            raise PoolError("pool: burn amount must be non-negative")

        with transaction(self):
            amount0, amount1 = self._modify_position(owner, tick_lower, tick_upper, -liquidity)
            if amount0 or amount1:
                info = self.positions[(owner.lower(), tick_lower, tick_upper)]
                info.tokens_owed_0 += amount0
                info.tokens_owed_1 += amount1

        logger.debug(
            "burn %s [%d, %d] L=%d -> (%d, %d)", owner, tick_lower, tick_upper, liquidity, amount0, amount1
        )
        return amount0, amount1

    def collect(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        recipient: str,
        amount0_requested: int,
        amount1_requested: int
    ) -> Tuple[int, int]:
        """tokens_owed에서 최대 요청량까지 recipient로 전송"""
        info = self.positions.get((owner.lower(), tick_lower, tick_upper))
        if info is None:
            return 0, 0

        amount0 = min(amount0_requested, info.tokens_owed_0)
        amount1 = min(amount1_requested, info.tokens_owed_1)

        with transaction(self, self.token0, self.token1):
            if amount0 > 0:
                info.tokens_owed_0 -= amount0
                self.token0.transfer(self.address, recipient, amount0)
            if amount1 > 0:
                info.tokens_owed_1 -= amount1
                self.token1.transfer(self.address, recipient, amount1)

        return amount0, amount1

    # ------------------------------------------------------------------
    # Swap
    # ------------------------------------------------------------------

    def swap(
        self,
        sender: str,
        recipient: str,
        zero_for_one: bool,
        amount_in: int,
        sqrt_price_limit_x96: Optional[int] = None,
        payer: Optional[str] = None
    ) -> SwapResult:
        """exact-input 스왑

        Args:
            sender: 호출자
            recipient: 출력 토큰 수신자
            zero_for_one: True면 token0 → token1 (가격 하락)
            amount_in: 입력 토큰 수량 (수수료 포함)
            sqrt_price_limit_x96: 가격 한계, None이면 가능한 끝까지
            payer: 입력 토큰 지불자, None이면 sender

        Returns:
            SwapResult (양수 = 풀로 유입, 음수 = 풀에서 유출)
        """
        self._require_initialized()
        if amount_in <= 0:
            raise PoolError("pool: swap amount must be positive")

        if sqrt_price_limit_x96 is None:
            sqrt_price_limit_x96 = MIN_SQRT_RATIO + 1 if zero_for_one else MAX_SQRT_RATIO - 1

        if zero_for_one:
            valid_limit = MIN_SQRT_RATIO < sqrt_price_limit_x96 < self.sqrt_price_x96
        else:
            valid_limit = self.sqrt_price_x96 < sqrt_price_limit_x96 < MAX_SQRT_RATIO
        if not valid_limit:
            raise PoolError("pool: SPL")

        payer = payer or sender

        with transaction(self, self.token0, self.token1):
            result = self._swap(zero_for_one, amount_in, sqrt_price_limit_x96)

            if zero_for_one:
                token_in, token_out = self.token0, self.token1
                paid, received = result.amount0, -result.amount1
            else:
                token_in, token_out = self.token1, self.token0
                paid, received = result.amount1, -result.amount0

            if paid > 0:
                token_in.transfer(payer, self.address, paid)
            if received > 0:
                token_out.transfer(self.address, recipient, received)

        logger.debug(
            "swap zero_for_one=%s in=%d out=%d tick=%d", zero_for_one, paid, received, result.tick
        )
        return result

    def _swap(self, zero_for_one: bool, amount_specified: int, sqrt_price_limit_x96: int) -> SwapResult:
        amount_remaining = amount_specified
        amount_calculated = 0
        sqrt_price = self.sqrt_price_x96
        tick = self.tick
        liquidity = self.liquidity
        fee_growth_global = self.fee_growth_global_0_x128 if zero_for_one else self.fee_growth_global_1_x128

        while amount_remaining != 0 and sqrt_price != sqrt_price_limit_x96:
            sqrt_price_start = sqrt_price
            tick_next, initialized = self._next_initialized_tick(tick, zero_for_one)
            tick_next = max(MIN_TICK, min(MAX_TICK, tick_next))
            sqrt_price_next_tick = get_sqrt_ratio_at_tick(tick_next)

            if zero_for_one:
                target = max(sqrt_price_next_tick, sqrt_price_limit_x96)
            else:
                target = min(sqrt_price_next_tick, sqrt_price_limit_x96)

            step = compute_swap_step(sqrt_price, target, liquidity, amount_remaining, self.fee)
            sqrt_price = step.sqrt_price_next_x96
            amount_remaining -= step.amount_in + step.fee_amount
            amount_calculated += step.amount_out

            if liquidity > 0:
                fee_growth_global = (fee_growth_global + fee_growth_for_amount(step.fee_amount, liquidity)) % UINT256_MOD

            if sqrt_price == sqrt_price_next_tick:
                if initialized:
                    if zero_for_one:
                        liquidity_net = self._cross(tick_next, fee_growth_global, self.fee_growth_global_1_x128)
                        liquidity -= liquidity_net
                    else:
                        liquidity_net = self._cross(tick_next, self.fee_growth_global_0_x128, fee_growth_global)
                        liquidity += liquidity_net
                tick = tick_next - 1 if zero_for_one else tick_next
            elif sqrt_price != sqrt_price_start:
                tick = get_tick_at_sqrt_ratio(sqrt_price)

        self.sqrt_price_x96 = sqrt_price
        self.tick = tick
        self.liquidity = liquidity
        if zero_for_one:
            self.fee_growth_global_0_x128 = fee_growth_global
        else:
            self.fee_growth_global_1_x128 = fee_growth_global

        amount_in = amount_specified - amount_remaining
        if zero_for_one:
            return SwapResult(amount_in, -amount_calculated, sqrt_price, tick)
        return SwapResult(-amount_calculated, amount_in, sqrt_price, tick)

    def _next_initialized_tick(self, tick: int, lte: bool) -> Tuple[int, bool]:
        """다음 초기화된 틱 (lte면 tick 이하, 아니면 tick 초과)"""
        initialized = sorted(self.ticks)
        if lte:
            i = bisect.bisect_right(initialized, tick) - 1
            return (initialized[i], True) if i >= 0 else (MIN_TICK, False)
        i = bisect.bisect_right(initialized, tick)
        return (initialized[i], True) if i < len(initialized) else (MAX_TICK, False)

    def _cross(self, tick: int, fee_growth_global_0: int, fee_growth_global_1: int) -> int:
        """틱 크로싱: outside 누적치를 뒤집고 liquidity_net 반환"""
        info = self.ticks[tick]
        info.fee_growth_outside_0_x128 = (fee_growth_global_0 - info.fee_growth_outside_0_x128) % UINT256_MOD
        info.fee_growth_outside_1_x128 = (fee_growth_global_1 - info.fee_growth_outside_1_x128) % UINT256_MOD
        return info.liquidity_net

    # ------------------------------------------------------------------
    # Internal bookkeeping
    # ------------------------------------------------------------------

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise PoolError("pool: not initialized")

    def _check_ticks(self, tick_lower: int, tick_upper: int) -> None:
        if tick_lower >= tick_upper:
            raise PoolError("pool: tick_lower must be below tick_upper")
        if tick_lower < MIN_TICK or tick_upper > MAX_TICK:
            raise PoolError("pool: tick out of range")
        if not (is_aligned(tick_lower, self.tick_spacing) and is_aligned(tick_upper, self.tick_spacing)):
            raise PoolError("pool: ticks must be multiples of tick spacing")

    def _update_tick(self, tick: int, liquidity_delta: int, upper: bool) -> bool:
        """틱 유동성 갱신, 초기화 상태가 바뀌었으면 True"""
        info = self.ticks.get(tick)
        if info is None:
            info = TickInfo()
            self.ticks[tick] = info

        gross_before = info.liquidity_gross
        gross_after = gross_before + liquidity_delta

        if gross_before == 0 and tick <= self.tick:
            # 초기화 이전 성장은 전부 틱 아래에서 발생했다고 간주
            info.fee_growth_outside_0_x128 = self.fee_growth_global_0_x128
            info.fee_growth_outside_1_x128 = self.fee_growth_global_1_x128

        info.liquidity_gross = gross_after
        info.liquidity_net += -liquidity_delta if upper else liquidity_delta

        return (gross_after == 0) != (gross_before == 0)

    def _fee_growth_inside(self, tick_lower: int, tick_upper: int) -> Tuple[int, int]:
        lower = self.ticks.get(tick_lower, TickInfo())
        upper = self.ticks.get(tick_upper, TickInfo())
        inside0 = fee_growth_inside(
            tick_lower, tick_upper, self.tick,
            self.fee_growth_global_0_x128,
            lower.fee_growth_outside_0_x128,
            upper.fee_growth_outside_0_x128
        )
        inside1 = fee_growth_inside(
            tick_lower, tick_upper, self.tick,
            self.fee_growth_global_1_x128,
            lower.fee_growth_outside_1_x128,
            upper.fee_growth_outside_1_x128
        )
        return inside0, inside1

    def _modify_position(
        self,
        owner: str,
        tick_lower: int,
        tick_upper: int,
        liquidity_delta: int
    ) -> Tuple[int, int]:
        """포지션 유동성 변경 + 수수료 정산

        Returns:
            (amount0, amount1) 변경된 유동성에 해당하는 토큰 (추가면 올림, 제거면 내림)
        """
        self._require_initialized()
        self._check_ticks(tick_lower, tick_upper)

        key = (owner.lower(), tick_lower, tick_upper)
        info = self.positions.get(key)
        if info is None:
            if liquidity_delta <= 0:
                raise PoolError("pool: position does not exist")
            info = PositionInfo()
            self.positions[key] = info

        if liquidity_delta == 0 and info.liquidity == 0:
            raise PoolError("pool: cannot poke an empty position")
        if liquidity_delta < 0 and info.liquidity < -liquidity_delta:
            raise PoolError("pool: insufficient position liquidity")

        flipped_lower = flipped_upper = False
        if liquidity_delta != 0:
            flipped_lower = self._update_tick(tick_lower, liquidity_delta, upper=False)
            flipped_upper = self._update_tick(tick_upper, liquidity_delta, upper=True)

        inside0, inside1 = self._fee_growth_inside(tick_lower, tick_upper)
        info.tokens_owed_0 += calculate_uncollected_fees(
            info.liquidity, inside0, info.fee_growth_inside_0_last_x128
        )
        info.tokens_owed_1 += calculate_uncollected_fees(
            info.liquidity, inside1, info.fee_growth_inside_1_last_x128
        )
        info.fee_growth_inside_0_last_x128 = inside0
        info.fee_growth_inside_1_last_x128 = inside1
        info.liquidity += liquidity_delta

        if liquidity_delta < 0:
            if flipped_lower:
                del self.ticks[tick_lower]
            if flipped_upper:
                del self.ticks[tick_upper]

        if liquidity_delta == 0:
            return 0, 0

        amount0, amount1 = get_amounts_for_liquidity(
            self.sqrt_price_x96,
            get_sqrt_ratio_at_tick(tick_lower),
            get_sqrt_ratio_at_tick(tick_upper),
            abs(liquidity_delta),
            round_up=liquidity_delta > 0
        )

        if tick_lower <= self.tick < tick_upper:
            self.liquidity += liquidity_delta

        return amount0, amount1

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        return {
            "sqrt_price_x96": self.sqrt_price_x96,
            "tick": self.tick,
            "liquidity": self.liquidity,
            "fee_growth_global_0_x128": self.fee_growth_global_0_x128,
            "fee_growth_global_1_x128": self.fee_growth_global_1_x128,
            "ticks": {k: replace(v) for k, v in self.ticks.items()},
            "positions": {k: replace(v) for k, v in self.positions.items()},
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self.sqrt_price_x96 = snapshot["sqrt_price_x96"]
        self.tick = snapshot["tick"]
        self.liquidity = snapshot["liquidity"]
        self.fee_growth_global_0_x128 = snapshot["fee_growth_global_0_x128"]
        self.fee_growth_global_1_x128 = snapshot["fee_growth_global_1_x128"]
        self.ticks = {k: replace(v) for k, v in snapshot["ticks"].items()}
        self.positions = {k: replace(v) for k, v in snapshot["positions"].items()}
