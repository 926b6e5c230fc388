"""
Liquidity Math 테스트

유동성 ↔ 토큰 수량 변환과 반올림 방향을 테스트합니다.
"""

from ..constants import Q96
from ..math.full_math import mul_div_rounding_up, div_rounding_up
from ..math.liquidity_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_liquidity_for_amount0,
    get_liquidity_for_amount1,
    get_liquidity_for_amounts,
    get_amounts_for_liquidity,
)
from ..math.tick_math import get_sqrt_ratio_at_tick

E18 = 10 ** 18


class TestRounding:

    def test_mul_div_rounding_up(self):
        assert mul_div_rounding_up(10, 10, 3) == 34
        assert mul_div_rounding_up(10, 3, 3) == 10

    def test_div_rounding_up(self):
        assert div_rounding_up(7, 2) == 4
        assert div_rounding_up(8, 2) == 4

    def test_amount_deltas_round_up_by_at_most_one(self):
        sqrt_a = get_sqrt_ratio_at_tick(-60)
        sqrt_b = get_sqrt_ratio_at_tick(60)
        liquidity = 12345 * E18 + 7

        down0 = get_amount0_delta(sqrt_a, sqrt_b, liquidity, round_up=False)
        up0 = get_amount0_delta(sqrt_a, sqrt_b, liquidity, round_up=True)
        down1 = get_amount1_delta(sqrt_a, sqrt_b, liquidity, round_up=False)
        up1 = get_amount1_delta(sqrt_a, sqrt_b, liquidity, round_up=True)

        assert 0 <= up0 - down0 <= 1
        assert 0 <= up1 - down1 <= 1

    def test_amount_deltas_order_insensitive(self):
        sqrt_a = get_sqrt_ratio_at_tick(0)
        sqrt_b = get_sqrt_ratio_at_tick(100)
        assert get_amount0_delta(sqrt_a, sqrt_b, E18) == get_amount0_delta(sqrt_b, sqrt_a, E18)
        assert get_amount1_delta(sqrt_a, sqrt_b, E18) == get_amount1_delta(sqrt_b, sqrt_a, E18)

    def test_amount1_delta_exact(self):
        """Δy = L * (√P_b - √P_a)"""
        assert get_amount1_delta(Q96, 2 * Q96, E18) == E18


class TestLiquidityForAmounts:
    """가격 위치에 따라 어느 토큰이 제약이 되는지"""

    sqrt_a = get_sqrt_ratio_at_tick(-600)
    sqrt_b = get_sqrt_ratio_at_tick(600)

    def test_below_range_uses_token0_only(self):
        sqrt_price = get_sqrt_ratio_at_tick(-1200)
        liquidity = get_liquidity_for_amounts(sqrt_price, self.sqrt_a, self.sqrt_b, E18, 0)
        assert liquidity == get_liquidity_for_amount0(self.sqrt_a, self.sqrt_b, E18)
        assert get_liquidity_for_amounts(sqrt_price, self.sqrt_a, self.sqrt_b, 0, E18) == 0

    def test_above_range_uses_token1_only(self):
        sqrt_price = get_sqrt_ratio_at_tick(1200)
        liquidity = get_liquidity_for_amounts(sqrt_price, self.sqrt_a, self.sqrt_b, 0, E18)
        assert liquidity == get_liquidity_for_amount1(self.sqrt_a, self.sqrt_b, E18)
        assert get_liquidity_for_amounts(sqrt_price, self.sqrt_a, self.sqrt_b, E18, 0) == 0

    def test_in_range_takes_minimum(self):
        sqrt_price = Q96
        liquidity = get_liquidity_for_amounts(sqrt_price, self.sqrt_a, self.sqrt_b, E18, 5 * E18)
        assert liquidity == get_liquidity_for_amount0(sqrt_price, self.sqrt_b, E18)

    def test_in_range_single_token_gives_zero(self):
        """범위 안에서 한쪽 토큰이 없으면 민트할 수 없다"""
        assert get_liquidity_for_amounts(Q96, self.sqrt_a, self.sqrt_b, E18, 0) == 0

    def test_price_at_lower_bound_counts_as_below(self):
        """현재 가격 == 하한이면 token0만 필요"""
        liquidity = get_liquidity_for_amounts(self.sqrt_a, self.sqrt_a, self.sqrt_b, E18, 0)
        assert liquidity > 0


class TestAmountsForLiquidity:

    def test_minted_amounts_never_exceed_available(self):
        """floor 유동성을 올림으로 민트해도 가용 수량을 넘지 않는다"""
        cases = [
            (0, -1800, 1800, 1000 * E18, 1000 * E18),
            (-200, -1800, 1800, 1000 * E18, 3 * E18),
            (0, -600, 0, 0, 7 * E18 + 3),
            (-200, -180, 0, 11 * E18 + 1, 0),
        ]
        for tick, lower, upper, amount0, amount1 in cases:
            sqrt_price = get_sqrt_ratio_at_tick(tick)
            sqrt_a = get_sqrt_ratio_at_tick(lower)
            sqrt_b = get_sqrt_ratio_at_tick(upper)
            liquidity = get_liquidity_for_amounts(sqrt_price, sqrt_a, sqrt_b, amount0, amount1)
            need0, need1 = get_amounts_for_liquidity(sqrt_price, sqrt_a, sqrt_b, liquidity, round_up=True)
            assert need0 <= amount0
            assert need1 <= amount1

    def test_single_sided_positions(self):
        sqrt_a = get_sqrt_ratio_at_tick(0)
        sqrt_b = get_sqrt_ratio_at_tick(600)

        amount0, amount1 = get_amounts_for_liquidity(get_sqrt_ratio_at_tick(-60), sqrt_a, sqrt_b, E18)
        assert amount0 > 0 and amount1 == 0

        amount0, amount1 = get_amounts_for_liquidity(get_sqrt_ratio_at_tick(660), sqrt_a, sqrt_b, E18)
        assert amount0 == 0 and amount1 > 0

    def test_zero_liquidity(self):
        assert get_amounts_for_liquidity(Q96, Q96 // 2, 2 * Q96, 0) == (0, 0)
