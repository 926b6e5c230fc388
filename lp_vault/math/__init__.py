"""
Math layer for LP Vault

Position Math Adapter 역할을 하는 정수 연산 함수들:
- tick_math: Tick ↔ sqrtPriceX96 변환, 틱 그리드 정렬
- sqrt_price_math: sqrtPriceX96 관련 계산
- liquidity_math: 유동성 ↔ 토큰 수량
- fee_math: 백서 기반 수수료 성장률 / 미수령 수수료
- swap_math: 스왑 스텝
"""

from .tick_math import (
    MIN_SQRT_RATIO,
    MAX_SQRT_RATIO,
    get_tick_at_sqrt_ratio,
    get_sqrt_ratio_at_tick,
    floor_tick,
    ceil_tick,
    is_aligned,
    tick_to_price,
)
from .sqrt_price_math import (
    encode_price_sqrt,
    sqrt_price_x96_to_price_int,
    get_next_sqrt_price_from_input,
)
from .liquidity_math import (
    get_amount0_delta,
    get_amount1_delta,
    get_liquidity_for_amounts,
    get_amounts_for_liquidity,
)
from .fee_math import (
    fee_growth_inside,
    calculate_uncollected_fees,
    calculate_fee_growth_delta,
    fee_growth_for_amount,
)
from .swap_math import SwapStep, compute_swap_step
