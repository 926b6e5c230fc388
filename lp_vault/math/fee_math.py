"""
Fee Math - 백서 기반 수수료 성장률 / 미수령 수수료 계산

Uniswap V3 백서 Section 6.3, 6.4 공식. 풀의 수수료 장부와 볼트의
Fee Ledger가 모두 이 함수들로 미수령 수수료를 관측한다.

핵심 공식:
    f_a(i) = f_g - f_o(i)  if i_c >= i else f_o(i)     # 틱 i 위 수수료
    f_b(i) = f_o(i)        if i_c >= i else f_g - f_o(i) # 틱 i 아래 수수료
    f_r = f_g - f_b(i_l) - f_a(i_u)                     # 범위 내 수수료
    f_u = l × (f_r(t_1) - f_r(t_0))                     # 미수령 수수료
"""

from ..constants import Q128, UINT256_MOD


def fee_growth_above(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 위에서 발생한 수수료 성장률 (f_a)

    Args:
        tick_idx: 기준 틱 (i)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside: 틱 i의 fee growth outside (f_o(i))

    Returns:
        f_a(i), [0, 2^256)
    """
    if current_tick >= tick_idx:
        return (fee_growth_global - fee_growth_outside) % UINT256_MOD
    return fee_growth_outside


def fee_growth_below(
    tick_idx: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside: int
) -> int:
    """틱 아래에서 발생한 수수료 성장률 (f_b)

    Args:
        tick_idx: 기준 틱 (i)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside: 틱 i의 fee growth outside (f_o(i))

    Returns:
        f_b(i), [0, 2^256)
    """
    if current_tick >= tick_idx:
        return fee_growth_outside
    return (fee_growth_global - fee_growth_outside) % UINT256_MOD


def fee_growth_inside(
    tick_lower: int,
    tick_upper: int,
    current_tick: int,
    fee_growth_global: int,
    fee_growth_outside_lower: int,
    fee_growth_outside_upper: int
) -> int:
    """범위 내 fee growth 계산 (f_r)

    Solidity unchecked 블록처럼 uint256 랩어라운드를 적용한다.

    Args:
        tick_lower: 하한 틱 (i_l)
        tick_upper: 상한 틱 (i_u)
        current_tick: 현재 틱 (i_c)
        fee_growth_global: 전역 fee growth (f_g)
        fee_growth_outside_lower: 하한 틱의 fee growth outside (f_o(i_l))
        fee_growth_outside_upper: 상한 틱의 fee growth outside (f_o(i_u))

    Returns:
        범위 내 fee growth (f_r), [0, 2^256)
    """
    f_b = fee_growth_below(tick_lower, current_tick, fee_growth_global, fee_growth_outside_lower)
    f_a = fee_growth_above(tick_upper, current_tick, fee_growth_global, fee_growth_outside_upper)
    return (fee_growth_global - f_b - f_a) % UINT256_MOD


def calculate_fee_growth_delta(fee_growth_current: int, fee_growth_previous: int) -> int:
    """두 시점 간 fee growth 변화량 (uint256 랩어라운드)

    Args:
        fee_growth_current: 현재 fee growth
        fee_growth_previous: 이전 fee growth

    Returns:
        변화량, [0, 2^256)
    """
    return (fee_growth_current - fee_growth_previous) % UINT256_MOD


def calculate_uncollected_fees(
    liquidity: int,
    fee_growth_inside_current: int,
    fee_growth_inside_last: int
) -> int:
    """미수령 수수료 계산 (f_u), 토큰 최소 단위 (내림)

    Args:
        liquidity: 포지션 유동성 (l)
        fee_growth_inside_current: 현재 범위 내 fee growth (f_r(t_1))
        fee_growth_inside_last: 마지막 업데이트 시 fee growth (f_r(t_0))

    Returns:
        미수령 수수료 (토큰 최소 단위)
    """
    delta = calculate_fee_growth_delta(fee_growth_inside_current, fee_growth_inside_last)
    return liquidity * delta // Q128


def fee_growth_for_amount(fee_amount: int, liquidity: int) -> int:
    """스왑 수수료를 단위 유동성당 fee growth (Q128)로 변환

    Args:
        fee_amount: 스왑 수수료 (토큰 최소 단위)
        liquidity: 활성 유동성

    Returns:
        fee growth 증가분 (유동성이 0이면 0)
    """
    if liquidity == 0:
        return 0
    return fee_amount * Q128 // liquidity
