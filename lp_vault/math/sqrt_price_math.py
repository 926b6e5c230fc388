"""
Sqrt Price Math - sqrtPriceX96 관련 계산

Uniswap V3의 가격은 sqrtPriceX96 형식으로 저장됩니다.
sqrtPriceX96 = sqrt(price) * 2^96

References:
- Uniswap V3 Core: contracts/libraries/SqrtPriceMath.sol
"""

import math

from ..constants import Q96, Q192
from .full_math import mul_div_rounding_up, div_rounding_up


def encode_price_sqrt(reserve1: int, reserve0: int) -> int:
    """reserve 비율에서 sqrtPriceX96 계산 (내림)

    encode_price_sqrt(1, 1) == 2^96

    Args:
        reserve1: token1 수량
        reserve0: token0 수량

    Returns:
        sqrtPriceX96
    """
    if reserve0 <= 0 or reserve1 <= 0:
        raise ValueError("reserve는 양수여야 합니다")
    return math.isqrt(reserve1 * Q192 // reserve0)


def sqrt_price_x96_to_price_int(sqrt_price_x96: int, precision: int) -> int:
    """sqrtPriceX96을 정수 가격으로 변환

    Args:
        sqrt_price_x96: sqrtPriceX96
        precision: 가격 스케일 (예: 10^36)

    Returns:
        token1 per token0 × precision (내림)
    """
    return sqrt_price_x96 * sqrt_price_x96 * precision // Q192


def get_next_sqrt_price_from_amount0_rounding_up(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount0 변화에 따른 다음 sqrtPriceX96 계산 (올림)

    Args:
        sqrt_price_x96: 현재 sqrtPriceX96
        liquidity: 유동성
        amount: amount0 변화량
        add: True면 추가, False면 제거

    Returns:
        새로운 sqrtPriceX96
    """
    if amount == 0:
        return sqrt_price_x96

    numerator1 = liquidity << 96
    product = amount * sqrt_price_x96

    if add:
        return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 + product)

    if numerator1 <= product:
        raise ValueError("유동성 대비 amount0 제거량이 너무 큽니다")
    return mul_div_rounding_up(numerator1, sqrt_price_x96, numerator1 - product)


def get_next_sqrt_price_from_amount1_rounding_down(
    sqrt_price_x96: int,
    liquidity: int,
    amount: int,
    add: bool
) -> int:
    """amount1 변화에 따른 다음 sqrtPriceX96 계산 (내림)

    Args:
        sqrt_price_x96: 현재 sqrtPriceX96
        liquidity: 유동성
        amount: amount1 변화량
        add: True면 추가, False면 제거

    Returns:
        새로운 sqrtPriceX96
    """
    if add:
        return sqrt_price_x96 + (amount << 96) // liquidity

    quotient = div_rounding_up(amount << 96, liquidity)
    if sqrt_price_x96 <= quotient:
        raise ValueError("유동성 대비 amount1 제거량이 너무 큽니다")
    return sqrt_price_x96 - quotient


def get_next_sqrt_price_from_input(
    sqrt_price_x96: int,
    liquidity: int,
    amount_in: int,
    zero_for_one: bool
) -> int:
    """입력 토큰 amount_in 만큼 스왑했을 때의 다음 sqrtPriceX96

    zero_for_one이면 가격은 내려가고, 아니면 올라간다.

    Args:
        sqrt_price_x96: 현재 sqrtPriceX96
        liquidity: 활성 유동성
        amount_in: 입력 토큰 수량 (수수료 제외)
        zero_for_one: True면 token0 입력, False면 token1 입력

    Returns:
        새로운 sqrtPriceX96
    """
    if sqrt_price_x96 <= 0 or liquidity <= 0:
        raise ValueError("sqrtPrice와 유동성은 양수여야 합니다")

    if zero_for_one:
        return get_next_sqrt_price_from_amount0_rounding_up(sqrt_price_x96, liquidity, amount_in, True)
    return get_next_sqrt_price_from_amount1_rounding_down(sqrt_price_x96, liquidity, amount_in, True)
