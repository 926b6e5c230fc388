"""
Policy Guard - 예치/인출/리밸런스 사전 검사

검사는 상태 변경 전에 정해진 순서대로 수행되며, 첫 위반에서 오류를 던진다.
"""

from typing import Optional, Tuple

from ..addresses import is_zero_address
from ..errors import PolicyViolation, GeometryError, AccessControlError
from ..constants import PERCENT, MIN_TICK, MAX_TICK
from ..math.tick_math import is_aligned, floor_tick, ceil_tick


def require_owner(owner: str, sender: str) -> None:
    if sender.lower() != owner.lower():
        raise AccessControlError("Ownable: caller is not the owner")


def check_deposit(
    amount0: int,
    amount1: int,
    to: str,
    allow_token0: bool,
    allow_token1: bool,
    deposit_max0: int,
    deposit_max1: int,
    vault_address: str
) -> None:
    """예치 사전 검사 (deposit_max 0은 무제한)"""
    if amount0 < 0 or amount1 < 0:
        raise PolicyViolation("deposit: amounts must be non-negative")
    if amount0 == 0 and amount1 == 0:
        raise PolicyViolation("deposit: deposits must be nonzero")
    if amount0 > 0 and not allow_token0:
        raise PolicyViolation("deposit: token0 not allowed")
    if amount1 > 0 and not allow_token1:
        raise PolicyViolation("deposit: token1 not allowed")
    if is_zero_address(to) or to.lower() == vault_address.lower():
        raise PolicyViolation("deposit: to")
    if (deposit_max0 and amount0 > deposit_max0) or (deposit_max1 and amount1 > deposit_max1):
        raise PolicyViolation("deposit: deposits must not exceed maximum amounts")


def check_total_supply(total_supply_after: int, max_total_supply: int) -> None:
    """max_total_supply 0은 무제한"""
    if max_total_supply and total_supply_after > max_total_supply:
        raise PolicyViolation("deposit: max total supply exceeded")


def check_withdraw(shares: int, to: str) -> None:
    if shares <= 0:
        raise PolicyViolation("withdraw: shares")
    if is_zero_address(to):
        raise PolicyViolation("withdraw: to")


def check_percentage(name: str, value: int) -> None:
    if not 0 <= value <= PERCENT:
        raise PolicyViolation(f"{name}: must be between 0 and {PERCENT}")


def _valid_range(tick_lower: int, tick_upper: int, tick_spacing: int) -> bool:
    return (
        tick_lower < tick_upper
        and MIN_TICK <= tick_lower
        and tick_upper <= MAX_TICK
        and is_aligned(tick_lower, tick_spacing)
        and is_aligned(tick_upper, tick_spacing)
    )


def check_base_range(tick_lower: int, tick_upper: int, tick_spacing: int) -> None:
    if not _valid_range(tick_lower, tick_upper, tick_spacing):
        raise GeometryError("rebalance: base position invalid")


def check_limit_range(
    tick_lower: int,
    tick_upper: int,
    tick_spacing: int,
    base_range: Optional[Tuple[int, int]] = None
) -> None:
    """limit 범위의 정적 검사 (정렬, 순서, base와 같은 범위 금지)"""
    if not _valid_range(tick_lower, tick_upper, tick_spacing) or base_range == (tick_lower, tick_upper):
        raise GeometryError("rebalance: limit position invalid")


def check_limit_placement(tick_lower: int, tick_upper: int, current_tick: int, tick_spacing: int) -> None:
    """limit 범위는 현재 틱에 바로 아래 또는 바로 위에서 맞닿아야 한다

    - 아래: tick_upper == floor(current_tick)  → token1만 보유
    - 위:   tick_lower == ceil(current_tick)   → token0만 보유
    """
    below = tick_upper == floor_tick(current_tick, tick_spacing)
    above = tick_lower == ceil_tick(current_tick, tick_spacing)
    if not (below or above):
        raise GeometryError("rebalance: limit position invalid")
