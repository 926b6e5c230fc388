"""
풀 상태 타입 정의

백서 Section 6의 상태 테이블을 Python dataclass로 정의.
모든 숫자 필드는 온체인 정밀도를 위해 int 타입 사용.
"""

from dataclasses import dataclass
from typing import Tuple, NamedTuple


PositionKey = Tuple[str, int, int]  # (owner, tick_lower, tick_upper)


@dataclass
class TickInfo:
    """Tick-Indexed State (Section 6.3, Table 2)

    - liquidity_gross: 해당 틱을 경계로 하는 총 유동성
    - liquidity_net: 틱을 왼쪽→오른쪽으로 크로싱 시 유동성 변화량 (ΔL)
    - fee_growth_outside_{0,1}_x128: 틱 외부 누적수수료 (f_o)
    """
    liquidity_gross: int = 0
    liquidity_net: int = 0
    fee_growth_outside_0_x128: int = 0
    fee_growth_outside_1_x128: int = 0


@dataclass
class PositionInfo:
    """Position-Indexed State (Section 6.4, Table 3)

    - liquidity: 포지션의 유동성 (l)
    - fee_growth_inside_{0,1}_last_x128: 마지막 업데이트 시점의 범위 내 수수료 (f_r(t_0))
    - tokens_owed_{0,1}: 인출 가능한 토큰 (burn 원금 + 정산된 수수료)
    """
    liquidity: int = 0
    fee_growth_inside_0_last_x128: int = 0
    fee_growth_inside_1_last_x128: int = 0
    tokens_owed_0: int = 0
    tokens_owed_1: int = 0


class SwapResult(NamedTuple):
    """스왑 결과 (풀 관점: 양수 = 풀로 유입, 음수 = 풀에서 유출)"""
    amount0: int
    amount1: int
    sqrt_price_x96: int
    tick: int
