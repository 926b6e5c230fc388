"""
볼트 서브 포지션 레코드

base/limit 두 포지션은 같은 Position 레코드를 태그로만 구분한다.
PositionManager는 두 포지션을 동일하게 다룬다.
"""

from dataclasses import dataclass
from typing import NamedTuple


BASE = "base"
LIMIT = "limit"


@dataclass
class Position:
    """볼트가 보유한 하나의 범위 포지션

    - tick_lower, tick_upper: 틱 범위 (배포 전에는 0, 0)
    - liquidity: 풀에 예치된 유동성
    - uncollected_fee{0,1}: 마지막 정산 시점에 적립된 미수령 수수료
    """
    kind: str
    tick_lower: int = 0
    tick_upper: int = 0
    liquidity: int = 0
    uncollected_fee0: int = 0
    uncollected_fee1: int = 0

    @property
    def deployed(self) -> bool:
        return self.tick_lower != self.tick_upper

    def reset_fees(self) -> None:
        self.uncollected_fee0 = 0
        self.uncollected_fee1 = 0


class PositionSnapshot(NamedTuple):
    """getBasePosition / getLimitPosition 조회 결과 (원금 + 미수령 수수료)"""
    liquidity: int
    amount0: int
    amount1: int


class Harvest(NamedTuple):
    """withdraw_all 결과: 원금과 수수료를 분리해서 반환"""
    amount0: int
    amount1: int
    fee0: int
    fee1: int
