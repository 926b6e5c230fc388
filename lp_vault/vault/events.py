"""
볼트 이벤트 레코드

Vault.events에 발생 순서대로 쌓인다. 실패한 호출의 이벤트는 롤백된다.
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class DepositEvent:
    sender: str
    to: str
    shares: int
    amount0: int
    amount1: int


@dataclass(frozen=True)
class WithdrawEvent:
    sender: str
    to: str
    shares: int
    amount0: int
    amount1: int


@dataclass(frozen=True)
class CollectFeesEvent:
    """수확 수수료 (fee{0,1}: 총 수확량, affiliate/recipient: 외부 분배분)"""
    fee0: int
    fee1: int
    affiliate0: int
    affiliate1: int
    recipient0: int
    recipient1: int


@dataclass(frozen=True)
class RebalanceEvent:
    tick: int
    total_amount0: int
    total_amount1: int
    total_supply: int
    base_lower: int
    base_upper: int
    limit_lower: int
    limit_upper: int


@dataclass(frozen=True)
class SetterEvent:
    """관리 파라미터 변경 (name: 파라미터 이름)"""
    sender: str
    name: str
    value: Any
