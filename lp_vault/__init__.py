"""
LP Vault

집중 유동성 풀 한 쌍 위에서 예치자 자본을 base/limit 두 포지션으로 운용하는
볼트 회계 및 리밸런싱 엔진. 온체인과 같은 정수 정밀도로 계산한다.
"""

__version__ = "0.1.0"

from .constants import Q96, Q128, FEE_TIERS, TICK_SPACINGS, PRECISION, ZERO_ADDRESS
from .errors import (
    VaultError,
    PolicyViolation,
    InsufficientResourceError,
    InsufficientBalanceError,
    InsufficientAllowanceError,
    GeometryError,
    AccessControlError,
    FactoryError,
    PoolError,
)
from .ledger import TokenLedger
from .pool import ConcentratedPool, PoolRegistry
from .vault import Vault, LegacyVault, VaultFactory, PositionSnapshot
