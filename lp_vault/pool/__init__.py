"""
Pool layer for LP Vault

볼트가 바인딩되는 집중 유동성 풀과 풀 레지스트리.
"""

from .types import TickInfo, PositionInfo, SwapResult
from .pool import ConcentratedPool
from .registry import PoolRegistry
