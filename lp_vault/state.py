"""
All-or-nothing 호출 실행

각 상태 보유 컴포넌트(TokenLedger, ConcentratedPool, Vault)는 snapshot()/restore()를
제공한다. transaction()은 호출 전에 스냅샷을 찍고, 예외가 발생하면 모든 컴포넌트를
복원한 뒤 예외를 그대로 다시 던진다. 실패한 호출의 부분 상태는 관측되지 않는다.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Any

logger = logging.getLogger(__name__)


@contextmanager
def transaction(*components: Any) -> Iterator[None]:
    """컴포넌트 묶음에 대한 원자적 실행 구간

    사용법:
        with transaction(vault, pool, token0, token1):
            ...
    """
    # 중복 제거 (순서 유지)
    unique = list({id(c): c for c in components}.values())
    snapshots = [(component, component.snapshot()) for component in unique]
    try:
        yield
    except Exception as e:
        for component, snapshot in reversed(snapshots):
            component.restore(snapshot)
        logger.debug("transaction reverted: %s", e)
        raise
