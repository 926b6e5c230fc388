"""
공용 fixture

token0/token1 원장, 풀 레지스트리, 팩토리, 1:1 가격으로 초기화된 볼트.
carol은 전 범위 유동성 공급자이자 트레이더 역할.
"""

import pytest

from ..ledger import TokenLedger
from ..math.sqrt_price_math import encode_price_sqrt
from ..math.tick_math import get_sqrt_ratio_at_tick
from ..pool.registry import PoolRegistry
from ..vault.factory import VaultFactory

E18 = 10 ** 18

ADMIN = "0x" + "1" * 40
ALICE = "0x" + "2" * 40
BOB = "0x" + "3" * 40
CAROL = "0x" + "4" * 40
RECIPIENT = "0x" + "5" * 40
AFFILIATE = "0x" + "6" * 40

# fee 3000 (tick spacing 60) 전 범위
FULL_RANGE_LOWER = -887220
FULL_RANGE_UPPER = 887220


def fund(token: TokenLedger, holder: str, amount: int, spender: str) -> None:
    token.mint(holder, amount)
    token.approve(holder, spender, amount)


def swap_to_tick(pool, tick: int, sender: str = CAROL):
    """sender가 가격을 tick까지 움직이는 스왑"""
    zero_for_one = tick < pool.current_tick()
    return pool.swap(
        sender, sender, zero_for_one, 10 ** 27,
        sqrt_price_limit_x96=get_sqrt_ratio_at_tick(tick)
    )


@pytest.fixture
def token0():
    return TokenLedger("0x" + "0a" * 20, symbol="TKA")


@pytest.fixture
def token1():
    return TokenLedger("0x" + "0b" * 20, symbol="TKB")


@pytest.fixture
def registry():
    return PoolRegistry()


@pytest.fixture
def factory(registry):
    return VaultFactory(registry, owner=ADMIN, fee_recipient=RECIPIENT)


@pytest.fixture
def pool(registry, token0, token1):
    """1:1 가격, carol의 전 범위 유동성 1000e18이 있는 풀"""
    pool = registry.create_pool(token0, token1, 3000)
    pool.initialize(encode_price_sqrt(1, 1))

    for token in (token0, token1):
        token.mint(CAROL, 10 ** 28)
    pool.mint(CAROL, FULL_RANGE_LOWER, FULL_RANGE_UPPER, 1000 * E18, payer=CAROL)
    return pool


@pytest.fixture
def vault(factory, pool, token0, token1):
    """token0/token1 모두 허용, alice와 bob이 예치할 토큰을 가진 볼트"""
    vault = factory.create_vault(token0, True, token1, True, 3000, sender=ADMIN)
    for holder in (ALICE, BOB):
        fund(token0, holder, 10_000 * E18, vault.address)
        fund(token1, holder, 10_000 * E18, vault.address)
    return vault
