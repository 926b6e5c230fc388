"""
Vault Sandbox

HTTP 계층 뒤에서 토큰, 풀 레지스트리, 볼트 팩토리를 하나의 인메모리 세계로
묶는다. 라우터는 이 객체만 통해 엔진을 호출한다.
"""
import logging
from typing import Any, Dict, List, Optional

from lp_vault.addresses import derive_address
from lp_vault.errors import PolicyViolation, PoolError
from lp_vault.ledger import TokenLedger
from lp_vault.math.sqrt_price_math import encode_price_sqrt
from lp_vault.pool import ConcentratedPool, PoolRegistry
from lp_vault.pool.types import SwapResult
from lp_vault.state import transaction
from lp_vault.vault import Vault, VaultFactory

from app.config import settings

logger = logging.getLogger(__name__)

TOKEN_DEPLOYER = "0x" + "d" * 40


class ResourceNotFound(LookupError):
    """요청한 토큰/풀/볼트가 없음 (HTTP 404)"""
    pass


class Sandbox:
    """인메모리 볼트 시뮬레이션 환경

    사용법:
        sandbox = Sandbox(owner="0x11..11")
        sandbox.create_token("WETH")
        sandbox.create_token("USDC")
        sandbox.create_pool("WETH", "USDC", 3000, 1, 2000)
        vault = sandbox.create_vault("WETH", True, "USDC", True, 3000, sender="0x11..11")
    """

    def __init__(
        self,
        owner: str,
        fee_recipient: str = settings.FEE_RECIPIENT,
        base_fee: int = settings.DEFAULT_BASE_FEE,
        base_fee_split: int = settings.DEFAULT_BASE_FEE_SPLIT
    ):
        self.tokens: Dict[str, TokenLedger] = {}
        self.registry = PoolRegistry()
        self.factory = VaultFactory(
            self.registry,
            owner,
            fee_recipient=fee_recipient,
            base_fee=base_fee,
            base_fee_split=base_fee_split,
        )

    # Tokens

    def create_token(self, symbol: str, decimals: int = 18) -> TokenLedger:
        if symbol in self.tokens:
            raise PolicyViolation(f"token: {symbol} exists")
        token = TokenLedger(derive_address(TOKEN_DEPLOYER, symbol), symbol=symbol, decimals=decimals)
        self.tokens[symbol] = token
        logger.info("created token %s at %s", symbol, token.address)
        return token

    def token(self, symbol: str) -> TokenLedger:
        try:
            return self.tokens[symbol]
        except KeyError:
            raise ResourceNotFound(f"token {symbol} not found")

    # Pools

    def create_pool(self, token_a: str, token_b: str, fee: int, reserve_a: int, reserve_b: int) -> ConcentratedPool:
        """풀 생성 후 reserve 비율로 초기화

        팩토리가 먼저 만든 미초기화 풀이면 초기화만 한다.
        """
        ledger_a, ledger_b = self.token(token_a), self.token(token_b)
        pool = self.registry.get_pool(ledger_a, ledger_b, fee)
        if pool is None:
            pool = self.registry.create_pool(ledger_a, ledger_b, fee)

        if pool.token0 is ledger_a:
            reserve0, reserve1 = reserve_a, reserve_b
        else:
            reserve0, reserve1 = reserve_b, reserve_a
        try:
            sqrt_price_x96 = encode_price_sqrt(reserve1, reserve0)
        except ValueError as e:
            raise PoolError(f"pool: {e}")
        pool.initialize(sqrt_price_x96)
        return pool

    def pool(self, token_a: str, token_b: str, fee: int) -> ConcentratedPool:
        pool = self.registry.get_pool(self.token(token_a), self.token(token_b), fee)
        if pool is None:
            raise ResourceNotFound(f"pool {token_a}/{token_b} fee={fee} not found")
        return pool

    def swap(
        self,
        token_in: str,
        token_out: str,
        fee: int,
        amount_in: int,
        sender: str,
        recipient: Optional[str] = None
    ) -> SwapResult:
        pool = self.pool(token_in, token_out, fee)
        zero_for_one = pool.token0 is self.token(token_in)
        return pool.swap(
            sender=sender,
            recipient=recipient or sender,
            zero_for_one=zero_for_one,
            amount_in=amount_in,
        )

    # Vaults

    def create_vault(
        self,
        token_a: str,
        allow_a: bool,
        token_b: str,
        allow_b: bool,
        fee: int,
        sender: str
    ) -> Vault:
        return self.factory.create_vault(
            self.token(token_a), allow_a, self.token(token_b), allow_b, fee, sender=sender
        )

    def vault(self, address: str) -> Vault:
        vault = self.factory.get_vault_by_address(address)
        if vault is None:
            raise ResourceNotFound(f"vault {address} not found")
        return vault

    def vaults(self) -> List[Vault]:
        return self.factory.vaults

    def update_settings(self, address: str, sender: str, **changes: Any) -> Vault:
        """여러 owner 설정을 한 번에 적용 (하나라도 실패하면 전부 취소)

        None인 항목은 건너뛴다. owner 변경은 마지막에 적용한다.
        """
        vault = self.vault(address)
        with transaction(vault):
            if changes.get("deposit_max0") is not None or changes.get("deposit_max1") is not None:
                vault.set_deposit_max(
                    _pick(changes, "deposit_max0", vault.deposit_max0),
                    _pick(changes, "deposit_max1", vault.deposit_max1),
                    sender=sender,
                )
            for name in ("max_total_supply", "affiliate", "fee_recipient", "base_fee", "base_fee_split"):
                if changes.get(name) is not None:
                    getattr(vault, "set_" + name)(changes[name], sender=sender)
            if changes.get("owner") is not None:
                vault.transfer_ownership(changes["owner"], sender=sender)
        return vault


def _pick(changes: Dict[str, Any], name: str, default: Any) -> Any:
    value = changes.get(name)
    return default if value is None else value


# Global sandbox (reset_sandbox()로 초기화)
_sandbox: Optional[Sandbox] = None


def get_sandbox() -> Sandbox:
    global _sandbox
    if _sandbox is None:
        _sandbox = Sandbox(owner=settings.FACTORY_OWNER)
    return _sandbox


def reset_sandbox() -> Sandbox:
    global _sandbox
    _sandbox = Sandbox(owner=settings.FACTORY_OWNER)
    return _sandbox
