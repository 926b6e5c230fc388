"""
VaultFactory - (token0, token1, fee, allow0, allow1) → 볼트 레지스트리

키당 볼트는 하나이며 재생성할 수 없다. 볼트 주소는 팩토리 주소와 키에서
결정적으로 유도된다.
"""

import logging
from typing import Dict, List, Optional, Tuple, Type

from ..addresses import derive_address, is_zero_address
from ..constants import ZERO_ADDRESS, DEFAULT_BASE_FEE, DEFAULT_BASE_FEE_SPLIT
from ..errors import FactoryError
from ..ledger import TokenLedger
from ..pool.registry import PoolRegistry
from . import policy
from .vault import Vault

logger = logging.getLogger(__name__)

VaultKey = Tuple[str, str, int, bool, bool]


class VaultFactory:
    """볼트 팩토리

    사용법:
        factory = VaultFactory(PoolRegistry(), owner=admin)
        vault = factory.create_vault(weth, True, usdc, True, 3000, sender=admin)
        assert factory.get_vault(usdc, weth, 3000, True, True) is vault

    vault_class로 LegacyVault를 넘기면 수수료 분배가 없는 볼트를 만든다.
    """

    def __init__(
        self,
        pool_registry: PoolRegistry,
        owner: str,
        address: str = "0x" + "e" * 40,
        fee_recipient: str = ZERO_ADDRESS,
        base_fee: int = DEFAULT_BASE_FEE,
        base_fee_split: int = DEFAULT_BASE_FEE_SPLIT,
        vault_class: Type[Vault] = Vault
    ):
        policy.check_percentage("base_fee", base_fee)
        policy.check_percentage("base_fee_split", base_fee_split)

        self.pool_registry = pool_registry
        self.owner = owner.lower()
        self.address = address.lower()
        self.fee_recipient = fee_recipient.lower()
        self.base_fee = base_fee
        self.base_fee_split = base_fee_split
        self.vault_class = vault_class

        self._vaults: Dict[VaultKey, Vault] = {}
        self._by_address: Dict[str, Vault] = {}

    @property
    def vaults(self) -> List[Vault]:
        """생성 순서"""
        return list(self._vaults.values())

    def vault_count(self) -> int:
        return len(self._vaults)

    def get_vault(
        self,
        token_a: TokenLedger,
        token_b: TokenLedger,
        fee: int,
        allow_a: bool,
        allow_b: bool
    ) -> Optional[Vault]:
        return self._vaults.get(_vault_key(token_a, allow_a, token_b, allow_b, fee))

    def get_vault_by_address(self, address: str) -> Optional[Vault]:
        return self._by_address.get(address.lower())

    def create_vault(
        self,
        token_a: TokenLedger,
        allow_a: bool,
        token_b: TokenLedger,
        allow_b: bool,
        fee: int,
        *,
        sender: str
    ) -> Vault:
        """볼트 생성 및 등록 (owner 전용)

        풀이 없으면 레지스트리에 새로 만든다. 새 풀은 initialize 전 상태다.

        Raises:
            AccessControlError: owner가 아닌 호출자
            FactoryError: 같은 토큰, 제로 주소, 허용 토큰 없음, 이미 존재, 잘못된 수수료
        """
        policy.require_owner(self.owner, sender)

        if token_a.address == token_b.address:
            raise FactoryError("create_vault: identical token addresses")
        if is_zero_address(token_a.address) or is_zero_address(token_b.address):
            raise FactoryError("create_vault: zero address")
        if not (allow_a or allow_b):
            raise FactoryError("create_vault: at least one token must be allowed")

        key = _vault_key(token_a, allow_a, token_b, allow_b, fee)
        if key in self._vaults:
            raise FactoryError("create_vault: vault exists")
        if not self.pool_registry.fee_enabled(fee):
            raise FactoryError("create_vault: fee incorrect")

        pool = self.pool_registry.get_pool(token_a, token_b, fee)
        if pool is None:
            pool = self.pool_registry.create_pool(token_a, token_b, fee)

        vault = self.vault_class(
            address=derive_address(self.address, *key),
            pool=pool,
            allow_token0=key[3],
            allow_token1=key[4],
            owner=sender,
            factory=self,
        )
        self._vaults[key] = vault
        self._by_address[vault.address] = vault

        logger.info(
            "created %s for %s/%s fee=%d allow=(%s, %s)",
            vault.address, pool.token0.symbol, pool.token1.symbol, fee, key[3], key[4]
        )
        return vault

    # ------------------------------------------------------------------
    # 수수료 설정 (볼트별 설정이 없으면 모든 볼트가 수확 시점에 읽는다)
    # ------------------------------------------------------------------

    def set_fee_recipient(self, fee_recipient: str, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        self.fee_recipient = fee_recipient.lower()

    def set_base_fee(self, base_fee: int, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        policy.check_percentage("base_fee", base_fee)
        self.base_fee = base_fee

    def set_base_fee_split(self, base_fee_split: int, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        policy.check_percentage("base_fee_split", base_fee_split)
        self.base_fee_split = base_fee_split


def _vault_key(token_a: TokenLedger, allow_a: bool, token_b: TokenLedger, allow_b: bool, fee: int) -> VaultKey:
    """정렬된 토큰 순서의 키 (allow 플래그는 토큰을 따라간다)"""
    if token_a.address < token_b.address:
        return token_a.address, token_b.address, fee, bool(allow_a), bool(allow_b)
    return token_b.address, token_a.address, fee, bool(allow_b), bool(allow_a)
