"""
Vault - 집중 유동성 풀 위의 LP 볼트

예치자 자본을 base/limit 두 범위 포지션과 idle 잔고로 나누어 보유하고,
지분(share) 원장으로 예치자의 비례 청구권을 기록한다.

모든 상태 변경 호출은 transaction() 안에서 실행되어 실패 시 볼트, 풀,
토큰 원장, 지분 원장이 호출 전 상태로 복원된다.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from ..addresses import is_zero_address
from ..constants import ZERO_ADDRESS, DEFAULT_BASE_FEE, DEFAULT_BASE_FEE_SPLIT
from ..errors import PolicyViolation
from ..ledger import TokenLedger
from ..pool.pool import ConcentratedPool
from ..state import transaction
from . import policy
from .accounting import spot_price, value_in_token1, shares_for_deposit, pro_rata, split_fees
from .events import DepositEvent, WithdrawEvent, CollectFeesEvent, RebalanceEvent, SetterEvent
from .position import Position, PositionSnapshot, BASE, LIMIT
from .position_manager import PositionManager

logger = logging.getLogger(__name__)

# owner 설정 필드 (snapshot 대상)
SETTINGS = (
    "owner", "deposit_max0", "deposit_max1", "max_total_supply",
    "affiliate", "_fee_recipient", "_base_fee", "_base_fee_split",
)


class Vault:
    """LP 볼트

    사용법:
        vault = Vault(address, pool, allow_token0=True, allow_token1=True, owner=admin)
        shares = vault.deposit(10 ** 18, 10 ** 18, alice, sender=alice)
        vault.rebalance(-1800, 1800, -600, 0, 0, sender=admin)
        amount0, amount1 = vault.withdraw(shares, alice, sender=alice)
    """

    def __init__(
        self,
        address: str,
        pool: ConcentratedPool,
        allow_token0: bool,
        allow_token1: bool,
        owner: str,
        fee_recipient: Optional[str] = None,
        base_fee: Optional[int] = None,
        base_fee_split: Optional[int] = None,
        factory: Any = None
    ):
        if not (allow_token0 or allow_token1):
            raise PolicyViolation("vault: at least one token must be allowed")
        if base_fee is not None:
            policy.check_percentage("base_fee", base_fee)
        if base_fee_split is not None:
            policy.check_percentage("base_fee_split", base_fee_split)

        self.address = address.lower()
        self.pool = pool
        self.token0 = pool.token0
        self.token1 = pool.token1
        self.allow_token0 = allow_token0
        self.allow_token1 = allow_token1
        self.owner = owner.lower()

        symbol = f"LPV-{self.token0.symbol}-{self.token1.symbol}"
        self.shares = TokenLedger(self.address, symbol=symbol)
        self.positions = PositionManager(pool, self.address)
        self.base_position = Position(BASE)
        self.limit_position = Position(LIMIT)

        self.deposit_max0 = 0
        self.deposit_max1 = 0
        self.max_total_supply = 0
        self.affiliate = ZERO_ADDRESS
        # None이면 수확 시점에 factory 값을 읽는다
        self.factory = factory
        self._fee_recipient = fee_recipient.lower() if fee_recipient is not None else None
        self._base_fee = base_fee
        self._base_fee_split = base_fee_split

        self.events: List[Any] = []

    def __repr__(self) -> str:
        return f"Vault({self.shares.symbol} {self.address})"

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def fee_recipient(self) -> str:
        if self._fee_recipient is not None:
            return self._fee_recipient
        return self.factory.fee_recipient if self.factory is not None else ZERO_ADDRESS

    @property
    def base_fee(self) -> int:
        if self._base_fee is not None:
            return self._base_fee
        return self.factory.base_fee if self.factory is not None else DEFAULT_BASE_FEE

    @property
    def base_fee_split(self) -> int:
        if self._base_fee_split is not None:
            return self._base_fee_split
        return self.factory.base_fee_split if self.factory is not None else DEFAULT_BASE_FEE_SPLIT

    @property
    def tick_spacing(self) -> int:
        return self.pool.tick_spacing

    @property
    def idle_balance0(self) -> int:
        return self.token0.balance_of(self.address)

    @property
    def idle_balance1(self) -> int:
        return self.token1.balance_of(self.address)

    def current_tick(self) -> int:
        return self.pool.current_tick()

    def balance_of(self, holder: str) -> int:
        return self.shares.balance_of(holder)

    def total_supply(self) -> int:
        return self.shares.total_supply()

    def get_base_position(self) -> PositionSnapshot:
        return self.positions.snapshot(self.base_position)

    def get_limit_position(self) -> PositionSnapshot:
        return self.positions.snapshot(self.limit_position)

    def get_total_amounts(self) -> Tuple[int, int]:
        """idle + base + limit (미수령 수수료 포함)"""
        base0, base1 = self.positions.current_amounts(self.base_position)
        limit0, limit1 = self.positions.current_amounts(self.limit_position)
        return self.idle_balance0 + base0 + limit0, self.idle_balance1 + base1 + limit1

    # ------------------------------------------------------------------
    # Deposit / withdraw
    # ------------------------------------------------------------------

    def deposit(self, amount0: int, amount1: int, to: str, *, sender: str) -> int:
        """token0/token1을 예치하고 지분을 to에게 발행

        토큰은 sender가 볼트에 approve해 둔 허용량에서 가져온다.

        Returns:
            발행된 지분
        """
        policy.check_deposit(
            amount0, amount1, to,
            allow_token0=self.allow_token0,
            allow_token1=self.allow_token1,
            deposit_max0=self.deposit_max0,
            deposit_max1=self.deposit_max1,
            vault_address=self.address,
        )

        total0, total1 = self.get_total_amounts()
        total_supply = self.total_supply()
        price = spot_price(self.pool.sqrt_price_x96)

        if total_supply > 0 and value_in_token1(total0, total1, price) == 0:
            raise PolicyViolation("deposit: vault has no value")
        shares = shares_for_deposit(amount0, amount1, total0, total1, total_supply, price)
        if shares == 0:
            raise PolicyViolation("deposit: shares")
        policy.check_total_supply(total_supply + shares, self.max_total_supply)

        with self._transaction():
            if amount0 > 0:
                self.token0.transfer_from(self.address, sender, self.address, amount0)
            if amount1 > 0:
                self.token1.transfer_from(self.address, sender, self.address, amount1)
            self.shares.mint(to, shares)
            self.events.append(DepositEvent(sender.lower(), to.lower(), shares, amount0, amount1))

        logger.info("deposit %s -> %s: (%d, %d) shares=%d", sender, to, amount0, amount1, shares)
        return shares

    def withdraw(self, shares: int, to: str, *, sender: str) -> Tuple[int, int]:
        """sender의 지분을 소각하고 비례 몫을 to에게 지급

        idle 잔고와 두 포지션 모두에서 shares / total_supply 만큼 인출한다.
        인출분에 해당하는 수수료도 함께 지급된다.

        Returns:
            (amount0, amount1) 지급된 토큰
        """
        policy.check_withdraw(shares, to)

        with self._transaction():
            total_supply = self.total_supply()
            self.shares.burn(sender, shares)

            base0, base1 = self.positions.withdraw_share(self.base_position, shares, total_supply, to)
            limit0, limit1 = self.positions.withdraw_share(self.limit_position, shares, total_supply, to)

            idle0 = pro_rata(self.idle_balance0, shares, total_supply)
            idle1 = pro_rata(self.idle_balance1, shares, total_supply)
            if idle0 > 0:
                self.token0.transfer(self.address, to, idle0)
            if idle1 > 0:
                self.token1.transfer(self.address, to, idle1)

            amount0 = base0 + limit0 + idle0
            amount1 = base1 + limit1 + idle1
            self.events.append(WithdrawEvent(sender.lower(), to.lower(), shares, amount0, amount1))

        logger.info("withdraw %s -> %s: shares=%d (%d, %d)", sender, to, shares, amount0, amount1)
        return amount0, amount1

    # ------------------------------------------------------------------
    # Rebalance
    # ------------------------------------------------------------------

    def rebalance(
        self,
        base_lower: int,
        base_upper: int,
        limit_lower: int,
        limit_upper: int,
        swap_amount: int,
        *,
        sender: str
    ) -> None:
        """두 포지션을 전부 회수하고 새 범위에 재배포

        1. 범위 정적 검사 (정렬, 순서)
        2. base/limit 전체 회수, 수확 수수료 분배
        3. swap_amount > 0: token0 → token1, < 0: token1 → token0
        4. limit 범위가 스왑 후 현재 틱에 맞닿는지 검사
        5. base 먼저, 남은 잔고로 limit 배포. 나머지는 idle
        """
        policy.require_owner(self.owner, sender)
        policy.check_base_range(base_lower, base_upper, self.tick_spacing)
        policy.check_limit_range(limit_lower, limit_upper, self.tick_spacing, (base_lower, base_upper))

        with self._transaction():
            base = self.positions.withdraw_all(self.base_position)
            limit = self.positions.withdraw_all(self.limit_position)
            self._distribute_fees(base.fee0 + limit.fee0, base.fee1 + limit.fee1)

            if swap_amount != 0:
                self.pool.swap(
                    sender=self.address,
                    recipient=self.address,
                    zero_for_one=swap_amount > 0,
                    amount_in=abs(swap_amount),
                )

            tick = self.current_tick()
            policy.check_limit_placement(limit_lower, limit_upper, tick, self.tick_spacing)

            self.positions.deploy(self.base_position, base_lower, base_upper, self.idle_balance0, self.idle_balance1)
            self.positions.deploy(
                self.limit_position, limit_lower, limit_upper, self.idle_balance0, self.idle_balance1
            )

            total0, total1 = self.get_total_amounts()
            self.events.append(RebalanceEvent(
                tick, total0, total1, self.total_supply(),
                base_lower, base_upper, limit_lower, limit_upper
            ))

        logger.info(
            "rebalance tick=%d base=[%d, %d] L=%d limit=[%d, %d] L=%d idle=(%d, %d)",
            tick, base_lower, base_upper, self.base_position.liquidity,
            limit_lower, limit_upper, self.limit_position.liquidity,
            self.idle_balance0, self.idle_balance1
        )

    def _distribute_fees(self, fee0: int, fee1: int) -> None:
        """수확 수수료 중 외부 분배분을 affiliate / fee recipient에게 전송"""
        has_affiliate = not is_zero_address(self.affiliate)
        has_recipient = not is_zero_address(self.fee_recipient)
        split0 = split_fees(fee0, self.base_fee, self.base_fee_split, has_affiliate, has_recipient)
        split1 = split_fees(fee1, self.base_fee, self.base_fee_split, has_affiliate, has_recipient)

        for token, split in ((self.token0, split0), (self.token1, split1)):
            if split.affiliate > 0:
                token.transfer(self.address, self.affiliate, split.affiliate)
            if split.recipient > 0:
                token.transfer(self.address, self.fee_recipient, split.recipient)

        if fee0 or fee1:
            self.events.append(CollectFeesEvent(
                fee0, fee1, split0.affiliate, split1.affiliate, split0.recipient, split1.recipient
            ))
            logger.info(
                "fees harvested (%d, %d), distributed (%d, %d)",
                fee0, fee1, split0.distributed, split1.distributed
            )

    # ------------------------------------------------------------------
    # Owner settings
    # ------------------------------------------------------------------

    def set_deposit_max(self, deposit_max0: int, deposit_max1: int, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        if deposit_max0 < 0 or deposit_max1 < 0:
            raise PolicyViolation("deposit_max: must be non-negative")
        self.deposit_max0 = deposit_max0
        self.deposit_max1 = deposit_max1
        self._emit_setter(sender, "deposit_max", (deposit_max0, deposit_max1))

    def set_max_total_supply(self, max_total_supply: int, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        if max_total_supply < 0:
            raise PolicyViolation("max_total_supply: must be non-negative")
        self.max_total_supply = max_total_supply
        self._emit_setter(sender, "max_total_supply", max_total_supply)

    def set_affiliate(self, affiliate: str, *, sender: str) -> None:
        """ZERO_ADDRESS로 설정하면 affiliate 몫이 없어진다"""
        policy.require_owner(self.owner, sender)
        self.affiliate = affiliate.lower()
        self._emit_setter(sender, "affiliate", self.affiliate)

    def set_fee_recipient(self, fee_recipient: str, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        self._fee_recipient = fee_recipient.lower()
        self._emit_setter(sender, "fee_recipient", self.fee_recipient)

    def set_base_fee(self, base_fee: int, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        policy.check_percentage("base_fee", base_fee)
        self._base_fee = base_fee
        self._emit_setter(sender, "base_fee", base_fee)

    def set_base_fee_split(self, base_fee_split: int, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        policy.check_percentage("base_fee_split", base_fee_split)
        self._base_fee_split = base_fee_split
        self._emit_setter(sender, "base_fee_split", base_fee_split)

    def transfer_ownership(self, new_owner: str, *, sender: str) -> None:
        policy.require_owner(self.owner, sender)
        if is_zero_address(new_owner):
            raise PolicyViolation("Ownable: new owner is the zero address")
        self.owner = new_owner.lower()
        self._emit_setter(sender, "owner", self.owner)

    def _emit_setter(self, sender: str, name: str, value: Any) -> None:
        self.events.append(SetterEvent(sender.lower(), name, value))
        logger.info("%s set %s = %s", self.address, name, value)

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------

    def _transaction(self):
        return transaction(self, self.pool, self.token0, self.token1, self.shares)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "base_position": replace(self.base_position),
            "limit_position": replace(self.limit_position),
            "settings": {name: getattr(self, name) for name in SETTINGS},
            "events": len(self.events),
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self.base_position = snapshot["base_position"]
        self.limit_position = snapshot["limit_position"]
        for name, value in snapshot["settings"].items():
            setattr(self, name, value)
        del self.events[snapshot["events"]:]
