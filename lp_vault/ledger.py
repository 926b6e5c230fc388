"""
Token Ledger - 대체 가능 토큰 원장

token0/token1 잔고와 볼트 지분(share) 모두 같은 원장 모델을 사용한다.
ERC20과 같은 의미: 잔고, 허용량(allowance), 총 공급량.
"""

import logging
from typing import Dict, Tuple, Any

from .constants import ZERO_ADDRESS
from .errors import InsufficientBalanceError, InsufficientAllowanceError, PolicyViolation

logger = logging.getLogger(__name__)


class TokenLedger:
    """대체 가능 토큰 원장

    사용법:
        weth = TokenLedger("0x...", symbol="WETH")
        weth.mint(alice, 10 ** 18)
        weth.approve(alice, vault.address, 10 ** 18)
        weth.transfer_from(vault.address, alice, vault.address, 10 ** 18)
    """

    def __init__(self, address: str, symbol: str = "", decimals: int = 18):
        self.address = address.lower()
        self.symbol = symbol
        self.decimals = decimals
        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}
        self._total_supply = 0

    def __repr__(self) -> str:
        return f"TokenLedger({self.symbol or self.address})"

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder.lower(), 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner.lower(), spender.lower()), 0)

    def total_supply(self) -> int:
        return self._total_supply

    def mint(self, to: str, amount: int) -> None:
        if to.lower() == ZERO_ADDRESS:
            raise PolicyViolation("mint: to")
        self._check_amount(amount)
        self._balances[to.lower()] = self.balance_of(to) + amount
        self._total_supply += amount

    def burn(self, holder: str, amount: int) -> None:
        self._check_amount(amount)
        balance = self.balance_of(holder)
        if balance < amount:
            raise InsufficientBalanceError("insufficient balance")
        self._balances[holder.lower()] = balance - amount
        self._total_supply -= amount

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        """sender 잔고에서 recipient로 이동

        Raises:
            InsufficientBalanceError: sender 잔고 부족
        """
        if recipient.lower() == ZERO_ADDRESS:
            raise PolicyViolation("transfer: to")
        self._check_amount(amount)
        balance = self.balance_of(sender)
        if balance < amount:
            raise InsufficientBalanceError("underflow balance sender")
        self._balances[sender.lower()] = balance - amount
        self._balances[recipient.lower()] = self.balance_of(recipient) + amount

    def approve(self, owner: str, spender: str, amount: int) -> None:
        self._check_amount(amount)
        self._allowances[(owner.lower(), spender.lower())] = amount

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> None:
        """spender가 owner의 허용량을 사용해 recipient로 이동

        Raises:
            InsufficientAllowanceError: 허용량 부족
            InsufficientBalanceError: owner 잔고 부족
        """
        allowed = self.allowance(owner, spender)
        if allowed < amount:
            raise InsufficientAllowanceError("allowance insufficient")
        self.transfer(owner, recipient, amount)
        self._allowances[(owner.lower(), spender.lower())] = allowed - amount

    def snapshot(self) -> Dict[str, Any]:
        return {
            "balances": dict(self._balances),
            "allowances": dict(self._allowances),
            "total_supply": self._total_supply,
        }

    def restore(self, snapshot: Dict[str, Any]) -> None:
        self._balances = dict(snapshot["balances"])
        self._allowances = dict(snapshot["allowances"])
        self._total_supply = snapshot["total_supply"]

    @staticmethod
    def _check_amount(amount: int) -> None:
        if amount < 0:
            raise ValueError(f"음수 수량은 허용되지 않습니다: {amount}")
