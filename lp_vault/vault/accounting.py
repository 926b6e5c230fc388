"""
Share Accounting - 지분 발행/소각 산식과 수수료 분배 산식

모든 연산은 정수 내림. 가치는 token1 단위로 평가한다:
    value = amount1 + amount0 * price / PRECISION
"""

from typing import NamedTuple

from ..constants import PRECISION, PERCENT
from ..math.sqrt_price_math import sqrt_price_x96_to_price_int


class FeeSplit(NamedTuple):
    """수확 수수료 한 토큰분의 분배 결과 (retained + affiliate + recipient == 수확량)"""
    retained: int
    affiliate: int
    recipient: int

    @property
    def distributed(self) -> int:
        return self.affiliate + self.recipient


def spot_price(sqrt_price_x96: int) -> int:
    """token1 per token0 (PRECISION 스케일)"""
    return sqrt_price_x96_to_price_int(sqrt_price_x96, PRECISION)


def value_in_token1(amount0: int, amount1: int, price: int) -> int:
    return amount1 + amount0 * price // PRECISION


def shares_for_deposit(
    amount0: int,
    amount1: int,
    total0: int,
    total1: int,
    total_supply: int,
    price: int
) -> int:
    """예치로 발행할 지분

    첫 예치는 예치 가치 그대로 (1:1 가격에서 amount0 + amount1),
    이후는 기존 총 가치 대비 비율.

    Raises:
        ZeroDivisionError: 지분이 있는데 볼트 가치가 0인 경우
    """
    deposit_value = value_in_token1(amount0, amount1, price)
    if total_supply == 0:
        return deposit_value
    return deposit_value * total_supply // value_in_token1(total0, total1, price)


def pro_rata(amount: int, shares: int, total_supply: int) -> int:
    return amount * shares // total_supply


def split_fees(
    amount: int,
    base_fee: int,
    base_fee_split: int,
    has_affiliate: bool,
    has_recipient: bool
) -> FeeSplit:
    """수확 수수료 분배

    amount 중 base_fee% 가 분배분. 분배분 중 base_fee_split% 가 affiliate 몫이고
    나머지가 fee recipient 몫이다. affiliate가 없으면 전부 recipient,
    recipient가 없으면 그 몫은 볼트에 남는다.
    """
    distributed = amount * base_fee // PERCENT
    affiliate = distributed * base_fee_split // PERCENT if has_affiliate else 0
    recipient = distributed - affiliate if has_recipient else 0
    return FeeSplit(amount - affiliate - recipient, affiliate, recipient)
