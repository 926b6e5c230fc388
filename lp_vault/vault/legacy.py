"""
LegacyVault - 수수료 분배가 없는 볼트

수확 수수료 전부가 볼트에 남아 지분 가치로 환원된다 (base_fee 0 고정).
수확 이벤트는 일반 볼트와 같이 기록된다.
수수료 관련 설정은 지원하지 않는다.
"""

from ..errors import PolicyViolation
from .vault import Vault


class LegacyVault(Vault):

    def __init__(self, *args, **kwargs):
        kwargs["base_fee"] = 0
        kwargs["base_fee_split"] = 0
        super().__init__(*args, **kwargs)

    def set_affiliate(self, affiliate: str, *, sender: str) -> None:
        raise PolicyViolation("legacy vault: fee distribution not supported")

    def set_fee_recipient(self, fee_recipient: str, *, sender: str) -> None:
        raise PolicyViolation("legacy vault: fee distribution not supported")

    def set_base_fee(self, base_fee: int, *, sender: str) -> None:
        raise PolicyViolation("legacy vault: fee distribution not supported")

    def set_base_fee_split(self, base_fee_split: int, *, sender: str) -> None:
        raise PolicyViolation("legacy vault: fee distribution not supported")
