"""
주소 헬퍼

주소는 소문자 0x-hex 문자열로 다룬다. 볼트/풀 주소는 생성자 주소와 키에서
결정적으로 유도한다 (CREATE2와 같은 성질: 같은 키 → 같은 주소).
"""

import hashlib
from typing import Any

from .constants import ZERO_ADDRESS


def derive_address(deployer: str, *key: Any) -> str:
    """deployer와 키에서 결정적 주소 유도"""
    payload = ":".join([deployer.lower()] + [str(part).lower() for part in key])
    return "0x" + hashlib.sha3_256(payload.encode()).hexdigest()[-40:]


def is_zero_address(address: str) -> bool:
    return not address or address.lower() == ZERO_ADDRESS


def sort_addresses(address_a: str, address_b: str) -> tuple:
    """주소를 (token0, token1) 순서로 정렬"""
    a, b = address_a.lower(), address_b.lower()
    return (a, b) if a < b else (b, a)
