"""
LP Vault 상수 정의

온체인 수준 정밀도를 위한 상수들:
- Q96: sqrt price 인코딩에 사용 (2^96)
- Q128: fee growth 인코딩에 사용 (2^128)
- FEE_TIERS: 지원되는 수수료 티어
- TICK_SPACINGS: 각 수수료 티어별 틱 간격
- PRECISION: 스팟 가격 스케일 (1e18)
- 볼트 기본 수수료 파라미터
"""

from typing import Dict

# Fixed-point 인코딩 상수
Q96: int = 2 ** 96
Q128: int = 2 ** 128
Q192: int = 2 ** 192

# uint256 랩어라운드 (fee growth 계산)
UINT256_MOD: int = 2 ** 256
UINT128_MAX: int = 2 ** 128 - 1

# 수수료 티어 (hundredths of a bip)
# 500 = 0.05%, 3000 = 0.30%, 10000 = 1.00%
FEE_TIERS: Dict[int, str] = {
    100: "0.01%",    # 1 bps
    500: "0.05%",    # 5 bps
    3000: "0.30%",   # 30 bps
    10000: "1.00%",  # 100 bps
}

# 각 수수료 티어별 틱 간격
TICK_SPACINGS: Dict[int, int] = {
    100: 1,
    500: 10,
    3000: 60,
    10000: 200,
}

# 수수료 분모 (fee pips)
FEE_DENOMINATOR: int = 1_000_000

# 틱 범위 상수
MIN_TICK: int = -887272
MAX_TICK: int = 887272

# 스팟 가격 정밀도 (token1 per token0 × 1e18)
PRECISION: int = 10 ** 18

# 볼트 기본값
# base_fee: 수확 수수료 중 외부로 분배되는 비율 (%)
# base_fee_split: 분배분 중 affiliate 몫 (%)
DEFAULT_BASE_FEE: int = 10
DEFAULT_BASE_FEE_SPLIT: int = 50
PERCENT: int = 100

ZERO_ADDRESS: str = "0x" + "0" * 40
