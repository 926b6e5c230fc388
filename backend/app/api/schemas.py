"""
API Request/Response Schemas using Pydantic

Defines data models for the vault simulation API endpoints.
토큰 수량은 모두 최소 단위 정수 (wei).
"""
from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class HealthCheckResponse(BaseModel):
    """Response for GET /api/v1/health"""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="API version")
    pools: int = Field(..., description="Number of pools in the sandbox")
    vaults: int = Field(..., description="Number of vaults in the sandbox")
    timestamp: datetime = Field(default_factory=datetime.utcnow)


# Tokens

class TokenCreateRequest(BaseModel):
    """Request payload for POST /api/v1/tokens"""
    symbol: str = Field(..., description="Token symbol (unique in the sandbox)", min_length=1)
    decimals: int = Field(default=18, ge=0, le=36)

    class Config:
        json_schema_extra = {
            "example": {"symbol": "WETH", "decimals": 18}
        }


class TokenResponse(BaseModel):
    symbol: str
    address: str
    decimals: int
    total_supply: int


class TokenMintRequest(BaseModel):
    """Request payload for POST /api/v1/tokens/{symbol}/mint"""
    to: str = Field(..., description="Recipient address")
    amount: int = Field(..., ge=0)


class TokenApproveRequest(BaseModel):
    """Request payload for POST /api/v1/tokens/{symbol}/approve"""
    owner: str = Field(..., description="Token holder")
    spender: str = Field(..., description="Spender address (usually a vault)")
    amount: int = Field(..., ge=0)


class BalanceResponse(BaseModel):
    symbol: str
    holder: str
    balance: int
    allowance: Optional[int] = Field(default=None, description="Allowance granted to spender, if requested")


# Pools

class PoolCreateRequest(BaseModel):
    """Request payload for POST /api/v1/pools

    초기 가격 = reserve_b / reserve_a (token_b per token_a)
    """
    token_a: str
    token_b: str
    fee: int = Field(default=3000, description="Fee tier (100, 500, 3000, 10000)")
    reserve_a: int = Field(default=1, gt=0)
    reserve_b: int = Field(default=1, gt=0)

    class Config:
        json_schema_extra = {
            "example": {"token_a": "WETH", "token_b": "USDC", "fee": 3000, "reserve_a": 1, "reserve_b": 2000}
        }


class PoolResponse(BaseModel):
    address: str
    token0: str
    token1: str
    fee: int
    tick_spacing: int
    tick: int
    sqrt_price_x96: int
    liquidity: int


class SwapRequest(BaseModel):
    """Request payload for POST /api/v1/pools/swap (exact input)"""
    token_in: str
    token_out: str
    fee: int = 3000
    amount_in: int = Field(..., gt=0)
    sender: str = Field(..., description="Payer of token_in")
    recipient: Optional[str] = Field(default=None, description="Receiver of token_out (default: sender)")


class SwapResponse(BaseModel):
    """풀 관점 수량: 양수 = 풀로 유입, 음수 = 풀에서 유출"""
    amount0: int
    amount1: int
    tick: int
    sqrt_price_x96: int


# Vaults

class VaultCreateRequest(BaseModel):
    """Request payload for POST /api/v1/vaults"""
    token_a: str
    allow_a: bool = True
    token_b: str
    allow_b: bool = True
    fee: int = 3000
    sender: str = Field(..., description="Caller (must be the factory owner)")


class PositionResponse(BaseModel):
    tick_lower: int
    tick_upper: int
    liquidity: int
    amount0: int
    amount1: int


class VaultResponse(BaseModel):
    """Response for vault endpoints (current state)"""
    address: str
    pool: str
    token0: str
    token1: str
    fee: int
    owner: str
    allow_token0: bool
    allow_token1: bool
    tick: Optional[int] = Field(default=None, description="Current pool tick (None before initialization)")
    total_supply: int
    total_amount0: int
    total_amount1: int
    idle_amount0: int
    idle_amount1: int
    base: PositionResponse
    limit: PositionResponse
    deposit_max0: int
    deposit_max1: int
    max_total_supply: int
    affiliate: str
    fee_recipient: str
    base_fee: int
    base_fee_split: int


class VaultListResponse(BaseModel):
    vaults: List[VaultResponse]


class DepositRequest(BaseModel):
    """Request payload for POST /api/v1/vaults/{address}/deposit"""
    amount0: int = Field(..., ge=0)
    amount1: int = Field(..., ge=0)
    to: str = Field(..., description="Share recipient")
    sender: str = Field(..., description="Token payer (must have approved the vault)")


class DepositResponse(BaseModel):
    shares: int
    balance: int = Field(..., description="Share balance of `to` after the deposit")
    total_supply: int


class WithdrawRequest(BaseModel):
    """Request payload for POST /api/v1/vaults/{address}/withdraw"""
    shares: int = Field(..., gt=0)
    to: str = Field(..., description="Token recipient")
    sender: str = Field(..., description="Share holder")


class WithdrawResponse(BaseModel):
    amount0: int
    amount1: int
    total_supply: int


class RebalanceRequest(BaseModel):
    """Request payload for POST /api/v1/vaults/{address}/rebalance

    swap_amount > 0: token0 → token1, < 0: token1 → token0
    """
    base_lower: int
    base_upper: int
    limit_lower: int
    limit_upper: int
    swap_amount: int = 0
    sender: str = Field(..., description="Caller (must be the vault owner)")

    class Config:
        json_schema_extra = {
            "example": {
                "base_lower": -1800,
                "base_upper": 1800,
                "limit_lower": -600,
                "limit_upper": 0,
                "swap_amount": 0,
                "sender": "0x1111111111111111111111111111111111111111"
            }
        }


class VaultSettingsRequest(BaseModel):
    """Request payload for POST /api/v1/vaults/{address}/settings

    None인 항목은 변경하지 않는다. 전부 적용되거나 전부 취소된다.
    """
    sender: str
    deposit_max0: Optional[int] = None
    deposit_max1: Optional[int] = None
    max_total_supply: Optional[int] = None
    affiliate: Optional[str] = None
    fee_recipient: Optional[str] = None
    base_fee: Optional[int] = None
    base_fee_split: Optional[int] = None
    owner: Optional[str] = Field(default=None, description="New owner (transfer ownership)")
