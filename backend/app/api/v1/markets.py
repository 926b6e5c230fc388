"""
Token & Pool Endpoints

샌드박스 토큰 발행/승인, 풀 생성과 스왑.
"""
from fastapi import APIRouter, Depends

from app.api.schemas import (
    TokenCreateRequest,
    TokenResponse,
    TokenMintRequest,
    TokenApproveRequest,
    BalanceResponse,
    PoolCreateRequest,
    PoolResponse,
    SwapRequest,
    SwapResponse,
)
from app.core.sandbox import Sandbox, get_sandbox

router = APIRouter()


def _token_response(token) -> TokenResponse:
    return TokenResponse(
        symbol=token.symbol,
        address=token.address,
        decimals=token.decimals,
        total_supply=token.total_supply()
    )


def _pool_response(pool) -> PoolResponse:
    return PoolResponse(
        address=pool.address,
        token0=pool.token0.symbol,
        token1=pool.token1.symbol,
        fee=pool.fee,
        tick_spacing=pool.tick_spacing,
        tick=pool.tick,
        sqrt_price_x96=pool.sqrt_price_x96,
        liquidity=pool.liquidity
    )


@router.post("/tokens", response_model=TokenResponse)
async def create_token(request: TokenCreateRequest, sandbox: Sandbox = Depends(get_sandbox)):
    token = sandbox.create_token(request.symbol, request.decimals)
    return _token_response(token)


@router.get("/tokens/{symbol}", response_model=TokenResponse)
async def get_token(symbol: str, sandbox: Sandbox = Depends(get_sandbox)):
    return _token_response(sandbox.token(symbol))


@router.post("/tokens/{symbol}/mint", response_model=BalanceResponse)
async def mint_token(symbol: str, request: TokenMintRequest, sandbox: Sandbox = Depends(get_sandbox)):
    token = sandbox.token(symbol)
    token.mint(request.to, request.amount)
    return BalanceResponse(symbol=symbol, holder=request.to.lower(), balance=token.balance_of(request.to))


@router.post("/tokens/{symbol}/approve", response_model=BalanceResponse)
async def approve_token(symbol: str, request: TokenApproveRequest, sandbox: Sandbox = Depends(get_sandbox)):
    token = sandbox.token(symbol)
    token.approve(request.owner, request.spender, request.amount)
    return BalanceResponse(
        symbol=symbol,
        holder=request.owner.lower(),
        balance=token.balance_of(request.owner),
        allowance=token.allowance(request.owner, request.spender)
    )


@router.post("/pools", response_model=PoolResponse)
async def create_pool(request: PoolCreateRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """
    Create (or initialize) a pool

    팩토리가 볼트와 함께 만든 미초기화 풀이면 가격만 설정한다.
    """
    pool = sandbox.create_pool(
        request.token_a, request.token_b, request.fee, request.reserve_a, request.reserve_b
    )
    return _pool_response(pool)


@router.post("/pools/swap", response_model=SwapResponse)
async def swap(request: SwapRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """
    Exact-input swap against a pool

    sender가 token_in을 지불하고 recipient가 token_out을 받는다.
    """
    result = sandbox.swap(
        request.token_in,
        request.token_out,
        request.fee,
        request.amount_in,
        sender=request.sender,
        recipient=request.recipient
    )
    return SwapResponse(
        amount0=result.amount0,
        amount1=result.amount1,
        tick=result.tick,
        sqrt_price_x96=result.sqrt_price_x96
    )
