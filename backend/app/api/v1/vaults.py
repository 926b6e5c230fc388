"""
Vault Endpoints

볼트 생성, 조회, 예치/인출, 리밸런스, owner 설정.
엔진 오류는 main.py의 exception handler가 HTTP 상태로 변환한다.
"""
from fastapi import APIRouter, Depends

from lp_vault.vault import Vault

from app.api.schemas import (
    VaultCreateRequest,
    VaultResponse,
    VaultListResponse,
    PositionResponse,
    DepositRequest,
    DepositResponse,
    WithdrawRequest,
    WithdrawResponse,
    RebalanceRequest,
    VaultSettingsRequest,
)
from app.core.sandbox import Sandbox, get_sandbox

router = APIRouter()


def _vault_response(vault: Vault) -> VaultResponse:
    """볼트 현재 상태를 응답 모델로 변환"""
    initialized = vault.pool.initialized
    base = vault.base_position
    limit = vault.limit_position

    if initialized:
        total0, total1 = vault.get_total_amounts()
        base_snapshot = vault.get_base_position()
        limit_snapshot = vault.get_limit_position()
    else:
        total0, total1 = vault.idle_balance0, vault.idle_balance1
        base_snapshot = limit_snapshot = None

    def position(record, snapshot) -> PositionResponse:
        return PositionResponse(
            tick_lower=record.tick_lower,
            tick_upper=record.tick_upper,
            liquidity=record.liquidity,
            amount0=snapshot.amount0 if snapshot else 0,
            amount1=snapshot.amount1 if snapshot else 0
        )

    return VaultResponse(
        address=vault.address,
        pool=vault.pool.address,
        token0=vault.token0.symbol,
        token1=vault.token1.symbol,
        fee=vault.pool.fee,
        owner=vault.owner,
        allow_token0=vault.allow_token0,
        allow_token1=vault.allow_token1,
        tick=vault.current_tick() if initialized else None,
        total_supply=vault.total_supply(),
        total_amount0=total0,
        total_amount1=total1,
        idle_amount0=vault.idle_balance0,
        idle_amount1=vault.idle_balance1,
        base=position(base, base_snapshot),
        limit=position(limit, limit_snapshot),
        deposit_max0=vault.deposit_max0,
        deposit_max1=vault.deposit_max1,
        max_total_supply=vault.max_total_supply,
        affiliate=vault.affiliate,
        fee_recipient=vault.fee_recipient,
        base_fee=vault.base_fee,
        base_fee_split=vault.base_fee_split
    )


@router.post("/vaults", response_model=VaultResponse)
async def create_vault(request: VaultCreateRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """
    Create a vault through the factory (factory owner only)

    풀이 없으면 미초기화 상태로 함께 만들어진다. 예치 전에 POST /pools로 가격을 설정해야 한다.
    """
    vault = sandbox.create_vault(
        request.token_a,
        request.allow_a,
        request.token_b,
        request.allow_b,
        request.fee,
        sender=request.sender
    )
    return _vault_response(vault)


@router.get("/vaults", response_model=VaultListResponse)
async def list_vaults(sandbox: Sandbox = Depends(get_sandbox)):
    return VaultListResponse(vaults=[_vault_response(vault) for vault in sandbox.vaults()])


@router.get("/vaults/{address}", response_model=VaultResponse)
async def get_vault(address: str, sandbox: Sandbox = Depends(get_sandbox)):
    return _vault_response(sandbox.vault(address))


@router.post("/vaults/{address}/deposit", response_model=DepositResponse)
async def deposit(address: str, request: DepositRequest, sandbox: Sandbox = Depends(get_sandbox)):
    vault = sandbox.vault(address)
    shares = vault.deposit(request.amount0, request.amount1, request.to, sender=request.sender)
    return DepositResponse(
        shares=shares,
        balance=vault.balance_of(request.to),
        total_supply=vault.total_supply()
    )


@router.post("/vaults/{address}/withdraw", response_model=WithdrawResponse)
async def withdraw(address: str, request: WithdrawRequest, sandbox: Sandbox = Depends(get_sandbox)):
    vault = sandbox.vault(address)
    amount0, amount1 = vault.withdraw(request.shares, request.to, sender=request.sender)
    return WithdrawResponse(amount0=amount0, amount1=amount1, total_supply=vault.total_supply())


@router.post("/vaults/{address}/rebalance", response_model=VaultResponse)
async def rebalance(address: str, request: RebalanceRequest, sandbox: Sandbox = Depends(get_sandbox)):
    """
    Rebalance base and limit positions (vault owner only)

    실패하면 볼트, 풀, 토큰 상태가 모두 호출 전으로 복원된다.
    """
    vault = sandbox.vault(address)
    vault.rebalance(
        request.base_lower,
        request.base_upper,
        request.limit_lower,
        request.limit_upper,
        request.swap_amount,
        sender=request.sender
    )
    return _vault_response(vault)


@router.post("/vaults/{address}/settings", response_model=VaultResponse)
async def update_settings(address: str, request: VaultSettingsRequest, sandbox: Sandbox = Depends(get_sandbox)):
    changes = request.model_dump(exclude={"sender"})
    vault = sandbox.update_settings(address, request.sender, **changes)
    return _vault_response(vault)
