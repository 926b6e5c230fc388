#!/usr/bin/env python3
"""
Vault Simulation

인메모리 풀 위에서 볼트 한 개를 운용하는 시나리오를 실행하고 결과를 출력한다.

1. 토큰 두 개와 풀 생성, 트레이더 자금 준비
2. 팩토리로 볼트 생성, 예치자 예치
3. 매 라운드: 트레이더 왕복 스왑 → owner가 현재 틱 기준으로 리밸런스
4. 마지막에 예치자 전액 인출

사용법:
    python scripts/simulate_vault.py --rounds 10 --swap-size 50 --base-width 1200
"""
import sys
import logging
from pathlib import Path
import argparse
import json

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lp_vault.ledger import TokenLedger
from lp_vault.math.sqrt_price_math import encode_price_sqrt
from lp_vault.math.tick_math import floor_tick, ceil_tick
from lp_vault.pool import PoolRegistry
from lp_vault.vault import VaultFactory, LegacyVault, Vault, CollectFeesEvent
from lp_vault.vault.accounting import spot_price, value_in_token1

E18 = 10 ** 18
OWNER = "0x" + "1" * 40
DEPOSITOR = "0x" + "2" * 40
TRADER = "0x" + "3" * 40
RECIPIENT = "0x" + "5" * 40

logger = logging.getLogger("simulate_vault")


def choose_ranges(vault: Vault, base_width: int, limit_width: int) -> tuple:
    """현재 틱 주변 base 범위와, 가치가 더 큰 토큰 쪽 limit 범위"""
    tick = vault.current_tick()
    spacing = vault.tick_spacing
    base_lower = floor_tick(tick - base_width, spacing)
    base_upper = ceil_tick(tick + base_width, spacing)

    total0, total1 = vault.get_total_amounts()
    price = spot_price(vault.pool.sqrt_price_x96)
    if value_in_token1(total0, 0, price) > total1:
        # token0 초과분 → 현재가 위에서 매도 대기
        lower = ceil_tick(tick, spacing)
        limit = (lower, lower + limit_width)
    else:
        upper = floor_tick(tick, spacing)
        limit = (upper - limit_width, upper)
    return base_lower, base_upper, limit[0], limit[1]


def run(args) -> dict:
    token_a = TokenLedger("0x" + "0a" * 20, symbol="TKA")
    token_b = TokenLedger("0x" + "0b" * 20, symbol="TKB")

    registry = PoolRegistry()
    pool = registry.create_pool(token_a, token_b, args.fee)
    pool.initialize(encode_price_sqrt(int(args.price * 10 ** 6), 10 ** 6))

    factory = VaultFactory(
        registry,
        OWNER,
        fee_recipient=RECIPIENT,
        base_fee=args.base_fee,
        base_fee_split=args.base_fee_split,
        vault_class=LegacyVault if args.legacy else Vault
    )
    vault = factory.create_vault(token_a, True, token_b, True, args.fee, sender=OWNER)

    for token in (vault.token0, vault.token1):
        token.mint(DEPOSITOR, args.deposit * E18 * 10)
        token.approve(DEPOSITOR, vault.address, args.deposit * E18 * 10)
        token.mint(TRADER, args.swap_size * E18 * args.rounds * 10)

    price = spot_price(pool.sqrt_price_x96)
    amount0 = args.deposit * E18
    amount1 = amount0 * price // E18
    shares = vault.deposit(amount0, amount1, DEPOSITOR, sender=DEPOSITOR)
    vault.rebalance(*choose_ranges(vault, args.base_width, args.limit_width), 0, sender=OWNER)

    rounds = []
    for i in range(args.rounds):
        # 아래로 먼저, 그다음 위로 (가격은 대략 제자리, 수수료만 쌓인다)
        pool.swap(sender=TRADER, recipient=TRADER, zero_for_one=True, amount_in=args.swap_size * E18)
        received = vault.token1.balance_of(TRADER)
        pool.swap(sender=TRADER, recipient=TRADER, zero_for_one=False, amount_in=args.swap_size * E18)

        events_before = len(vault.events)
        ranges = choose_ranges(vault, args.base_width, args.limit_width)
        vault.rebalance(*ranges, 0, sender=OWNER)

        fees = [e for e in vault.events[events_before:] if isinstance(e, CollectFeesEvent)]
        total0, total1 = vault.get_total_amounts()
        rounds.append({
            "round": i + 1,
            "tick": vault.current_tick(),
            "base": [ranges[0], ranges[1]],
            "limit": [ranges[2], ranges[3]],
            "total_amount0": total0,
            "total_amount1": total1,
            "fee0": sum(e.fee0 for e in fees),
            "fee1": sum(e.fee1 for e in fees),
        })
        logger.debug("round %d trader token1=%d", i + 1, received)

    amount0_out, amount1_out = vault.withdraw(shares, DEPOSITOR, sender=DEPOSITOR)
    final_price = spot_price(pool.sqrt_price_x96)

    return {
        "vault": vault.address,
        "legacy": args.legacy,
        "deposited": [amount0, amount1],
        "shares": shares,
        "withdrawn": [amount0_out, amount1_out],
        "value_in": value_in_token1(amount0, amount1, final_price),
        "value_out": value_in_token1(amount0_out, amount1_out, final_price),
        "recipient": [vault.token0.balance_of(RECIPIENT), vault.token1.balance_of(RECIPIENT)],
        "rounds": rounds,
    }


def print_report(result: dict) -> None:
    print("=" * 60)
    print(f" Vault {result['vault']}{' (legacy)' if result['legacy'] else ''}")
    print("=" * 60)
    print(f"{'round':>5} {'tick':>7} {'base':>16} {'limit':>16} {'fee0':>12} {'fee1':>12}")
    for r in result["rounds"]:
        base = f"[{r['base'][0]}, {r['base'][1]}]"
        limit = f"[{r['limit'][0]}, {r['limit'][1]}]"
        print(f"{r['round']:>5} {r['tick']:>7} {base:>16} {limit:>16} "
              f"{r['fee0'] / E18:>12.6f} {r['fee1'] / E18:>12.6f}")

    value_in = result["value_in"] / E18
    value_out = result["value_out"] / E18
    print("-" * 60)
    print(f"Deposited:  {result['deposited'][0] / E18:.6f} / {result['deposited'][1] / E18:.6f}")
    print(f"Withdrawn:  {result['withdrawn'][0] / E18:.6f} / {result['withdrawn'][1] / E18:.6f}")
    print(f"Value (token1 at final price): {value_in:.6f} -> {value_out:.6f} ({value_out - value_in:+.6f})")
    print(f"Fee recipient: {result['recipient'][0] / E18:.6f} / {result['recipient'][1] / E18:.6f}")


def main():
    parser = argparse.ArgumentParser(description="Simulate a two-position LP vault")
    parser.add_argument("--rounds", type=int, default=10,
                       help="Number of swap + rebalance rounds")
    parser.add_argument("--price", type=float, default=1.0,
                       help="Initial price (token1 per token0)")
    parser.add_argument("--fee", type=int, default=3000, choices=[100, 500, 3000, 10000],
                       help="Pool fee tier")
    parser.add_argument("--deposit", type=int, default=1000,
                       help="Depositor token0 amount (whole tokens, token1 matched at spot price)")
    parser.add_argument("--swap-size", type=int, default=50,
                       help="Trader swap size per leg (whole tokens)")
    parser.add_argument("--base-width", type=int, default=1200,
                       help="Base range half width in ticks")
    parser.add_argument("--limit-width", type=int, default=600,
                       help="Limit range width in ticks (multiple of tick spacing)")
    parser.add_argument("--base-fee", type=int, default=10,
                       help="Share of harvested fees distributed out of the vault (%%)")
    parser.add_argument("--base-fee-split", type=int, default=50,
                       help="Affiliate share of the distributed fees (%%)")
    parser.add_argument("--legacy", action="store_true",
                       help="Use a legacy vault (no fee distribution)")
    parser.add_argument("--json", action="store_true",
                       help="Print the result as JSON")
    parser.add_argument("--log-level", default="WARNING",
                       help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    result = run(args)
    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print_report(result)


if __name__ == "__main__":
    main()
