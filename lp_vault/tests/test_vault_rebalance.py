"""
Vault 리밸런스 테스트

전체 회수 → 수수료 분배 → 내부 스왑 → limit 위치 검사 → 재배포 순서와
실패 시 전체 롤백을 확인한다.
"""

import pytest

from ..constants import ZERO_ADDRESS
from ..errors import AccessControlError, GeometryError, InsufficientBalanceError
from ..math.tick_math import floor_tick
from ..vault.events import CollectFeesEvent, RebalanceEvent
from .conftest import E18, ADMIN, ALICE, BOB, CAROL, RECIPIENT, AFFILIATE, swap_to_tick


def limit_below(vault, width=600):
    """현재 틱 바로 아래 limit 범위"""
    upper = floor_tick(vault.current_tick(), vault.tick_spacing)
    return upper - width, upper


def observed_fees(vault):
    base0, base1 = vault.positions.fees.observe(vault.base_position)
    limit0, limit1 = vault.positions.fees.observe(vault.limit_position)
    return base0 + limit0, base1 + limit1


@pytest.fixture
def deployed(vault):
    """alice 1000/1000 예치 후 base [-1800, 1800], limit [-600, 0] 배포"""
    vault.deposit(1000 * E18, 1000 * E18, ALICE, sender=ALICE)
    vault.rebalance(-1800, 1800, -600, 0, 0, sender=ADMIN)
    return vault


class TestRebalance:

    def test_positions_created_only_by_rebalance(self, vault):
        vault.deposit(1000 * E18, 1000 * E18, ALICE, sender=ALICE)
        assert vault.get_base_position() == (0, 0, 0)

        vault.rebalance(-1800, 1800, -600, 0, 0, sender=ADMIN)

        base = vault.get_base_position()
        assert base.liquidity > 0
        assert vault.base_position.tick_lower == -1800
        assert vault.limit_position.tick_upper == 0
        # 1:1 가격, 대칭 범위: 거의 모든 토큰이 base에 들어간다
        assert vault.idle_balance0 + vault.idle_balance1 <= 2
        assert abs(base.amount0 - 1000 * E18) < 10 ** 6
        assert abs(base.amount1 - 1000 * E18) < 10 ** 6

        event = vault.events[-1]
        assert isinstance(event, RebalanceEvent)
        assert (event.base_lower, event.base_upper, event.limit_lower, event.limit_upper) == (-1800, 1800, -600, 0)
        assert event.total_supply == 2000 * E18

    def test_limit_above_current_tick(self, deployed):
        deployed.rebalance(-1800, 1800, 0, 600, 0, sender=ADMIN)
        assert (deployed.limit_position.tick_lower, deployed.limit_position.tick_upper) == (0, 600)

    def test_empty_rebalance_is_idempotent(self, deployed):
        """스왑 없이 같은 범위로 리밸런스하면 유동성이 (반올림 수준에서) 그대로"""
        liquidity = deployed.base_position.liquidity
        totals = deployed.get_total_amounts()

        deployed.rebalance(-1800, 1800, -600, 0, 0, sender=ADMIN)

        assert abs(deployed.base_position.liquidity - liquidity) <= liquidity // 10 ** 15
        after = deployed.get_total_amounts()
        assert 0 <= totals[0] - after[0] <= 4
        assert 0 <= totals[1] - after[1] <= 4

    def test_no_fee_event_without_fees(self, deployed):
        deployed.rebalance(-1800, 1800, -600, 0, 0, sender=ADMIN)
        assert not any(isinstance(e, CollectFeesEvent) for e in deployed.events)

    def test_limit_only_after_large_swap(self, vault):
        """큰 단방향 스왑 뒤에는 한 종류 토큰만 남아 base 유동성이 0이 된다"""
        vault.deposit(1000 * E18, 1000 * E18, ALICE, sender=ALICE)
        vault.rebalance(-120, 120, -60, 0, 0, sender=ADMIN)
        assert vault.get_base_position().liquidity > 0

        swap_to_tick(vault.pool, -200)
        assert vault.current_tick() == -200
        total0, total1 = vault.get_total_amounts()
        assert total1 == 0
        assert total0 > 1000 * E18

        vault.rebalance(-1800, 1800, -180, 0, 0, sender=ADMIN)

        assert vault.get_base_position().liquidity == 0
        assert vault.get_limit_position().liquidity > 0
        assert vault.idle_balance1 == 0
        assert vault.idle_balance0 <= 1
        # 수확한 token0 수수료 중 10%가 fee recipient에게
        assert vault.token0.balance_of(RECIPIENT) > 0
        assert vault.token1.balance_of(RECIPIENT) == 0

    def test_internal_swap(self, deployed):
        """swap_amount < 0: token1 → token0"""
        total0, total1 = deployed.get_total_amounts()

        deployed.rebalance(-1800, 1800, -600, 0, -E18, sender=ADMIN)

        after0, after1 = deployed.get_total_amounts()
        assert 0 <= (total1 - E18) - after1 <= 4
        assert after0 > total0
        assert 0 <= deployed.current_tick() < 60

    def test_internal_swap_exceeding_balance(self, deployed):
        with pytest.raises(InsufficientBalanceError):
            deployed.rebalance(-1800, 1800, -600, 0, 10_000 * E18, sender=ADMIN)


class TestFeeDistribution:

    def generate_fees(self, vault):
        vault.pool.swap(CAROL, CAROL, True, 20 * E18)
        vault.pool.swap(CAROL, CAROL, False, 20 * E18)

    def test_split_between_recipient_and_affiliate(self, deployed):
        deployed.set_affiliate(AFFILIATE, sender=ADMIN)
        self.generate_fees(deployed)
        fee0, fee1 = observed_fees(deployed)
        assert fee0 > 0 and fee1 > 0

        deployed.rebalance(-1800, 1800, *limit_below(deployed), 0, sender=ADMIN)

        event = next(e for e in deployed.events if isinstance(e, CollectFeesEvent))
        assert (event.fee0, event.fee1) == (fee0, fee1)
        for fee, affiliate, recipient in ((fee0, event.affiliate0, event.recipient0),
                                          (fee1, event.affiliate1, event.recipient1)):
            distributed = fee * 10 // 100
            assert affiliate == distributed * 50 // 100
            assert recipient == distributed - affiliate

        assert deployed.token0.balance_of(AFFILIATE) == event.affiliate0
        assert deployed.token1.balance_of(AFFILIATE) == event.affiliate1
        assert deployed.token0.balance_of(RECIPIENT) == event.recipient0
        assert deployed.token1.balance_of(RECIPIENT) == event.recipient1

    def test_value_conserved_except_distributed_fees(self, deployed):
        deployed.set_affiliate(AFFILIATE, sender=ADMIN)
        self.generate_fees(deployed)
        total0, total1 = deployed.get_total_amounts()

        deployed.rebalance(-1800, 1800, *limit_below(deployed), 0, sender=ADMIN)

        event = next(e for e in deployed.events if isinstance(e, CollectFeesEvent))
        after0, after1 = deployed.get_total_amounts()
        assert 0 <= total0 - event.affiliate0 - event.recipient0 - after0 <= 4
        assert 0 <= total1 - event.affiliate1 - event.recipient1 - after1 <= 4

    def test_without_affiliate_recipient_takes_all(self, deployed):
        self.generate_fees(deployed)
        fee0, _ = observed_fees(deployed)

        deployed.rebalance(-1800, 1800, *limit_below(deployed), 0, sender=ADMIN)

        assert deployed.token0.balance_of(RECIPIENT) == fee0 * 10 // 100

    def test_unset_recipient_keeps_fees_in_vault(self, deployed):
        deployed.set_fee_recipient(ZERO_ADDRESS, sender=ADMIN)
        self.generate_fees(deployed)

        deployed.rebalance(-1800, 1800, *limit_below(deployed), 0, sender=ADMIN)

        event = next(e for e in deployed.events if isinstance(e, CollectFeesEvent))
        assert event.fee0 > 0
        assert event.recipient0 == event.affiliate0 == 0
        assert deployed.token0.balance_of(RECIPIENT) == 0

    def test_fee_settings_apply_on_next_rebalance(self, deployed):
        deployed.set_affiliate(AFFILIATE, sender=ADMIN)
        deployed.set_base_fee(20, sender=ADMIN)
        deployed.set_base_fee_split(100, sender=ADMIN)
        self.generate_fees(deployed)
        fee0, _ = observed_fees(deployed)

        deployed.rebalance(-1800, 1800, *limit_below(deployed), 0, sender=ADMIN)

        assert deployed.token0.balance_of(AFFILIATE) == fee0 * 20 // 100
        assert deployed.token0.balance_of(RECIPIENT) == 0

    def test_factory_fee_settings_apply_to_existing_vault(self, factory, deployed):
        deployed.set_affiliate(AFFILIATE, sender=ADMIN)
        factory.set_base_fee_split(100, sender=ADMIN)
        factory.set_base_fee(20, sender=ADMIN)
        self.generate_fees(deployed)
        fee0, fee1 = observed_fees(deployed)

        deployed.rebalance(-1800, 1800, *limit_below(deployed), 0, sender=ADMIN)

        event = next(e for e in deployed.events if isinstance(e, CollectFeesEvent))
        assert (event.affiliate0, event.affiliate1) == (fee0 * 20 // 100, fee1 * 20 // 100)
        assert (event.recipient0, event.recipient1) == (0, 0)
        assert deployed.token0.balance_of(RECIPIENT) == 0


class TestRebalanceValidation:

    def test_owner_only(self, deployed):
        with pytest.raises(AccessControlError, match="caller is not the owner"):
            deployed.rebalance(-1800, 1800, -600, 0, 0, sender=BOB)

    @pytest.mark.parametrize("base_lower, base_upper", [
        (-1801, 1800),
        (-1800, 1830),
        (1800, -1800),
        (600, 600),
        (-887280, 1800),
    ])
    def test_invalid_base(self, deployed, base_lower, base_upper):
        liquidity = deployed.base_position.liquidity
        with pytest.raises(GeometryError, match="base position invalid"):
            deployed.rebalance(base_lower, base_upper, -600, 0, 0, sender=ADMIN)
        assert deployed.base_position.liquidity == liquidity

    @pytest.mark.parametrize("limit_lower, limit_upper", [
        (-610, 0),
        (0, -600),
        (-1200, -600),
        (60, 600),
        (-600, 60),
        (-1800, 1800),
    ])
    def test_invalid_limit(self, deployed, limit_lower, limit_upper):
        with pytest.raises(GeometryError, match="limit position invalid"):
            deployed.rebalance(-1800, 1800, limit_lower, limit_upper, 0, sender=ADMIN)

    def test_failure_after_swap_rolls_back_everything(self, deployed):
        """스왑 후 limit 위치 검사가 실패하면 회수와 스왑까지 모두 되돌린다"""
        pool = deployed.pool
        state = (
            pool.sqrt_price_x96,
            pool.liquidity,
            deployed.base_position.liquidity,
            deployed.limit_position.liquidity,
            deployed.get_total_amounts(),
            pool.token0.balance_of(pool.address),
            pool.token1.balance_of(deployed.address),
            len(deployed.events),
        )

        with pytest.raises(GeometryError, match="limit position invalid"):
            deployed.rebalance(-1800, 1800, -600, 0, 100 * E18, sender=ADMIN)

        assert state == (
            pool.sqrt_price_x96,
            pool.liquidity,
            deployed.base_position.liquidity,
            deployed.limit_position.liquidity,
            deployed.get_total_amounts(),
            pool.token0.balance_of(pool.address),
            pool.token1.balance_of(deployed.address),
            len(deployed.events),
        )
