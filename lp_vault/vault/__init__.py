"""
Vault engine

- position: base/limit Position 레코드
- fee_ledger: 포지션별 미수령 수수료
- position_manager: 범위 포지션 배포/평가/회수
- accounting: 지분 산식, 수수료 분배 산식
- policy: 사전 검사
- vault: Vault (예치/인출/리밸런스/관리)
- legacy: 수수료 분배 없는 LegacyVault
- factory: VaultFactory
"""

from .position import Position, PositionSnapshot, Harvest, BASE, LIMIT
from .fee_ledger import FeeLedger
from .position_manager import PositionManager
from .accounting import FeeSplit, spot_price, value_in_token1, shares_for_deposit, split_fees
from .events import DepositEvent, WithdrawEvent, CollectFeesEvent, RebalanceEvent, SetterEvent
from .vault import Vault
from .legacy import LegacyVault
from .factory import VaultFactory
