"""
LP Vault 오류 계층

모든 오류는 동기적이며 all-or-nothing: 실패한 호출은 상태를 변경하지 않는다.
메시지는 revert reason 형식 ("<operation>: <reason>").
"""


class VaultError(Exception):
    """볼트 엔진 기본 오류"""
    pass


class PolicyViolation(VaultError):
    """정책 위반 (허용되지 않은 토큰, 예치 한도, 공급 한도, 잘못된 수신 주소)"""
    pass


class InsufficientResourceError(VaultError):
    """잔고/허용량 부족 (원장에서 발생, 그대로 전파)"""
    pass


class InsufficientBalanceError(InsufficientResourceError):
    pass


class InsufficientAllowanceError(InsufficientResourceError):
    pass


class GeometryError(VaultError):
    """틱 범위 오류 (정렬, 순서, 현재 틱 대비 limit 위치)"""
    pass


class AccessControlError(VaultError):
    """owner 전용 작업을 다른 호출자가 시도"""
    pass


class FactoryError(VaultError):
    """팩토리 레지스트리 오류"""
    pass


class PoolError(VaultError):
    """풀 협력자 오류 (초기화, 범위, 유동성)"""
    pass
