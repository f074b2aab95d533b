"""
State Machines

정산 기간(RevenuePeriod), 지급(Payout)의 상태 전이 관리.
저장소의 compare-and-set UPDATE 전에 전이 가능 여부를 검증하는 용도.
"""

import logging
from enum import Enum

from core.types import PayoutStatus, PeriodStatus

logger = logging.getLogger(__name__)


class StateMachineError(Exception):
    """상태 전이 오류"""
    pass


class StateMachine:
    """상태 머신 기본 클래스

    Args:
        initial_state: 초기 상태
        transitions: 허용된 전이 정의 {from_state: [to_states]}
        name: 머신 이름 (로깅용)
    """

    def __init__(
        self,
        initial_state: str | Enum,
        transitions: dict[str, list[str]],
        name: str = "StateMachine",
    ):
        self._state = initial_state.value if isinstance(initial_state, Enum) else initial_state
        self._transitions = transitions
        self._name = name
        self._history: list[tuple[str, str]] = []

    @property
    def state(self) -> str:
        """현재 상태"""
        return self._state

    def can_transition(self, to_state: str | Enum) -> bool:
        """전이 가능 여부 확인

        Args:
            to_state: 목표 상태

        Returns:
            전이 가능 여부
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state
        allowed = self._transitions.get(self._state, [])
        return target in allowed

    def transition(self, to_state: str | Enum) -> str:
        """상태 전이

        Args:
            to_state: 목표 상태

        Returns:
            새 상태

        Raises:
            StateMachineError: 허용되지 않은 전이
        """
        target = to_state.value if isinstance(to_state, Enum) else to_state

        if not self.can_transition(target):
            allowed = self._transitions.get(self._state, [])
            raise StateMachineError(
                f"{self._name}: Cannot transition from {self._state} to {target}. "
                f"Allowed: {allowed}"
            )

        old_state = self._state
        self._state = target
        self._history.append((old_state, target))

        logger.debug(
            f"{self._name}: {old_state} → {target}",
        )

        return target

    @property
    def history(self) -> list[tuple[str, str]]:
        """상태 전이 이력"""
        return self._history.copy()


class PeriodStateMachine(StateMachine):
    """정산 기간 상태 머신

    전이 규칙:
    - ACTIVE → CLOSED: 기간 마감 (종료 상태, 되돌릴 수 없음)
    """

    TRANSITIONS: dict[str, list[str]] = {
        "ACTIVE": ["CLOSED"],
    }

    def __init__(self, initial_state: str | PeriodStatus = PeriodStatus.ACTIVE):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name="PeriodStateMachine",
        )

    @property
    def is_terminal(self) -> bool:
        """종료 상태 여부"""
        return self._state == "CLOSED"


class PayoutStateMachine(StateMachine):
    """지급 상태 머신

    전이 규칙:
    - PENDING → PROCESSING: 처리 시작 (클레임)
    - PROCESSING → COMPLETED: 지급 성공
    - PROCESSING → FAILED: 복구 불가 오류
    """

    TRANSITIONS: dict[str, list[str]] = {
        "PENDING": ["PROCESSING"],
        "PROCESSING": ["COMPLETED", "FAILED"],
    }

    def __init__(self, initial_state: str | PayoutStatus = PayoutStatus.PENDING):
        super().__init__(
            initial_state=initial_state,
            transitions=self.TRANSITIONS,
            name="PayoutStateMachine",
        )

    @property
    def is_terminal(self) -> bool:
        """종료 상태 여부"""
        return self._state in ("COMPLETED", "FAILED")
