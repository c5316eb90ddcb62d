"""
狀態機：集中管理 Game phase 的所有合法轉換

not_started -> started -> finished
not_started -> finished（admin 直接關閉沒開始的遊戲）
started / finished -> not_started（admin reset）
"""
from typing import Dict, FrozenSet

from models import GamePhase
from core.exceptions import InvalidPhase


class GamePhaseStateMachine:
    """Game phase 狀態機"""

    TRANSITIONS: Dict[GamePhase, FrozenSet[GamePhase]] = {
        GamePhase.NOT_STARTED: frozenset({GamePhase.STARTED, GamePhase.FINISHED}),
        GamePhase.STARTED: frozenset({GamePhase.FINISHED, GamePhase.NOT_STARTED}),
        GamePhase.FINISHED: frozenset({GamePhase.NOT_STARTED}),
    }

    @classmethod
    def can_transition(cls, current: GamePhase, target: GamePhase) -> bool:
        return target in cls.TRANSITIONS.get(current, frozenset())

    @classmethod
    def validate(cls, current: GamePhase, target: GamePhase) -> None:
        """
        異常：
            InvalidPhase: 不是合法的轉換（包含轉到同一個 phase）
        """
        if not cls.can_transition(current, target):
            raise InvalidPhase(
                f"Cannot change game status from {current.value} to {target.value}."
            )
