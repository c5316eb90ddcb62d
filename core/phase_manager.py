"""
Phase Manager：admin 手動切換遊戲階段

沒有任何自動 / 定時轉換，所有轉換都是 admin 的明確操作
"""
from typing import Optional
import logging

from sqlalchemy.orm import Session

from models import Game, GamePhase
from core.access import check_version, get_game_or_raise, require_admin
from core.state_machine import GamePhaseStateMachine
from database import transactional

logger = logging.getLogger(__name__)


class PhaseManager:
    """Game phase 管理器"""

    @staticmethod
    @transactional
    def transition(
        db: Session,
        game_id: int,
        acting_admin: str,
        target: GamePhase,
        expected_version: Optional[int] = None
    ) -> Game:
        """
        轉換遊戲階段

        異常：
            NotAuthorized: 不是 admin
            InvalidPhase: 不合法的轉換
            Conflict: version 不符
        """
        require_admin(db, game_id, acting_admin)
        game = get_game_or_raise(db, game_id, lock=True)
        check_version(game, expected_version)

        GamePhaseStateMachine.validate(game.phase, target)

        previous = game.phase
        game.phase = target
        db.flush()

        logger.info(f"Game {game_id} status changed {previous.value} -> {target.value} by {acting_admin}")
        return game

    @staticmethod
    def start(db: Session, game_id: int, acting_admin: str, expected_version: Optional[int] = None) -> Game:
        return PhaseManager.transition(db, game_id, acting_admin, GamePhase.STARTED, expected_version)

    @staticmethod
    def finish(db: Session, game_id: int, acting_admin: str, expected_version: Optional[int] = None) -> Game:
        return PhaseManager.transition(db, game_id, acting_admin, GamePhase.FINISHED, expected_version)

    @staticmethod
    def reset(db: Session, game_id: int, acting_admin: str, expected_version: Optional[int] = None) -> Game:
        return PhaseManager.transition(db, game_id, acting_admin, GamePhase.NOT_STARTED, expected_version)
