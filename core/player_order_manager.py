"""
Player Order Manager：管理遊戲開始前的玩家順序

順序永遠是 admin + confirmed 成員的一個排列（waiting 不排入）
"""
from typing import List, Optional, Sequence
import logging

from sqlalchemy.orm import Session

from models import Game
from core.access import (
    check_version,
    get_game_or_raise,
    require_admin,
    require_not_started,
    seated_members,
)
from core.exceptions import InvalidOrder
from services.order_service import normalize_order, is_permutation
from database import transactional

logger = logging.getLogger(__name__)


class PlayerOrderManager:
    """玩家順序管理器"""

    @staticmethod
    @transactional
    def reorder(
        db: Session,
        game_id: int,
        acting_admin: str,
        proposed_order: Sequence[str],
        expected_version: Optional[int] = None
    ) -> Game:
        """
        儲存新的玩家順序

        前置條件：
        1. Game 必須存在，且 phase = not_started
        2. acting_admin 必須是 admin
        3. expected_version（有帶的話）必須等於目前 version

        流程：
        1. 鎖定 Game
        2. normalize：去掉非成員、補上缺少的成員
        3. 確認結果剛好是 admin + confirmed 的排列
        4. 寫回 turn_order_json

        異常：
            NotFound: Game 不存在
            InvalidPhase: 遊戲已經開始
            NotAuthorized: 不是 admin
            Conflict: version 不符
            InvalidOrder: 修正後仍不是排列（例如有重複）
        """
        game = get_game_or_raise(db, game_id, lock=True)
        require_not_started(game)
        require_admin(db, game_id, acting_admin)
        check_version(game, expected_version)

        eligible = seated_members(db, game_id)
        order = normalize_order(proposed_order, eligible, game.turn_order)
        if not is_permutation(order, eligible):
            raise InvalidOrder()

        game.turn_order_json = order
        db.flush()

        logger.info(f"Player order of game {game_id} updated by {acting_admin}: {order}")
        return game

    @staticmethod
    def resync(db: Session, game: Game) -> List[str]:
        """
        依照目前的成員重新整理 turn order（保留既有順序）

        成員變動（核准、移除、離開）和產生版圖時呼叫；
        不自行 commit，由呼叫者的 transaction 處理
        """
        eligible = seated_members(db, game.id)
        order = normalize_order(game.turn_order, eligible, game.turn_order)
        if order != game.turn_order:
            game.turn_order_json = order
            db.flush()
            logger.info(f"Player order of game {game.id} resynced: {order}")
        return order
