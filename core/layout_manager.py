"""
Layout Manager：在遊戲開始前產生版圖並寫回 Game
"""
import random
from typing import Optional
import logging

from sqlalchemy.orm import Session

from models import Game
from core.access import check_version, get_game_or_raise, require_admin, require_not_started
from core.player_order_manager import PlayerOrderManager
from services.board_service import generate_tiles, STANDARD_PRESET
from database import transactional

logger = logging.getLogger(__name__)


class LayoutManager:
    """版圖管理器"""

    @staticmethod
    @transactional
    def generate(
        db: Session,
        game_id: int,
        acting_admin: str,
        preset: Optional[str] = None,
        expected_version: Optional[int] = None,
        rng: Optional[random.Random] = None
    ) -> Game:
        """
        產生版圖（隨機或 standard preset）

        前置條件：
        1. acting_admin 必須是 admin
        2. phase = not_started
        3. expected_version（有帶的話）必須等於目前 version

        流程：
        1. 鎖定 Game
        2. 產生 19 格版圖，覆蓋 layout_json
        3. 順便重新整理 turn order（修正核准 / 移除造成的落差）

        異常：
            NotAuthorized / NotFound / InvalidPhase / Conflict
        """
        require_admin(db, game_id, acting_admin)
        game = get_game_or_raise(db, game_id, lock=True)
        require_not_started(game)
        check_version(game, expected_version)

        tiles = generate_tiles(preset, rng)
        game.layout_json = {"tiles": tiles}
        db.flush()

        PlayerOrderManager.resync(db, game)

        mode = STANDARD_PRESET if preset == STANDARD_PRESET else "random"
        logger.info(f"Generated {mode} layout for game {game_id} by {acting_admin}")
        return game
