"""
Current Game Selector：維護「每位成員在所有遊戲中最多一個 current game」

這是唯一可以寫入 Membership.is_current 的地方
"""
from sqlalchemy.orm import Session
import logging

from models import Membership
from core.exceptions import NotFound
from core.locks import lock_member_rows
from database import transactional

logger = logging.getLogger(__name__)


class CurrentSessionSelector:
    """Current game 切換器"""

    @staticmethod
    @transactional
    def set_current(db: Session, game_id: int, member: str) -> Membership:
        """
        把 game_id 設成 member 的 current game

        流程（同一個 transaction）：
        1. 鎖定 member 在所有遊戲中的 Membership
        2. 確認 (game_id, member) 有 Membership
        3. 全部清成 False，再把目標設成 True

        異常：
            NotFound: member 不是這個遊戲的成員
        """
        rows = lock_member_rows(member, db).all()
        target = next((row for row in rows if row.game_id == game_id), None)
        if not target:
            raise NotFound("You are not part of this game.")

        for row in rows:
            row.is_current = False
        db.flush()
        target.is_current = True

        logger.info(f"Member {member} set game {game_id} as current")
        return target

    @staticmethod
    def claim_default(db: Session, membership: Membership) -> bool:
        """
        建立遊戲時使用：如果成員目前沒有任何 current game，就把這筆設為 current

        不自行 commit，由呼叫者的 transaction 處理

        返回：
            True 如果有設定
        """
        has_current = db.query(Membership.id).filter(
            Membership.member == membership.member,
            Membership.is_current.is_(True),
            Membership.id != membership.id
        ).first()
        if has_current:
            return False

        membership.is_current = True
        return True

    @staticmethod
    def current_game_id(db: Session, member: str):
        row = db.query(Membership.game_id).filter(
            Membership.member == member,
            Membership.is_current.is_(True)
        ).first()
        return row.game_id if row else None
