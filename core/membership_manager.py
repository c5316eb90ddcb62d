"""
Membership Manager：管理 Game 與成員的完整生命週期

職責：
1. 建立 Game（含 admin 成員、join code）
2. 申請加入 / 核准 / 拒絕 / 移除 / 離開
3. 刪除 Game（連帶刪除所有 Membership，join code 釋放）
4. 查詢成員的 Game 列表

成員狀態：absent（沒有資料列）、waiting、confirmed、admin
- absent -> waiting：request_join
- waiting -> confirmed：approve
- waiting -> absent：reject / remove / leave
- confirmed -> absent：remove / leave
- admin 只會隨 Game 一起出現、一起刪除
"""
import random
from typing import List, Tuple
import logging

from sqlalchemy import case
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Game, Membership, MembershipRole, GamePhase, empty_layout
from core.access import get_membership, get_game_or_raise, require_admin
from core.current_session import CurrentSessionSelector
from core.player_order_manager import PlayerOrderManager
from core.exceptions import (
    Forbidden,
    NotFound,
    ValidationError,
)
from services.naming_service import iter_join_codes
from database import transactional, get_settings

logger = logging.getLogger(__name__)

ROLE_RANK = case(
    (Membership.role == MembershipRole.ADMIN, 0),
    (Membership.role == MembershipRole.CONFIRMED, 1),
    else_=2
)


class MembershipManager:
    """Game / Membership 生命週期管理器"""

    @staticmethod
    @transactional
    def create_game(db: Session, name: str, creator: str, rng=random) -> Tuple[Game, Membership]:
        """
        建立新遊戲（含 admin 成員）

        流程：
        1. 取得一個未使用的 join code
        2. 建立 Game（phase = not_started、turn order = [creator]）
        3. 建立 creator 的 admin Membership
        4. 如果 creator 沒有其他 current game，這場就是 current

        參數：
            db: SQLAlchemy Session
            name: 遊戲名稱
            creator: 建立者 identity（例如 email）
            rng: 亂數來源（測試時可注入）

        返回：
            (Game, Admin Membership) tuple

        異常：
            ValidationError: 名稱是空的
            ExhaustedError: 無法取得唯一 join code

        注意：
            - 使用 @transactional，Game 與 admin Membership 同生共死
            - 兩個請求同時拿到同一個 code 時，UNIQUE constraint 會擋下後者，
              這裡 rollback 後重新產生 code
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Game name is required.")

        attempts = get_settings().join_code_attempts

        # 抽號與 INSERT 碰撞共用同一個 attempts 額度，用完時 generator 拋 ExhaustedError
        for code in iter_join_codes(db, attempts, rng):
            game = Game(
                name=name,
                join_code=code,
                created_by=creator,
                phase=GamePhase.NOT_STARTED,
                layout_json=empty_layout(),
                turn_order_json=[creator]
            )
            db.add(game)
            try:
                db.flush()  # 取得 game.id，同時觸發 join_code 的 UNIQUE 檢查
                break
            except IntegrityError:
                db.rollback()
                logger.warning(f"Join code {code} was taken concurrently, retrying")

        admin = Membership(
            game_id=game.id,
            member=creator,
            role=MembershipRole.ADMIN,
            is_current=False
        )
        db.add(admin)
        db.flush()

        CurrentSessionSelector.claim_default(db, admin)

        logger.info(f"Created game {game.id} ({name}) with code {game.join_code} by {creator}")
        return game, admin

    @staticmethod
    @transactional
    def request_join(db: Session, join_code: str, member: str) -> Tuple[Membership, bool]:
        """
        透過 join code 申請加入

        冪等：已經是成員時不做任何事，回傳既有的 Membership

        返回：
            (Membership, created_new) tuple

        異常：
            NotFound: 沒有這個 join code 的遊戲
        """
        game = MembershipManager.get_game_by_code(db, join_code)

        existing = get_membership(db, game.id, member)
        if existing:
            return existing, False

        membership = Membership(
            game_id=game.id,
            member=member,
            role=MembershipRole.WAITING,
            is_current=False
        )
        db.add(membership)
        db.flush()

        logger.info(f"Member {member} requested to join game {game.id}")
        return membership, True

    @staticmethod
    @transactional
    def approve(db: Session, game_id: int, target: str, acting_admin: str) -> Membership:
        """
        核准加入申請：waiting -> confirmed

        對已經是 confirmed / admin 的成員是 no-op（不會改變 admin 的角色）

        異常：
            NotAuthorized: acting_admin 不是 admin
            NotFound: target 不是成員
        """
        require_admin(db, game_id, acting_admin)

        membership = get_membership(db, game_id, target)
        if not membership:
            raise NotFound("Player not found for this game.")

        if membership.role == MembershipRole.WAITING:
            membership.role = MembershipRole.CONFIRMED
            db.flush()
            PlayerOrderManager.resync(db, get_game_or_raise(db, game_id, lock=True))
            logger.info(f"Member {target} approved in game {game_id} by {acting_admin}")

        return membership

    @staticmethod
    @transactional
    def reject(db: Session, game_id: int, target: str, acting_admin: str) -> None:
        """
        拒絕加入申請：只刪除 waiting 的資料列

        異常：
            NotAuthorized: acting_admin 不是 admin
            NotFound: target 沒有 waiting 的申請（confirmed / admin 不能用這條路刪除）
        """
        require_admin(db, game_id, acting_admin)

        deleted = db.query(Membership).filter(
            Membership.game_id == game_id,
            Membership.member == target,
            Membership.role == MembershipRole.WAITING
        ).delete(synchronize_session="fetch")

        if deleted == 0:
            raise NotFound("Waiting request not found.")

        logger.info(f"Join request of {target} rejected in game {game_id} by {acting_admin}")

    @staticmethod
    @transactional
    def remove(db: Session, game_id: int, target: str, acting_admin: str) -> None:
        """
        移除成員（waiting 或 confirmed）

        異常：
            NotAuthorized: acting_admin 不是 admin
            NotFound: target 不是成員
            Forbidden: target 是 admin
        """
        require_admin(db, game_id, acting_admin)

        membership = get_membership(db, game_id, target)
        if not membership:
            raise NotFound("Player not found for this game.")
        if membership.role == MembershipRole.ADMIN:
            raise Forbidden("Cannot remove an admin from their own game.")

        db.delete(membership)
        db.flush()
        PlayerOrderManager.resync(db, get_game_or_raise(db, game_id, lock=True))

        logger.info(f"Member {target} removed from game {game_id} by {acting_admin}")

    @staticmethod
    @transactional
    def leave(db: Session, game_id: int, member: str) -> None:
        """
        成員自行離開（waiting 或 confirmed）

        異常：
            NotFound: member 不是成員
            Forbidden: member 是 admin（admin 要刪除遊戲）
        """
        membership = get_membership(db, game_id, member)
        if not membership:
            raise NotFound("You are not part of this game.")
        if membership.role == MembershipRole.ADMIN:
            raise Forbidden("Admins cannot leave their own game. Delete the game instead.")

        db.delete(membership)
        db.flush()
        PlayerOrderManager.resync(db, get_game_or_raise(db, game_id, lock=True))

        logger.info(f"Member {member} left game {game_id}")

    @staticmethod
    @transactional
    def delete_game(db: Session, game_id: int, acting_admin: str) -> None:
        """
        刪除遊戲：所有 Membership 一併刪除，join code 可以再被使用

        異常：
            NotAuthorized: acting_admin 不是 admin
        """
        require_admin(db, game_id, acting_admin)

        game = get_game_or_raise(db, game_id, lock=True)
        db.delete(game)
        db.flush()

        logger.info(f"Game {game_id} deleted by {acting_admin}")

    @staticmethod
    def get_game_by_code(db: Session, join_code: str) -> Game:
        game = db.query(Game).filter(Game.join_code == join_code).first()
        if not game:
            raise NotFound("Game not found with that code.")
        return game

    @staticmethod
    def get_game_for_member(db: Session, game_id: int, member: str) -> Tuple[Game, Membership]:
        """
        取得成員看得到的遊戲

        異常：
            NotFound: 遊戲不存在，或 member 不是成員
        """
        membership = get_membership(db, game_id, member)
        if not membership:
            raise NotFound("Game not found.")
        return membership.game, membership

    @staticmethod
    def list_admin_games(db: Session, member: str) -> List[Tuple[Game, Membership]]:
        """member 是 admin 的遊戲（新的在前）"""
        return MembershipManager._list_games(db, member, admin=True)

    @staticmethod
    def list_member_games(db: Session, member: str) -> List[Tuple[Game, Membership]]:
        """member 是 waiting / confirmed 的遊戲（新的在前）"""
        return MembershipManager._list_games(db, member, admin=False)

    @staticmethod
    def _list_games(db: Session, member: str, admin: bool) -> List[Tuple[Game, Membership]]:
        role_filter = (
            Membership.role == MembershipRole.ADMIN if admin
            else Membership.role != MembershipRole.ADMIN
        )
        rows = (
            db.query(Game, Membership)
            .join(Membership, Membership.game_id == Game.id)
            .filter(Membership.member == member, role_filter)
            .order_by(Game.created_at.desc(), Game.id.desc())
            .all()
        )
        return [(game, membership) for game, membership in rows]

    @staticmethod
    def list_players(db: Session, game_id: int) -> List[Membership]:
        """admin 在前，其次 confirmed，最後 waiting；同角色依加入時間"""
        return (
            db.query(Membership)
            .filter(Membership.game_id == game_id)
            .order_by(ROLE_RANK, Membership.created_at, Membership.id)
            .all()
        )
