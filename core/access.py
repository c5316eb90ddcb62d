"""
共用的查詢與權限檢查

所有角色檢查都在這裡以資料庫內的 Membership 為準，
永遠不信任呼叫者自己帶來的旗標
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from models import Game, Membership, MembershipRole, GamePhase, SEATED_ROLES
from core.exceptions import NotFound, NotAuthorized, InvalidPhase, Conflict
from core.locks import with_game_lock


def get_membership(db: Session, game_id: int, member: str) -> Optional[Membership]:
    return db.query(Membership).filter(
        Membership.game_id == game_id,
        Membership.member == member
    ).first()


def get_game_or_raise(db: Session, game_id: int, lock: bool = False) -> Game:
    query = with_game_lock(game_id, db) if lock else db.query(Game).filter(Game.id == game_id)
    game = query.first()
    if not game:
        raise NotFound("Game not found.")
    return game


def require_admin(db: Session, game_id: int, member: str) -> Membership:
    """
    確認 member 是此遊戲的 admin

    異常：
        NotAuthorized: 不是 admin（包含根本不是成員）
    """
    membership = get_membership(db, game_id, member)
    if not membership or membership.role != MembershipRole.ADMIN:
        raise NotAuthorized()
    return membership


def require_not_started(game: Game) -> None:
    if game.phase != GamePhase.NOT_STARTED:
        raise InvalidPhase()


def check_version(game: Game, expected_version: Optional[int]) -> None:
    """呼叫者有帶 expected_version 時，必須跟目前的 version 一致"""
    if expected_version is not None and expected_version != game.version:
        raise Conflict()


def seated_members(db: Session, game_id: int) -> List[str]:
    """admin + confirmed 成員（依加入順序）"""
    rows = db.query(Membership.member).filter(
        Membership.game_id == game_id,
        Membership.role.in_(SEATED_ROLES)
    ).order_by(Membership.created_at, Membership.id).all()
    return [row.member for row in rows]
