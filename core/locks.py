"""
並發控制工具

提供 Database-level 的鎖定機制，防止競態條件（Race Condition）

主要使用 PostgreSQL / MySQL 的 SELECT ... FOR UPDATE 來實現悲觀鎖（Pessimistic Locking）。
SQLite 會忽略 FOR UPDATE，這時靠 Game.version 的樂觀鎖擋住 lost update。
"""
from sqlalchemy.orm import Session, Query

from models import Game, Membership


def with_game_lock(game_id: int, db: Session) -> Query:
    """
    鎖定一個 Game（行級鎖）

    使用場景：
    - 修改玩家順序、版圖、遊戲階段時
    - 需要確保 Game 在整個 transaction 期間不被其他請求修改

    範例：
        game = with_game_lock(game_id, db).first()
        if not game:
            raise NotFound("Game not found.")
        game.phase = GamePhase.STARTED
        db.commit()

    參數：
        game_id: Game 的 id
        db: SQLAlchemy Session

    返回：
        Query object（需要呼叫 .first() 或 .one() 來取得結果）

    注意：
        - nowait=False 表示如果鎖被佔用，會等待
        - 必須在 transaction 內使用（確保有 commit 或 rollback）
    """
    return db.query(Game).filter(
        Game.id == game_id
    ).with_for_update(nowait=False)


def lock_member_rows(member: str, db: Session) -> Query:
    """
    鎖定某個成員在所有遊戲中的 Membership

    使用場景：
    - 切換 current game（先全部清掉，再設定一筆）

    返回：
        Query object（呼叫 .all() 取得所有結果）
    """
    return db.query(Membership).filter(
        Membership.member == member
    ).with_for_update(nowait=False)
