"""
資料表定義

- Game：一場可分享的遊戲（以 6 位數 join code 識別）
- Membership：一個成員與一場遊戲的關係（帶有角色）

layout_json / turn_order_json 是 Game 的一級欄位，
搭配 version（SQLAlchemy version_id_col）做樂觀鎖。
"""
import enum

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    JSON,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from database import Base


class GamePhase(str, enum.Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    FINISHED = "finished"


class MembershipRole(str, enum.Enum):
    ADMIN = "admin"
    WAITING = "waiting"
    CONFIRMED = "confirmed"


# 可以排入玩家順序的角色
SEATED_ROLES = (MembershipRole.ADMIN, MembershipRole.CONFIRMED)


def empty_layout():
    return {"tiles": []}


class Game(Base):
    __tablename__ = "games"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    join_code = Column(String(6), nullable=False, unique=True, index=True)
    created_by = Column(String(255), nullable=False)
    phase = Column(
        Enum(GamePhase, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=GamePhase.NOT_STARTED
    )
    layout_json = Column(JSON, nullable=False, default=empty_layout)
    turn_order_json = Column(JSON, nullable=False, default=list)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    memberships = relationship(
        "Membership",
        back_populates="game",
        cascade="all, delete-orphan",
        passive_deletes=True
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def tiles(self):
        return list((self.layout_json or {}).get("tiles", []))

    @property
    def turn_order(self):
        return list(self.turn_order_json or [])


class Membership(Base):
    __tablename__ = "memberships"
    __table_args__ = (
        UniqueConstraint("game_id", "member", name="uq_membership_game_member"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    game_id = Column(Integer, ForeignKey("games.id", ondelete="CASCADE"), nullable=False, index=True)
    member = Column(String(255), nullable=False, index=True)
    role = Column(
        Enum(MembershipRole, values_callable=lambda e: [m.value for m in e]),
        nullable=False
    )
    is_current = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    game = relationship("Game", back_populates="memberships")
