"""
Pydantic schemas：API 的 request / response 格式
"""
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from models import GamePhase, MembershipRole


class ActionRequest(BaseModel):
    """
    所有寫入操作的共用 request

    intent 決定要做什麼，其餘欄位（gameId、targetEmail、orderJson...）
    原樣交給 ActionDispatcher 驗證
    """
    model_config = ConfigDict(extra="allow")

    intent: str = ""

    def params(self) -> Dict[str, Any]:
        return dict(self.model_extra or {})


class TileResponse(BaseModel):
    id: int
    terrain: str
    token: Optional[int] = None
    hasMarker: bool = False


class PlayerResponse(BaseModel):
    member: str
    role: MembershipRole
    is_current: bool
    created_at: Optional[datetime] = None


class GameResponse(BaseModel):
    id: int
    name: str
    join_code: str
    created_by: str
    phase: GamePhase
    version: int
    tiles: List[TileResponse] = Field(default_factory=list)
    layout_rows: List[List[TileResponse]] = Field(default_factory=list)
    turn_order: List[str] = Field(default_factory=list)
    players: List[PlayerResponse] = Field(default_factory=list)
    my_role: MembershipRole
    is_current_for_caller: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class GameListResponse(BaseModel):
    admin_games: List[GameResponse] = Field(default_factory=list)
    member_games: List[GameResponse] = Field(default_factory=list)


class ActionResult(BaseModel):
    ok: bool
    message: str
    role: Optional[MembershipRole] = None
    game: Optional[GameResponse] = None
