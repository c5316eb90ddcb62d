"""
Action Dispatcher：依照 intent 名稱呼叫對應的核心操作

職責：
1. 檢查輸入格式（join code、名稱、順序 payload）
2. 呼叫 Manager
3. 把業務規則拒絕（ActionRejected）轉成 {ok: False, message}

ExhaustedError 和資料庫錯誤不在這裡處理，直接往上拋給 API 層
"""
import json
import re
from typing import Any, Callable, Dict, List, Optional
import logging

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from models import GamePhase, MembershipRole
from schemas import ActionResult
from core.current_session import CurrentSessionSelector
from core.exceptions import ActionRejected, Conflict, ValidationError
from core.layout_manager import LayoutManager
from core.membership_manager import MembershipManager
from core.phase_manager import PhaseManager
from core.player_order_manager import PlayerOrderManager
from services.board_service import STANDARD_PRESET
from services.order_service import move_member
from services.view_service import build_game_view

logger = logging.getLogger(__name__)

JOIN_CODE_PATTERN = re.compile(r"^[0-9]{6}$")


def _text(params: Dict[str, Any], key: str) -> str:
    value = params.get(key)
    return str(value).strip() if value is not None else ""


def _game_id(params: Dict[str, Any]) -> int:
    raw = params.get("gameId")
    try:
        game_id = int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Missing game id.")
    if game_id <= 0:
        raise ValidationError("Missing game id.")
    return game_id


def _target(params: Dict[str, Any]) -> str:
    target = _text(params, "targetEmail")
    if not target:
        raise ValidationError("Missing parameters.")
    return target


def _expected_version(params: Dict[str, Any]) -> Optional[int]:
    raw = params.get("version")
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValidationError("Invalid version.")


def _order(params: Dict[str, Any]) -> List[str]:
    raw = params.get("orderJson", "[]")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise ValidationError("Invalid order payload.")
    if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
        raise ValidationError("Invalid order payload.")
    return raw


class ActionDispatcher:
    """
    intent -> 核心操作

    參數：
        rng: 亂數來源（join code 與版圖），測試時可注入 random.Random(seed)
    """

    def __init__(self, rng=None):
        self.rng = rng
        self._handlers: Dict[str, Callable[[Session, str, Dict[str, Any]], ActionResult]] = {
            "create-game": self.create_game,
            "join-game": self.join_game,
            "approve-player": self.approve_player,
            "reject-player": self.reject_player,
            "remove-player": self.remove_player,
            "delete-game": self.delete_game,
            "set-current": self.set_current,
            "leave-game": self.leave_game,
            "reorder-players": self.reorder_players,
            "generate-layout": self.generate_layout,
            "update-status": self.update_status,
        }

    def dispatch(self, db: Session, actor: str, intent: str, params: Optional[Dict[str, Any]] = None) -> ActionResult:
        """
        執行一個 intent

        返回：
            ActionResult（業務規則拒絕時 ok = False）

        異常：
            ExhaustedError、SQLAlchemyError 等基礎設施錯誤會直接拋出
        """
        handler = self._handlers.get(intent)
        if handler is None:
            return ActionResult(ok=False, message="Unknown action.")

        try:
            return handler(db, actor, params or {})
        except ActionRejected as e:
            logger.info(f"Action {intent} by {actor} rejected: {e}")
            return ActionResult(ok=False, message=str(e))
        except StaleDataError:
            logger.warning(f"Action {intent} by {actor} hit a concurrent update")
            return ActionResult(ok=False, message=str(Conflict()))

    # ============ Membership ============

    def create_game(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        name = _text(params, "name")
        if not name:
            raise ValidationError("Game name is required.")

        extra = {"rng": self.rng} if self.rng is not None else {}
        game, admin = MembershipManager.create_game(db, name, actor, **extra)
        return ActionResult(
            ok=True,
            message=f'Created "{game.name}". Join code: {game.join_code}',
            role=admin.role,
            game=build_game_view(db, game, admin)
        )

    def join_game(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        join_code = _text(params, "joinCode")
        if not JOIN_CODE_PATTERN.match(join_code):
            raise ValidationError("Join code must be 6 digits.")

        membership, created_new = MembershipManager.request_join(db, join_code, actor)
        if created_new:
            message = "Join request submitted. Waiting for admin approval."
        elif membership.role == MembershipRole.WAITING:
            message = "You have already requested to join this game."
        else:
            message = "You are already part of this game."
        return ActionResult(ok=True, message=message, role=membership.role)

    def approve_player(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        game_id, target = _game_id(params), _target(params)
        membership = MembershipManager.approve(db, game_id, target, actor)
        return ActionResult(ok=True, message="Player approved.", role=membership.role)

    def reject_player(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        game_id, target = _game_id(params), _target(params)
        MembershipManager.reject(db, game_id, target, actor)
        return ActionResult(ok=True, message="Join request rejected.")

    def remove_player(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        game_id, target = _game_id(params), _target(params)
        MembershipManager.remove(db, game_id, target, actor)
        return ActionResult(ok=True, message="Player removed.")

    def delete_game(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        MembershipManager.delete_game(db, _game_id(params), actor)
        return ActionResult(ok=True, message="Game deleted.")

    def leave_game(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        MembershipManager.leave(db, _game_id(params), actor)
        return ActionResult(ok=True, message="You left the game.")

    def set_current(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        CurrentSessionSelector.set_current(db, _game_id(params), actor)
        return ActionResult(ok=True, message="Current game updated.")

    # ============ Game setup ============

    def reorder_players(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        game_id = _game_id(params)
        order = _order(params)
        expected_version = _expected_version(params)

        # 單步移動：先在完整順序上調整，再整份送出
        target = _text(params, "targetEmail")
        if target:
            order = move_member(order, target, _text(params, "direction"))

        game = PlayerOrderManager.reorder(db, game_id, actor, order, expected_version)
        _, membership = MembershipManager.get_game_for_member(db, game_id, actor)
        return ActionResult(ok=True, message="Player order updated.", game=build_game_view(db, game, membership))

    def generate_layout(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        game_id = _game_id(params)
        preset = _text(params, "preset") or None
        expected_version = _expected_version(params)

        game = LayoutManager.generate(db, game_id, actor, preset, expected_version, rng=self.rng)
        _, membership = MembershipManager.get_game_for_member(db, game_id, actor)
        message = "Standard layout created." if preset == STANDARD_PRESET else "Layout generated."
        return ActionResult(ok=True, message=message, game=build_game_view(db, game, membership))

    def update_status(self, db: Session, actor: str, params: Dict[str, Any]) -> ActionResult:
        game_id = _game_id(params)
        try:
            target = GamePhase(_text(params, "status"))
        except ValueError:
            raise ValidationError("Invalid status.")

        game = PhaseManager.transition(db, game_id, actor, target, _expected_version(params))
        _, membership = MembershipManager.get_game_for_member(db, game_id, actor)
        return ActionResult(ok=True, message="Game status updated.", game=build_game_view(db, game, membership))
