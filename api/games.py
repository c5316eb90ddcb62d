"""
Game API Endpoints（唯讀）

職責：
1. 列出呼叫者的遊戲（admin / 成員分開）
2. 查詢單一遊戲（含 my_role、is_current_for_caller）
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import GameListResponse, GameResponse
from core.membership_manager import MembershipManager
from core.exceptions import NotFound
from services.view_service import build_game_list, build_game_view
from api.identity import get_current_member

router = APIRouter(prefix="/api/games", tags=["games"])
logger = logging.getLogger(__name__)


@router.get("", response_model=GameListResponse)
def list_games(member: str = Depends(get_current_member), db: Session = Depends(get_db)):
    try:
        return build_game_list(db, member)
    except Exception as e:
        logger.error(f"Failed to list games for {member}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")


@router.get("/{game_id}", response_model=GameResponse)
def get_game(game_id: int, member: str = Depends(get_current_member), db: Session = Depends(get_db)):
    """
    取得單一遊戲

    只有成員（任何角色）看得到；不是成員一律回 404
    """
    try:
        game, membership = MembershipManager.get_game_for_member(db, game_id, member)
        return build_game_view(db, game, membership)

    except NotFound:
        raise HTTPException(status_code=404, detail="Game not found")
    except Exception as e:
        logger.error(f"Failed to get game {game_id}: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal error")
