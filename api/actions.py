"""
Action API Endpoint

所有寫入操作都走同一個 endpoint，由 intent 決定要做什麼：
create-game, join-game, approve-player, reject-player, remove-player,
delete-game, set-current, leave-game, reorder-players, generate-layout, update-status
"""
from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session
import logging

from database import get_db
from schemas import ActionRequest, ActionResult
from core.dispatcher import ActionDispatcher
from api.identity import get_current_member

router = APIRouter(prefix="/api", tags=["actions"])
logger = logging.getLogger(__name__)

dispatcher = ActionDispatcher()


def get_dispatcher() -> ActionDispatcher:
    return dispatcher


@router.post("/actions", response_model=ActionResult)
def perform_action(
    action: ActionRequest,
    response: Response,
    member: str = Depends(get_current_member),
    db: Session = Depends(get_db),
    action_dispatcher: ActionDispatcher = Depends(get_dispatcher)
):
    """
    執行一個寫入操作

    返回：
        - ok: 是否成功（失敗時 HTTP 400）
        - message: 給使用者看的訊息
        - role / game: 依操作附帶的資料

    業務規則拒絕會變成 ok = False；
    join code 耗盡或資料庫錯誤則回 500（細節只寫進 log）
    """
    try:
        result = action_dispatcher.dispatch(db, member, action.intent, action.params())
    except Exception as e:
        logger.error(f"Failed to perform action {action.intent} for {member}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(status_code=500, detail="Internal error")

    if not result.ok:
        response.status_code = 400
    return result
