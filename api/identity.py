"""
呼叫者 identity

驗證由外部處理（反向代理 / 登入系統），這裡只讀取已經驗證過的 identity，
不做任何角色判斷
"""
from typing import Optional

from fastapi import Header, HTTPException


def get_current_member(x_user_email: Optional[str] = Header(default=None)) -> str:
    member = (x_user_email or "").strip()
    if not member:
        raise HTTPException(status_code=401, detail="Missing user identity")
    return member
