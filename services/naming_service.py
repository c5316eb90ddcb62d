"""
命名服務：生成 Game 的 Join Code

generate_join_code 是純計算邏輯；allocate_join_code / iter_join_codes 只做「讀」檢查，
真正的唯一性由 games.join_code 的 UNIQUE constraint 保證（見 MembershipManager.create_game）
"""
import random
import logging

from sqlalchemy.orm import Session

from models import Game
from core.exceptions import ExhaustedError

logger = logging.getLogger(__name__)

JOIN_CODE_LENGTH = 6


def generate_join_code(rng=random) -> str:
    """
    生成隨機的 6 位數字 Join Code（允許前導零）

    範例：004217, 938120

    注意：
    - 不檢查唯一性（由呼叫者負責）
    - 10^6 種可能，均勻分布
    """
    return f"{rng.randrange(10 ** JOIN_CODE_LENGTH):0{JOIN_CODE_LENGTH}d}"


def is_join_code_taken(db: Session, code: str) -> bool:
    return db.query(Game.id).filter(Game.join_code == code).first() is not None


def iter_join_codes(db: Session, attempts: int = 10, rng=random):
    """
    依序產生目前沒有被現存遊戲使用的 Join Code

    每一次抽號（包含碰撞的那幾次）都算在同一個 attempts 額度裡，
    呼叫者在 INSERT 撞到 UNIQUE constraint 後繼續向 generator 要下一個 code 即可

    參數：
        db: SQLAlchemy Session
        attempts: 總共最多抽幾次號
        rng: 亂數來源（測試時可注入）

    異常：
        ExhaustedError: 額度用完
    """
    for attempt in range(1, attempts + 1):
        code = generate_join_code(rng)
        if is_join_code_taken(db, code):
            logger.warning(f"Join code collision detected on attempt {attempt}: {code}")
            continue
        yield code

    raise ExhaustedError(attempts)


def allocate_join_code(db: Session, attempts: int = 10, rng=random) -> str:
    """
    取得一個目前沒有被任何現存遊戲使用的 Join Code

    參數：
        db: SQLAlchemy Session
        attempts: 最多嘗試次數
        rng: 亂數來源（測試時可注入）

    返回：
        6 位數字字串

    異常：
        ExhaustedError: 嘗試 attempts 次都碰撞（代碼空間異常擁擠，不重試）
    """
    return next(iter_join_codes(db, attempts, rng))
