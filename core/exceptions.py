"""
自定義異常類別

集中管理所有業務邏輯異常，方便 Dispatcher / API 層統一處理

分類：
- ActionRejected 的子類：一般業務規則拒絕，可恢復，轉成 {ok: False, message}
- ExhaustedError：join code 空間耗盡，致命錯誤，直接往上拋
"""


class GameLobbyException(Exception):
    """所有遊戲大廳異常的基類"""
    pass


class ActionRejected(GameLobbyException):
    """可恢復的業務規則拒絕（訊息會原樣回給呼叫者）"""
    default_message = "Action rejected."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


# ============ 輸入 / 權限 ============

class ValidationError(ActionRejected):
    """輸入格式錯誤（join code、名稱、順序 payload）"""
    default_message = "Invalid input."


class NotAuthorized(ActionRejected):
    """呼叫者沒有需要的角色（訊息刻意保持籠統）"""
    default_message = "You are not an admin for this game."


class NotFound(ActionRejected):
    """遊戲、成員或目標不存在"""
    default_message = "Not found."


# ============ 狀態相關 ============

class InvalidPhase(ActionRejected):
    """目前的遊戲階段不允許此操作"""
    default_message = "This action is only allowed before the game starts."


class Forbidden(ActionRejected):
    """此角色不允許此操作（例如 admin 離開自己的遊戲）"""
    default_message = "This action is not allowed."


class InvalidOrder(ActionRejected):
    """玩家順序不是 admin + confirmed 成員的排列"""
    default_message = "Player order must contain every confirmed player exactly once."


class Conflict(ActionRejected):
    """版本不符：其他人已經修改過這個遊戲，請重新讀取後再試"""
    default_message = "The game was changed by someone else. Reload and try again."


# ============ 致命錯誤 ============

class ExhaustedError(GameLobbyException):
    """嘗試多次仍無法產生唯一的 join code"""
    def __init__(self, attempts):
        self.attempts = attempts
        super().__init__(f"Could not generate a unique join code after {attempts} attempts")
