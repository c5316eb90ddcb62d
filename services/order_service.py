"""
玩家順序服務：純計算邏輯，不涉及資料庫

- normalize_order：把提案的順序修正成 eligible 成員的排列
- move_member：把某位成員往上 / 往下移一格（前端的便利操作）
"""
from typing import Iterable, List, Sequence

from core.exceptions import ValidationError

DIRECTIONS = ("up", "down")


def normalize_order(
    proposed: Sequence[str],
    eligible: Iterable[str],
    current: Sequence[str] = ()
) -> List[str]:
    """
    修正玩家順序

    規則：
    1. 只保留 proposed 裡屬於 eligible 的成員（保留相對順序）
    2. eligible 中缺少的成員補在後面：
       先依照 current（目前儲存的順序）的相對順序，
       current 沒有的再依照 eligible 給的順序

    範例：
        normalize_order(["c", "a", "x"], ["a", "b", "c"], ["b", "a"])
        -> ["c", "a", "b"]

    注意：
        重複的成員不會被去除，交給 is_permutation 判斷
    """
    eligible_list = list(dict.fromkeys(eligible))
    eligible_set = set(eligible_list)

    cleaned = [member for member in proposed if member in eligible_set]
    present = set(cleaned)

    for member in list(current) + eligible_list:
        if member in eligible_set and member not in present:
            cleaned.append(member)
            present.add(member)

    return cleaned


def is_permutation(order: Sequence[str], eligible: Iterable[str]) -> bool:
    eligible_set = set(eligible)
    return len(order) == len(eligible_set) and set(order) == eligible_set


def move_member(order: Sequence[str], target: str, direction: str) -> List[str]:
    """
    把 target 往上（index - 1）或往下（index + 1）移一格

    在邊界上移動是 no-op，不是錯誤

    異常：
        ValidationError: target 不在順序裡，或 direction 不是 up/down
    """
    if direction not in DIRECTIONS:
        raise ValidationError("Direction must be 'up' or 'down'.")

    result = list(order)
    try:
        index = result.index(target)
    except ValueError:
        raise ValidationError("Player not found in order.")

    if direction == "up" and index > 0:
        result[index - 1], result[index] = result[index], result[index - 1]
    elif direction == "down" and index < len(result) - 1:
        result[index + 1], result[index] = result[index], result[index + 1]

    return result
