"""
版圖服務：產生 19 格六角地形 + 數字標記

純計算邏輯，不涉及資料庫。亂數來源由呼叫者注入（random.Random），
測試時可以給固定 seed 來驗證確切輸出。

版圖排列：五列 3 / 4 / 5 / 4 / 3（只給前端顯示用，這裡只管順序）
"""
import random
from typing import Dict, List, Optional

TILE_COUNT = 19
HEX_ROW_LAYOUT = (3, 4, 5, 4, 3)

DESERT = "desert"
STANDARD_PRESET = "standard"

TERRAIN_COUNTS = {
    "wood": 4,
    "wheat": 4,
    "sheep": 4,
    "brick": 3,
    "ore": 3,
    DESERT: 1,
}

TOKEN_COUNTS = {
    2: 1,
    3: 2,
    4: 2,
    5: 2,
    6: 2,
    8: 2,
    9: 2,
    10: 2,
    11: 2,
    12: 1,
}

# 官方新手版圖（依 3/4/5/4/3 逐列排列）
STANDARD_TERRAINS = (
    "ore", "sheep", "wood",
    "wheat", "brick", "sheep", "brick",
    "wheat", "wood", DESERT, "wood", "ore",
    "wood", "ore", "wheat", "sheep",
    "brick", "wheat", "sheep",
)

# 依序分配給非沙漠格
STANDARD_TOKENS = (
    10, 2, 9,
    12, 6, 4, 10,
    9, 11, 3, 8,
    8, 3, 4, 5,
    5, 6, 11,
)


def terrain_pool() -> List[str]:
    return [terrain for terrain, count in TERRAIN_COUNTS.items() for _ in range(count)]


def token_pool() -> List[int]:
    return [token for token, count in TOKEN_COUNTS.items() for _ in range(count)]


def build_tiles(terrains, tokens) -> List[Dict]:
    """
    依序把地形和數字標記配到 19 格

    規則：
    - 沙漠格：token = None、hasMarker = True（不消耗數字標記）
    - 其他格：依序取下一個數字標記、hasMarker = False

    異常：
        ValueError: 地形數量不是 19，或數字標記數量跟非沙漠格不一致
    """
    terrains = list(terrains)
    if len(terrains) != TILE_COUNT:
        raise ValueError(f"Expected {TILE_COUNT} terrains, got {len(terrains)}")

    remaining = list(tokens)
    needed = sum(1 for terrain in terrains if terrain != DESERT)
    if len(remaining) != needed:
        raise ValueError(f"Expected {needed} number tokens, got {len(remaining)}")

    tiles = []
    remaining.reverse()
    for position, terrain in enumerate(terrains):
        if terrain == DESERT:
            tiles.append({"id": position, "terrain": terrain, "token": None, "hasMarker": True})
        else:
            tiles.append({"id": position, "terrain": terrain, "token": remaining.pop(), "hasMarker": False})

    return tiles


def generate_random_tiles(rng: Optional[random.Random] = None) -> List[Dict]:
    """
    隨機版圖：地形和數字標記各自獨立洗牌（random.shuffle 是 Fisher-Yates，均勻分布）
    """
    rng = rng or random.Random()

    terrains = terrain_pool()
    tokens = token_pool()
    rng.shuffle(terrains)
    rng.shuffle(tokens)

    return build_tiles(terrains, tokens)


def generate_standard_tiles() -> List[Dict]:
    """固定的新手版圖，每次呼叫結果完全相同"""
    return build_tiles(STANDARD_TERRAINS, STANDARD_TOKENS)


def generate_tiles(preset: Optional[str] = None, rng: Optional[random.Random] = None) -> List[Dict]:
    """preset == "standard" 用固定版圖，其他（含 None）一律隨機"""
    if preset == STANDARD_PRESET:
        return generate_standard_tiles()
    return generate_random_tiles(rng)


def chunk_rows(tiles: List[Dict]) -> List[List[Dict]]:
    """把 19 格切成 3/4/5/4/3 五列（給前端顯示用）"""
    rows = []
    index = 0
    for length in HEX_ROW_LAYOUT:
        rows.append(tiles[index:index + length])
        index += length
    return rows
