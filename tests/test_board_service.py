import random
from collections import Counter

import pytest

from services.board_service import (
    DESERT,
    STANDARD_PRESET,
    TERRAIN_COUNTS,
    TOKEN_COUNTS,
    build_tiles,
    chunk_rows,
    generate_random_tiles,
    generate_standard_tiles,
    generate_tiles,
    terrain_pool,
    token_pool,
)


def _assert_valid_board(tiles):
    assert len(tiles) == 19
    assert [tile["id"] for tile in tiles] == list(range(19))
    assert Counter(tile["terrain"] for tile in tiles) == {
        "wood": 4, "wheat": 4, "sheep": 4, "brick": 3, "ore": 3, "desert": 1
    }

    markers = [tile for tile in tiles if tile["hasMarker"]]
    assert len(markers) == 1
    assert markers[0]["terrain"] == DESERT
    assert markers[0]["token"] is None

    tokens = [tile["token"] for tile in tiles if tile["terrain"] != DESERT]
    assert None not in tokens
    assert Counter(tokens) == Counter(token_pool())


def test_pools_match_piece_counts():
    assert len(terrain_pool()) == 19
    assert len(token_pool()) == 18
    assert Counter(terrain_pool()) == TERRAIN_COUNTS
    assert Counter(token_pool()) == TOKEN_COUNTS
    assert 7 not in TOKEN_COUNTS


@pytest.mark.parametrize("seed", range(25))
def test_random_board_is_always_valid(seed):
    _assert_valid_board(generate_random_tiles(random.Random(seed)))


def test_random_board_is_reproducible_with_same_seed():
    assert generate_random_tiles(random.Random(99)) == generate_random_tiles(random.Random(99))


def test_random_boards_differ_without_fixed_seed():
    boards = {tuple((t["terrain"], t["token"]) for t in generate_random_tiles()) for _ in range(5)}
    assert len(boards) > 1


def test_standard_board_is_valid_and_deterministic():
    first = generate_standard_tiles()
    _assert_valid_board(first)
    assert generate_standard_tiles() == first
    assert first[9] == {"id": 9, "terrain": DESERT, "token": None, "hasMarker": True}


def test_preset_selection():
    rng = random.Random(3)
    assert generate_tiles(STANDARD_PRESET, rng) == generate_standard_tiles()
    assert generate_tiles("unknown", random.Random(3)) == generate_random_tiles(random.Random(3))
    assert generate_tiles(None, random.Random(3)) == generate_random_tiles(random.Random(3))


def test_desert_does_not_consume_a_token():
    terrains = [DESERT] + ["wood"] * 18
    tiles = build_tiles(terrains, list(range(1, 19)))

    assert tiles[0]["token"] is None
    assert [tile["token"] for tile in tiles[1:]] == list(range(1, 19))


def test_build_tiles_rejects_wrong_sizes():
    with pytest.raises(ValueError):
        build_tiles(["wood"] * 18, [2] * 18)
    with pytest.raises(ValueError):
        build_tiles([DESERT] + ["wood"] * 18, [2] * 17)


def test_rows_follow_hex_layout():
    rows = chunk_rows(generate_standard_tiles())
    assert [len(row) for row in rows] == [3, 4, 5, 4, 3]
