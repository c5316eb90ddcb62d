"""
遊戲畫面服務：組出「某個成員看到的遊戲」

包含成員列表、版圖（已切成 3/4/5/4/3 列）、輪流順序，
以及呼叫者自己的角色和是否為目前遊戲，前端直接顯示即可
"""
from typing import List

from sqlalchemy.orm import Session

from models import Game, Membership
from core.membership_manager import MembershipManager
from schemas import GameListResponse, GameResponse, PlayerResponse, TileResponse
from services.board_service import chunk_rows


def build_game_view(db: Session, game: Game, membership: Membership) -> GameResponse:
    """
    組出 membership 擁有者看到的遊戲畫面

    參數：
        db: SQLAlchemy Session
        game: 要顯示的 Game
        membership: 呼叫者在這個 Game 的 Membership

    返回：
        GameResponse（成員依 admin、confirmed、waiting 排序）
    """
    tiles = [TileResponse(**tile) for tile in game.tiles]
    players = [
        PlayerResponse(
            member=player.member,
            role=player.role,
            is_current=player.is_current,
            created_at=player.created_at,
        )
        for player in MembershipManager.list_players(db, game.id)
    ]

    return GameResponse(
        id=game.id,
        name=game.name,
        join_code=game.join_code,
        created_by=game.created_by,
        phase=game.phase,
        version=game.version,
        tiles=tiles,
        layout_rows=chunk_rows(tiles) if tiles else [],
        turn_order=game.turn_order,
        players=players,
        my_role=membership.role,
        is_current_for_caller=bool(membership.is_current),
        created_at=game.created_at,
        updated_at=game.updated_at,
    )


def build_game_list(db: Session, member: str) -> GameListResponse:
    """把成員的遊戲分成「自己管理的」和「參加的」兩組"""
    admin_games: List[GameResponse] = [
        build_game_view(db, game, membership)
        for game, membership in MembershipManager.list_admin_games(db, member)
    ]
    member_games: List[GameResponse] = [
        build_game_view(db, game, membership)
        for game, membership in MembershipManager.list_member_games(db, member)
    ]
    return GameListResponse(admin_games=admin_games, member_games=member_games)
