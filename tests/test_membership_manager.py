import pytest

from models import Game, Membership, MembershipRole, GamePhase
from core.exceptions import Forbidden, NotAuthorized, NotFound, ValidationError
from core.membership_manager import MembershipManager

from conftest import ADMIN, PLAYER, OTHER


def _role(db, game_id, member):
    membership = db.query(Membership).filter(
        Membership.game_id == game_id,
        Membership.member == member
    ).first()
    return membership.role if membership else None


class TestCreateGame:

    def test_creator_becomes_only_admin(self, db):
        game, admin = MembershipManager.create_game(db, "Friday Night", ADMIN)

        memberships = db.query(Membership).filter(Membership.game_id == game.id).all()
        assert len(memberships) == 1
        assert memberships[0].member == ADMIN
        assert memberships[0].role == MembershipRole.ADMIN
        assert memberships[0].is_current is True

        assert game.name == "Friday Night"
        assert game.created_by == ADMIN
        assert game.phase == GamePhase.NOT_STARTED
        assert game.turn_order == [ADMIN]
        assert game.tiles == []

    def test_second_game_is_not_current_by_default(self, db):
        first, _ = MembershipManager.create_game(db, "One", ADMIN)
        second, admin = MembershipManager.create_game(db, "Two", ADMIN)

        assert admin.is_current is False
        current = db.query(Membership).filter(
            Membership.member == ADMIN,
            Membership.is_current.is_(True)
        ).all()
        assert [row.game_id for row in current] == [first.id]

    def test_empty_name_is_rejected(self, db):
        with pytest.raises(ValidationError):
            MembershipManager.create_game(db, "   ", ADMIN)
        assert db.query(Game).count() == 0

    def test_name_is_trimmed(self, db):
        game, _ = MembershipManager.create_game(db, "  Catan  ", ADMIN)
        assert game.name == "Catan"


class TestRequestJoin:

    def test_new_member_is_waiting(self, db, game):
        membership, created = MembershipManager.request_join(db, game.join_code, PLAYER)

        assert created is True
        assert membership.role == MembershipRole.WAITING
        assert membership.is_current is False

    def test_repeat_request_is_idempotent(self, db, game):
        MembershipManager.request_join(db, game.join_code, PLAYER)
        membership, created = MembershipManager.request_join(db, game.join_code, PLAYER)

        assert created is False
        assert membership.role == MembershipRole.WAITING
        assert db.query(Membership).filter(Membership.game_id == game.id).count() == 2

    def test_admin_requesting_own_game_reports_admin(self, db, game):
        membership, created = MembershipManager.request_join(db, game.join_code, ADMIN)

        assert created is False
        assert membership.role == MembershipRole.ADMIN

    def test_unknown_code(self, db, game):
        with pytest.raises(NotFound):
            MembershipManager.request_join(db, "not-a-code", PLAYER)


class TestApprove:

    def test_waiting_becomes_confirmed(self, db, game):
        MembershipManager.request_join(db, game.join_code, PLAYER)

        membership = MembershipManager.approve(db, game.id, PLAYER, ADMIN)

        assert membership.role == MembershipRole.CONFIRMED
        assert _role(db, game.id, PLAYER) == MembershipRole.CONFIRMED

    def test_approval_adds_player_to_turn_order(self, db, game):
        MembershipManager.request_join(db, game.join_code, PLAYER)
        MembershipManager.approve(db, game.id, PLAYER, ADMIN)

        db.refresh(game)
        assert game.turn_order == [ADMIN, PLAYER]

    def test_requires_admin(self, db, game_with_player):
        MembershipManager.request_join(db, game_with_player.join_code, OTHER)

        with pytest.raises(NotAuthorized):
            MembershipManager.approve(db, game_with_player.id, OTHER, PLAYER)
        assert _role(db, game_with_player.id, OTHER) == MembershipRole.WAITING

    def test_unknown_target(self, db, game):
        with pytest.raises(NotFound):
            MembershipManager.approve(db, game.id, OTHER, ADMIN)

    def test_confirmed_member_is_a_no_op(self, db, game_with_player):
        membership = MembershipManager.approve(db, game_with_player.id, PLAYER, ADMIN)
        assert membership.role == MembershipRole.CONFIRMED

    def test_admin_keeps_admin_role(self, db, game):
        membership = MembershipManager.approve(db, game.id, ADMIN, ADMIN)
        assert membership.role == MembershipRole.ADMIN


class TestReject:

    def test_deletes_waiting_row(self, db, game):
        MembershipManager.request_join(db, game.join_code, PLAYER)

        MembershipManager.reject(db, game.id, PLAYER, ADMIN)

        assert _role(db, game.id, PLAYER) is None

    def test_cannot_reject_confirmed_member(self, db, game_with_player):
        with pytest.raises(NotFound):
            MembershipManager.reject(db, game_with_player.id, PLAYER, ADMIN)
        assert _role(db, game_with_player.id, PLAYER) == MembershipRole.CONFIRMED

    def test_cannot_reject_admin(self, db, game):
        with pytest.raises(NotFound):
            MembershipManager.reject(db, game.id, ADMIN, ADMIN)
        assert _role(db, game.id, ADMIN) == MembershipRole.ADMIN

    def test_requires_admin(self, db, game):
        MembershipManager.request_join(db, game.join_code, PLAYER)
        with pytest.raises(NotAuthorized):
            MembershipManager.reject(db, game.id, PLAYER, PLAYER)


class TestRemove:

    def test_removes_confirmed_member_and_their_seat(self, db, game_with_player):
        MembershipManager.remove(db, game_with_player.id, PLAYER, ADMIN)

        assert _role(db, game_with_player.id, PLAYER) is None
        db.refresh(game_with_player)
        assert game_with_player.turn_order == [ADMIN]

    def test_removes_waiting_member(self, db, game):
        MembershipManager.request_join(db, game.join_code, PLAYER)
        MembershipManager.remove(db, game.id, PLAYER, ADMIN)
        assert _role(db, game.id, PLAYER) is None

    def test_admin_cannot_be_removed(self, db, game):
        with pytest.raises(Forbidden):
            MembershipManager.remove(db, game.id, ADMIN, ADMIN)
        assert _role(db, game.id, ADMIN) == MembershipRole.ADMIN

    def test_unknown_target(self, db, game):
        with pytest.raises(NotFound):
            MembershipManager.remove(db, game.id, OTHER, ADMIN)

    def test_requires_admin(self, db, game_with_player):
        with pytest.raises(NotAuthorized):
            MembershipManager.remove(db, game_with_player.id, ADMIN, PLAYER)


class TestLeave:

    def test_confirmed_member_can_leave(self, db, game_with_player):
        MembershipManager.leave(db, game_with_player.id, PLAYER)

        assert _role(db, game_with_player.id, PLAYER) is None
        db.refresh(game_with_player)
        assert game_with_player.turn_order == [ADMIN]

    def test_waiting_member_can_leave(self, db, game):
        MembershipManager.request_join(db, game.join_code, PLAYER)
        MembershipManager.leave(db, game.id, PLAYER)
        assert _role(db, game.id, PLAYER) is None

    def test_admin_cannot_leave(self, db, game):
        with pytest.raises(Forbidden):
            MembershipManager.leave(db, game.id, ADMIN)
        assert _role(db, game.id, ADMIN) == MembershipRole.ADMIN

    def test_non_member(self, db, game):
        with pytest.raises(NotFound):
            MembershipManager.leave(db, game.id, OTHER)


class TestDeleteGame:

    def test_cascades_memberships(self, db, game_with_player):
        game_id = game_with_player.id

        MembershipManager.delete_game(db, game_id, ADMIN)

        assert db.query(Game).filter(Game.id == game_id).first() is None
        assert db.query(Membership).filter(Membership.game_id == game_id).count() == 0

    def test_requires_admin(self, db, game_with_player):
        with pytest.raises(NotAuthorized):
            MembershipManager.delete_game(db, game_with_player.id, PLAYER)
        assert db.query(Game).filter(Game.id == game_with_player.id).first() is not None


class TestListings:

    def test_admin_and_member_games_are_split(self, db, game_with_player):
        other_game, _ = MembershipManager.create_game(db, "Other", PLAYER)

        admin_games = MembershipManager.list_admin_games(db, PLAYER)
        member_games = MembershipManager.list_member_games(db, PLAYER)

        assert [g.id for g, _ in admin_games] == [other_game.id]
        assert [g.id for g, _ in member_games] == [game_with_player.id]
        assert member_games[0][1].role == MembershipRole.CONFIRMED

    def test_players_are_listed_by_role(self, db, game_with_player):
        MembershipManager.request_join(db, game_with_player.join_code, OTHER)

        players = MembershipManager.list_players(db, game_with_player.id)

        assert [(p.member, p.role) for p in players] == [
            (ADMIN, MembershipRole.ADMIN),
            (PLAYER, MembershipRole.CONFIRMED),
            (OTHER, MembershipRole.WAITING),
        ]

    def test_non_member_cannot_see_game(self, db, game):
        with pytest.raises(NotFound):
            MembershipManager.get_game_for_member(db, game.id, OTHER)
