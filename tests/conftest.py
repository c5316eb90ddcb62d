"""
Pytest fixtures：每個測試一個全新的 in-memory SQLite 資料庫
"""
import random

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db, make_engine
from main import app
from api.actions import get_dispatcher
from core.dispatcher import ActionDispatcher
from core.membership_manager import MembershipManager

ADMIN = "a@x.com"
PLAYER = "b@x.com"
OTHER = "c@x.com"


@pytest.fixture
def engine():
    test_engine = make_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def dispatcher(rng):
    return ActionDispatcher(rng=rng)


@pytest.fixture
def game(db):
    """ADMIN 建立的遊戲（尚未有其他成員）"""
    created, _ = MembershipManager.create_game(db, "Friday Night", ADMIN)
    return created


@pytest.fixture
def game_with_player(db, game):
    """ADMIN 的遊戲，PLAYER 已經被核准"""
    MembershipManager.request_join(db, game.join_code, PLAYER)
    MembershipManager.approve(db, game.id, PLAYER, ADMIN)
    return game


@pytest.fixture
def client(session_factory, dispatcher):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    yield TestClient(app)
    app.dependency_overrides.clear()
