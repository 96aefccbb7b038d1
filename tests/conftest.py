"""Shared fixtures — in-memory SQLite DB with all tables."""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from repokit.models import Base
from repokit.repository import GenericRepository
from tests.sample_models import Post, PostModel, User, UserModel


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    eng: Engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session(engine: Engine) -> Generator[Session, None, None]:
    factory: sessionmaker[Session] = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    sess: Session = factory()
    yield sess
    sess.rollback()
    sess.close()


@pytest.fixture()
def users(session: Session) -> GenericRepository[UserModel, User]:
    return GenericRepository(session, UserModel)


@pytest.fixture()
def posts(session: Session) -> GenericRepository[PostModel, Post]:
    return GenericRepository(session, PostModel)


@pytest.fixture()
def five_users(users: GenericRepository[UserModel, User]) -> list[User]:
    """Five users inserted in order; ages 20, 25, 30, 35, 40."""
    return [
        users.insert(User(name=f"user{i}", email=f"user{i}@example.com", age=20 + 5 * i))
        for i in range(5)
    ]
