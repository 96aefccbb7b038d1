"""Models and entities used across the test suite."""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import ForeignKey, String, inspect
from sqlalchemy.orm import Mapped, mapped_column, relationship

from repokit.models import Base


@dataclass
class Post:
    title: str
    user_id: int
    id: Optional[int] = None


@dataclass
class User:
    name: str
    email: str
    age: int = 0
    active: bool = True
    id: Optional[int] = None
    # Only filled when the relationship was loaded; never written back.
    post_titles: Optional[tuple[str, ...]] = field(default=None, compare=False)


@dataclass
class UserSummary:
    name: str
    email: str


class UserModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    email: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    age: Mapped[int] = mapped_column(nullable=False, default=0)
    active: Mapped[bool] = mapped_column(nullable=False, default=True)

    posts: Mapped[list["PostModel"]] = relationship(
        back_populates="author",
        cascade="all, delete-orphan",
        order_by="PostModel.id",
    )

    def to_entity(self) -> User:
        titles = None
        if "posts" not in inspect(self).unloaded:
            titles = tuple(p.title for p in self.posts)
        return User(
            id=self.id,
            name=self.name,
            email=self.email,
            age=self.age,
            active=self.active,
            post_titles=titles,
        )

    @classmethod
    def from_entity(cls, entity: User) -> "UserModel":
        return cls(
            id=entity.id,
            name=entity.name,
            email=entity.email,
            age=entity.age,
            active=entity.active,
        )


class PostModel(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False)
    title: Mapped[str] = mapped_column(String(128), nullable=False)

    author: Mapped[UserModel] = relationship(back_populates="posts")

    def to_entity(self) -> Post:
        return Post(id=self.id, user_id=self.user_id, title=self.title)

    @classmethod
    def from_entity(cls, entity: Post) -> "PostModel":
        return cls(id=entity.id, user_id=entity.user_id, title=entity.title)


class TagModel(Base):
    """Model without conversion methods."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(primary_key=True)
    label: Mapped[str] = mapped_column(String(32), nullable=False)


class UserSummaryConverter:
    """Explicit converter for a read-only projection of users."""

    def to_entity(self, model: UserModel) -> UserSummary:
        return UserSummary(name=model.name, email=model.email)

    def to_model(self, entity: UserSummary) -> UserModel:
        return UserModel(name=entity.name, email=entity.email)
