from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship

from pitchdeck.models.base import BaseUUIDModel

if TYPE_CHECKING:
    from pitchdeck.models.deck import Deck


class User(BaseUUIDModel, table=True):
    __tablename__ = "users"

    firebase_uid: str = Field(max_length=128, unique=True, index=True)
    # null for phone and anonymous sign-ins
    email: str | None = Field(default=None, max_length=320, unique=True, index=True)
    name: str = Field(max_length=255)

    # Relationships
    decks: list["Deck"] = Relationship(
        back_populates="user",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )
