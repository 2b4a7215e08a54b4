# Import all models so SQLModel.metadata registers them for Alembic autogenerate.
from pitchdeck.models.base import BaseUUIDModel  # noqa: F401
from pitchdeck.models.user import User  # noqa: F401
from pitchdeck.models.deck import Deck  # noqa: F401
