import datetime
import uuid

from pydantic import BaseModel, Field


class UserRead(BaseModel):
    id: uuid.UUID
    firebase_uid: str
    email: str | None
    name: str
    created_at: datetime.datetime
    updated_at: datetime.datetime

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=255)
