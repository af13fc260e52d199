from datetime import datetime

from pydantic import Field

from chatfiles.shared.schemas import BaseSchema


class ProfileImageUpdate(BaseSchema):
    """Key of an avatar the client already put under its own avatar prefix."""

    storage_key: str = Field(alias="storageKey", min_length=1, max_length=512)


class ProfileResponse(BaseSchema):
    id: int
    email: str
    full_name: str = Field(alias="fullName")
    profile_image: str = Field(alias="profileImage")
    created_at: datetime = Field(alias="createdAt")
