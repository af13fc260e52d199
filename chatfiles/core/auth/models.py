from sqlalchemy import Boolean, String
from sqlalchemy.orm import Mapped, mapped_column

from chatfiles.core.database.base import BaseModel


class User(BaseModel):
    """
    Chat user as seen by the file service.

    Accounts are registered and authenticated elsewhere; this table only
    carries what authorization and profile-image handling need.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    # Object store key (under the safe prefix) and public URL of the avatar.
    profile_image_key: Mapped[str | None] = mapped_column(String(512), nullable=True)
    profile_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
