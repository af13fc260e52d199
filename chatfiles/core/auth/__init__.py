from chatfiles.core.auth.models import User
from chatfiles.core.auth.jwt import create_access_token, decode_token
from chatfiles.core.auth.dependencies import get_current_user, get_file_requester

__all__ = [
    "User",
    "create_access_token",
    "decode_token",
    "get_current_user",
    "get_file_requester",
]
