from devconnector.auth.dependencies import get_current_user_id
from devconnector.auth.tokens import create_access_token, decode_access_token

__all__ = ["get_current_user_id", "create_access_token", "decode_access_token"]
