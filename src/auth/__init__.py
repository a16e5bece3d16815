from .router import router
from .dependencies import verify_admin, get_bearer_token
from .service import AuthService

__all__ = ["router", "verify_admin", "get_bearer_token", "AuthService"]
