from fastapi import Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from shared.config.settings import RATE_LIMIT_ENABLED


def user_id_or_ip(request: Request) -> str:
    """
    Key function for SlowAPI.
    Authenticated routes resolve the caller before the limit is checked, so the user id
    stored by ``get_current_user`` is preferred; anonymous traffic is keyed by client IP.
    """
    user_id = getattr(request.state, "user_id", None)
    if user_id:
        return f"user:{user_id}"
    return f"ip:{get_remote_address(request)}"


limiter = Limiter(key_func=user_id_or_ip, enabled=RATE_LIMIT_ENABLED)
