from typing import Optional
from fastapi import Depends
from ..core.auth import Session, get_session
from ..core.errors import AuthError


async def require_session(session: Optional[Session] = Depends(get_session)) -> Session:
    if session is None:
        raise AuthError("Unauthorized")
    return session
