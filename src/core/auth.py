"""
Session lookup for API requests.

Authentication is not implemented: every request runs as the single demo
user. Routes depend on ``get_session`` so tests (or a real identity
provider) can swap it through ``app.dependency_overrides``.
"""

from typing import Literal, Optional
from pydantic import BaseModel


class User(BaseModel):
    id: str
    name: str
    email: str
    role: Literal["admin", "user"] = "user"


class Session(BaseModel):
    user: User


DEMO_USER = User(id="user_0", name="John Doe", email="john@example.com", role="admin")


async def get_session() -> Optional[Session]:
    return Session(user=DEMO_USER)
