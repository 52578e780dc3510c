from typing import Optional

from pydantic import BaseModel


class User(BaseModel):
    """Authenticated principal resolved from a Firebase ID token"""
    user_id: str
    email: Optional[str] = None


class UserSummary(BaseModel):
    id: str
    displayName: str
