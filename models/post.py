from datetime import datetime
from typing import List, Set

from pydantic import BaseModel, ConfigDict, Field

from config import MAX_POST_LENGTH
from models.user import UserSummary


class PostContent(BaseModel):
    """Request body for creating or editing a post"""
    model_config = ConfigDict(str_strip_whitespace=True)

    content: str = Field(..., min_length=1, max_length=MAX_POST_LENGTH)


class PostRecord(BaseModel):
    """A post as stored: the author and likers are kept as ids only"""
    id: str
    content: str
    author_id: str
    liked_by: Set[str] = set()
    created_at: datetime


class Post(BaseModel):
    id: str
    content: str
    author: UserSummary
    likedBy: List[UserSummary] = []
    createdAt: datetime


class DeleteConfirmation(BaseModel):
    message: str
