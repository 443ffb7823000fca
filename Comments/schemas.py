from datetime import datetime

from pydantic import BaseModel, Field

from User.schemas import CommentAuthorOut


class CommentCreate(BaseModel):
    text: str = Field(..., min_length=1, max_length=5000)


class Comment(BaseModel):
    id: int
    text: str
    user_id: int
    user: CommentAuthorOut
    created_at: datetime

    class Config:
        from_attributes = True
