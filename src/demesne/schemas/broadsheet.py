from datetime import datetime

from pydantic import BaseModel, Field


class CommentRead(BaseModel):
    id: int = Field(..., description="Primary key")
    username: str = Field(..., description='Commenter, or "Unknown"')
    body: str = Field(..., description="Comment text")
    created_at: datetime | None = Field(None, description="When the comment was posted")
    replies: list["CommentRead"] = Field(default_factory=list, description="Oldest first")


class BroadsheetRead(BaseModel):
    id: int = Field(..., description="Primary key")
    title: str = Field(..., description="Headline")
    author: str = Field(..., description='Author username, or "Unknown"')
    location_name: str = Field(..., description='Settlement of publication, or "Unknown"')
    published_at: datetime = Field(..., description="Publication time")
    endorse_count: int = Field(..., ge=0, description="Endorsements")
    comment_count: int = Field(..., ge=0, description="Comments")
    comments: list[CommentRead] = Field(
        default_factory=list, description="Top-level comments with their replies"
    )
