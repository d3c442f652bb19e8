# src/dopelist/schemas/engagement.py
"""Vote, reaction and comment schemas."""
from __future__ import annotations

from pydantic import Field

from dopelist.models import Comment

from .common import CamelModel, UtcDateTime


class VoteRequest(CamelModel):
    post_id: int
    vote_value: int = Field(..., description="1 for upvote, -1 for downvote")
    session_id: str | None = None


class VoteDelete(CamelModel):
    post_id: int


class VoteResponse(CamelModel):
    success: bool = True
    vote_value: int
    votes: int


class ReactionRequest(CamelModel):
    post_id: int
    reaction: str


class ReactionResponse(CamelModel):
    success: bool = True
    reactions: dict[str, int]


class CommentCreate(CamelModel):
    post_id: int
    text: str | None = None
    session_id: str | None = None


class CommentResponse(CamelModel):
    id: int
    post_id: int
    author_id: str | None
    text: str
    created_at: UtcDateTime

    @classmethod
    def from_comment(cls, comment: Comment) -> CommentResponse:
        return cls(
            id=comment.id,
            post_id=comment.listing_id,
            author_id=comment.author_id,
            text=comment.text,
            created_at=comment.created_at,
        )


class CommentList(CamelModel):
    comments: list[CommentResponse]
    comments_open: bool
    comments_time_left: str
