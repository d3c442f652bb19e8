# src/dopelist/api/v1/endpoints/comments.py
"""Comment endpoints for listings."""

from typing import Annotated

from fastapi import APIRouter, Query, status

from dopelist.db.time import utcnow
from dopelist.schemas import CommentCreate, CommentList, CommentResponse
from dopelist.services import engagement, expiry, listings

from ..dependencies import CurrentIdentityDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.get("")
async def get_comments(
    db: SessionDep,
    post_id: Annotated[int, Query(alias="postId")],
) -> CommentList:
    """List a listing's comments, oldest first; no credential needed."""
    now = utcnow()
    listing = listings.get_listing(db, post_id)
    comments = engagement.list_comments(db, post_id)
    return CommentList(
        comments=[CommentResponse.from_comment(comment) for comment in comments],
        comments_open=listing.active and expiry.comments_open(listing, now),
        comments_time_left=expiry.comments_time_left(listing.comments_close_at, now),
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_comment(
    comment_data: CommentCreate,
    db: SessionDep,
    current_identity: CurrentIdentityDep,
) -> CommentResponse:
    """Comment on a listing while its comment window is open."""
    comment = engagement.post_comment(
        db,
        comment_data.post_id,
        current_identity,
        comment_data.text,
        session_id=comment_data.session_id,
    )
    return CommentResponse.from_comment(comment)
