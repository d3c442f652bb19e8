# src/dopelist/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Dopelist API."""

from fastapi import APIRouter

from dopelist.schemas import VoteDelete, VoteRequest, VoteResponse
from dopelist.services import engagement

from ..dependencies import CurrentIdentityDep, SessionDep

router = APIRouter(prefix="/votes", tags=["votes"])


@router.post("")
async def cast_vote(
    vote_data: VoteRequest,
    current_identity: CurrentIdentityDep,
    db: SessionDep,
) -> VoteResponse:
    """Cast or change the caller's vote on a listing."""
    outcome = engagement.cast_vote(
        db,
        vote_data.post_id,
        current_identity,
        vote_data.vote_value,
        session_id=vote_data.session_id,
    )
    return VoteResponse(vote_value=outcome.value, votes=outcome.total)


@router.delete("")
async def remove_vote(
    vote_data: VoteDelete,
    current_identity: CurrentIdentityDep,
    db: SessionDep,
) -> VoteResponse:
    """Withdraw the caller's vote, if any."""
    outcome = engagement.remove_vote(db, vote_data.post_id, current_identity)
    return VoteResponse(vote_value=outcome.value, votes=outcome.total)


@router.get("/{post_id}/mine")
async def get_my_vote(
    post_id: int,
    current_identity: CurrentIdentityDep,
    db: SessionDep,
) -> dict[str, int]:
    """Get the caller's vote on a listing: 1, -1, or 0 when none."""
    return {"voteValue": engagement.get_vote(db, post_id, current_identity)}
