"""Reaction endpoint for listings."""

from fastapi import APIRouter

from dopelist.schemas import ReactionRequest, ReactionResponse
from dopelist.services import engagement

from ..dependencies import OptionalIdentityDep, SessionDep

router = APIRouter(prefix="/reactions", tags=["reactions"])


@router.post("")
async def add_reaction(
    reaction_data: ReactionRequest,
    db: SessionDep,
    current_identity: OptionalIdentityDep,
) -> ReactionResponse:
    """Add one reaction to a visible listing and return the updated tally."""
    tally = engagement.react(db, reaction_data.post_id, current_identity, reaction_data.reaction)
    return ReactionResponse(reactions=tally)
