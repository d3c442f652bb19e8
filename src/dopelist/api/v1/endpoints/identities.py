"""Explicit anonymous-to-authenticated merge endpoint."""

from fastapi import APIRouter

from dopelist.schemas import MergeRequest, MergeResponse
from dopelist.services.identity import merge

from ..dependencies import CurrentIdentityDep, SessionDep

router = APIRouter(prefix="/identities", tags=["identities"])


@router.post("/merge")
async def merge_identities(
    request: MergeRequest,
    current_identity: CurrentIdentityDep,
    db: SessionDep,
) -> MergeResponse:
    """Move an anonymous identity's content onto the caller's account.

    Safe to repeat; steps that failed on an earlier call are retried.
    """
    result = merge(
        db,
        request.anonymous_user_id,
        request.authenticated_user_id,
        caller=current_identity,
    )
    return MergeResponse(
        message="Account merged successfully",
        already_merged=result.already_merged,
        failed_steps=result.failed_steps,
    )
