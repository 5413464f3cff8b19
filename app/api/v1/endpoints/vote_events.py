"""
Vote Event Endpoints (administrators)

Voting campaigns and how voters are admitted to them.
"""

from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.modules.auth.dependencies import require_admin
from app.schemas.vote_event import (
    VoteEventCreate,
    VoteEventUpdate,
    VoteEventResponse,
    VoteEventDetailResponse,
    VoterManagementUpdate,
    VoterManagementResponse,
    ExternalVoterCreate,
    ExternalVoterResponse,
)
from app.services.vote_event_service import get_vote_event_service

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=List[VoteEventResponse])
async def list_vote_events(db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).list_vote_events()


@router.get("/{vote_event_id}", response_model=VoteEventDetailResponse)
async def get_vote_event(vote_event_id: int, db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).get_detail(vote_event_id)


@router.post("", response_model=VoteEventResponse, status_code=status.HTTP_201_CREATED)
async def create_vote_event(body: VoteEventCreate, db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).create_vote_event(body)


@router.put("/{vote_event_id}", response_model=VoteEventResponse)
async def update_vote_event(vote_event_id: int, body: VoteEventUpdate, db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).update_vote_event(vote_event_id, body)


@router.delete("/{vote_event_id}", response_model=VoteEventResponse)
async def delete_vote_event(vote_event_id: int, db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).delete_vote_event(vote_event_id)


# ==================== Voters ====================

@router.get("/{vote_event_id}/external-voters", response_model=List[ExternalVoterResponse])
async def list_external_voters(vote_event_id: int, db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).list_external_voters(vote_event_id)


@router.post(
    "/{vote_event_id}/external-voters",
    response_model=ExternalVoterResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_external_voter(vote_event_id: int, body: ExternalVoterCreate, db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).add_external_voter(vote_event_id, body)


@router.delete("/{vote_event_id}/external-voters/{voter_id}", response_model=ExternalVoterResponse)
async def remove_external_voter(vote_event_id: int, voter_id: str, db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).remove_external_voter(vote_event_id, voter_id)


@router.put("/{vote_event_id}/voter-management", response_model=VoterManagementResponse)
async def set_voter_management(
    vote_event_id: int,
    body: VoterManagementUpdate,
    db: AsyncSession = Depends(get_db)
):
    """Creates the intake settings on first use"""
    return await get_vote_event_service(db).set_voter_management(vote_event_id, body)


@router.put("/{vote_event_id}/internal-voters/{user_id}", response_model=VoteEventDetailResponse)
async def add_internal_voter(vote_event_id: int, user_id: int, db: AsyncSession = Depends(get_db)):
    return await get_vote_event_service(db).add_internal_voter(vote_event_id, user_id)
