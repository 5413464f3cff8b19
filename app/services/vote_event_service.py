"""
Vote Event Service Layer
Voting campaigns with their internal and external voter intake
"""

from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import ResourceNotFoundError
from app.core.logging_config import logger
from app.models.user import User
from app.models.vote_event import VoteEvent, ExternalVoter, VoterManagement
from app.schemas.vote_event import (
    VoteEventCreate,
    VoteEventUpdate,
    VoteEventResponse,
    VoteEventDetailResponse,
    VoterManagementUpdate,
    VoterManagementResponse,
    ExternalVoterCreate,
)


class VoteEventService:
    """Service for vote event operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_vote_event(self, vote_event_id: int) -> VoteEvent:
        vote_event = await self.db.get(VoteEvent, vote_event_id)
        if not vote_event:
            raise ResourceNotFoundError("Vote event", vote_event_id)
        return vote_event

    async def get_detail(self, vote_event_id: int) -> VoteEventDetailResponse:
        result = await self.db.execute(
            select(VoteEvent)
            .options(selectinload(VoteEvent.voter_management), selectinload(VoteEvent.internal_voters))
            .where(VoteEvent.id == vote_event_id)
            .execution_options(populate_existing=True)
        )
        vote_event = result.scalar_one_or_none()
        if not vote_event:
            raise ResourceNotFoundError("Vote event", vote_event_id)

        management = vote_event.voter_management
        return VoteEventDetailResponse(
            **VoteEventResponse.model_validate(vote_event).model_dump(),
            voter_management=VoterManagementResponse.model_validate(management) if management else None,
            internal_voter_ids=sorted(user.id for user in vote_event.internal_voters),
        )

    async def list_vote_events(self) -> List[VoteEvent]:
        result = await self.db.execute(select(VoteEvent).order_by(VoteEvent.start_time.desc(), VoteEvent.id))
        return list(result.scalars().all())

    async def create_vote_event(self, data: VoteEventCreate) -> VoteEvent:
        vote_event = VoteEvent(title=data.title, start_time=data.start_time, end_time=data.end_time)
        self.db.add(vote_event)
        await self.db.commit()
        await self.db.refresh(vote_event)
        logger.info(f"[VoteEvents] Created vote event {vote_event.id} '{vote_event.title}'")
        return vote_event

    async def update_vote_event(self, vote_event_id: int, data: VoteEventUpdate) -> VoteEvent:
        vote_event = await self.get_vote_event(vote_event_id)
        vote_event.title = data.title
        vote_event.start_time = data.start_time
        vote_event.end_time = data.end_time
        await self.db.commit()
        await self.db.refresh(vote_event)
        return vote_event

    async def delete_vote_event(self, vote_event_id: int) -> VoteEvent:
        vote_event = await self.get_vote_event(vote_event_id)
        await self.db.delete(vote_event)
        await self.db.commit()
        logger.info(f"[VoteEvents] Deleted vote event {vote_event_id}")
        return vote_event

    # =====================================================
    # VOTERS
    # =====================================================

    async def list_external_voters(self, vote_event_id: int) -> List[ExternalVoter]:
        await self.get_vote_event(vote_event_id)
        result = await self.db.execute(
            select(ExternalVoter)
            .where(ExternalVoter.vote_event_id == vote_event_id)
            .order_by(ExternalVoter.id)
        )
        return list(result.scalars().all())

    async def add_external_voter(self, vote_event_id: int, data: ExternalVoterCreate) -> ExternalVoter:
        await self.get_vote_event(vote_event_id)
        voter = ExternalVoter(vote_event_id=vote_event_id, voter_id=data.voter_id)
        self.db.add(voter)
        await self.db.commit()
        await self.db.refresh(voter)
        return voter

    async def remove_external_voter(self, vote_event_id: int, voter_id: str) -> ExternalVoter:
        result = await self.db.execute(
            select(ExternalVoter).where(
                ExternalVoter.vote_event_id == vote_event_id,
                ExternalVoter.voter_id == voter_id,
            )
        )
        voter = result.scalar_one_or_none()
        if not voter:
            raise ResourceNotFoundError("External voter", voter_id)
        await self.db.delete(voter)
        await self.db.commit()
        return voter

    async def set_voter_management(self, vote_event_id: int, data: VoterManagementUpdate) -> VoterManagement:
        await self.get_vote_event(vote_event_id)
        management = await self.db.get(VoterManagement, vote_event_id)
        if management is None:
            management = VoterManagement(
                vote_event_id=vote_event_id,
                is_registration_open=False,
                has_internal_list=False,
                has_external_list=False,
            )
            self.db.add(management)

        for field, value in data.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(management, field, value)

        await self.db.commit()
        await self.db.refresh(management)
        return management

    async def add_internal_voter(self, vote_event_id: int, user_id: int) -> VoteEventDetailResponse:
        result = await self.db.execute(
            select(VoteEvent)
            .options(selectinload(VoteEvent.internal_voters))
            .where(VoteEvent.id == vote_event_id)
        )
        vote_event = result.scalar_one_or_none()
        if not vote_event:
            raise ResourceNotFoundError("Vote event", vote_event_id)

        user = await self.db.get(User, user_id)
        if not user:
            raise ResourceNotFoundError("User", user_id)

        if user not in vote_event.internal_voters:
            vote_event.internal_voters.append(user)
            await self.db.commit()
        return await self.get_detail(vote_event_id)


def get_vote_event_service(db: AsyncSession) -> VoteEventService:
    return VoteEventService(db)
