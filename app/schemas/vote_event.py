from pydantic import Field, model_validator
from typing import Optional, List
from datetime import datetime

from app.schemas.common import CamelModel, StrictCamelModel, UTCDateTime


class VoteEventCreate(StrictCamelModel):
    title: str = Field(..., min_length=1, max_length=255)
    start_time: UTCDateTime
    end_time: UTCDateTime

    @model_validator(mode="after")
    def check_window(self):
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self


class VoteEventUpdate(VoteEventCreate):
    pass


class VoterManagementUpdate(StrictCamelModel):
    is_registration_open: Optional[bool] = None
    has_internal_list: Optional[bool] = None
    has_external_list: Optional[bool] = None


class VoterManagementResponse(CamelModel):
    vote_event_id: int
    is_registration_open: bool
    has_internal_list: bool
    has_external_list: bool


class ExternalVoterCreate(StrictCamelModel):
    voter_id: str = Field(..., min_length=1, max_length=100)


class ExternalVoterResponse(CamelModel):
    id: int
    vote_event_id: int
    voter_id: str


class VoteEventResponse(CamelModel):
    id: int
    title: str
    start_time: datetime
    end_time: datetime
    created_at: datetime


class VoteEventDetailResponse(VoteEventResponse):
    voter_management: Optional[VoterManagementResponse] = None
    internal_voter_ids: List[int] = []
