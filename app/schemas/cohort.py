from pydantic import model_validator
from typing import Optional
from datetime import datetime

from app.schemas.common import CamelModel, StrictCamelModel, UTCDateTime


class CohortCreate(StrictCamelModel):
    academic_year: int
    start_date: UTCDateTime
    end_date: UTCDateTime

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date <= self.start_date:
            raise ValueError("endDate must be after startDate")
        return self


class CohortUpdate(StrictCamelModel):
    start_date: Optional[UTCDateTime] = None
    end_date: Optional[UTCDateTime] = None


class CohortResponse(CamelModel):
    academic_year: int
    start_date: datetime
    end_date: datetime
