"""
Cohort Service Layer
Program years: creation, edits and resolution of the current cohort
"""

from typing import List, Optional
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.cohort import Cohort
from app.schemas.cohort import CohortCreate, CohortUpdate


async def get_current_cohort(db: AsyncSession) -> Optional[Cohort]:
    """
    The cohort whose [start_date, end_date] contains now; failing that the
    next upcoming cohort; failing that the most recent past one.
    """
    now = datetime.utcnow()

    result = await db.execute(
        select(Cohort)
        .where(Cohort.start_date <= now, Cohort.end_date >= now)
        .order_by(Cohort.academic_year.desc())
        .limit(1)
    )
    cohort = result.scalar_one_or_none()
    if cohort:
        return cohort

    result = await db.execute(
        select(Cohort)
        .where(Cohort.start_date > now)
        .order_by(Cohort.start_date.asc())
        .limit(1)
    )
    cohort = result.scalar_one_or_none()
    if cohort:
        return cohort

    result = await db.execute(
        select(Cohort).order_by(Cohort.end_date.desc()).limit(1)
    )
    return result.scalar_one_or_none()


class CohortService:
    """Service for cohort operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_cohorts(self) -> List[Cohort]:
        result = await self.db.execute(
            select(Cohort).order_by(Cohort.academic_year.desc())
        )
        return list(result.scalars().all())

    async def get_cohort(self, academic_year: int) -> Cohort:
        cohort = await self.db.get(Cohort, academic_year)
        if not cohort:
            raise ResourceNotFoundError("Cohort", academic_year)
        return cohort

    async def get_current(self) -> Cohort:
        cohort = await get_current_cohort(self.db)
        if not cohort:
            raise ResourceNotFoundError("Cohort", "current")
        return cohort

    async def create_cohort(self, data: CohortCreate) -> Cohort:
        cohort = Cohort(
            academic_year=data.academic_year,
            start_date=data.start_date,
            end_date=data.end_date,
        )
        self.db.add(cohort)
        await self.db.commit()
        await self.db.refresh(cohort)

        logger.info(f"[Cohort] Created cohort {cohort.academic_year}")
        return cohort

    async def update_cohort(self, academic_year: int, data: CohortUpdate) -> Cohort:
        cohort = await self.get_cohort(academic_year)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(cohort, field, value)

        if cohort.end_date <= cohort.start_date:
            raise BadRequestError("endDate must be after startDate")

        await self.db.commit()
        await self.db.refresh(cohort)
        return cohort

    async def delete_cohort(self, academic_year: int) -> None:
        cohort = await self.get_cohort(academic_year)
        await self.db.delete(cohort)
        await self.db.commit()
        logger.info(f"[Cohort] Deleted cohort {academic_year}")


def get_cohort_service(db: AsyncSession) -> CohortService:
    return CohortService(db)
