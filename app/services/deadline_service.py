"""
Deadline Service Layer
Deadlines and the sectioned question forms attached to them
"""

from typing import List, Optional, Dict, Any
from datetime import datetime
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.cohort import Cohort
from app.models.deadline import Deadline, Section, Question, Option, DeadlineType, QuestionType
from app.schemas.deadline import (
    DeadlineCreate,
    DeadlineUpdate,
    DeadlineResponse,
    SectionInput,
    DeadlineQuestionsResponse,
)
from app.services.application_form import CURRENT_APPLICATION_FORM


def build_sections(deadline_id: int, sections: List[Dict[str, Any]]) -> List[Section]:
    """Sections, questions and options numbered from 1 in the order given"""
    built = []
    for section_number, section in enumerate(sections, start=1):
        built.append(Section(
            deadline_id=deadline_id,
            section_number=section_number,
            name=section["name"],
            desc=section.get("desc"),
            questions=[
                Question(
                    question_number=question_number,
                    question=question["question"],
                    desc=question.get("desc"),
                    type=question.get("type") or QuestionType.SHORT_ANSWER,
                    is_anonymous=question.get("is_anonymous", False),
                    options=[
                        Option(order=order, option=option)
                        for order, option in enumerate(question.get("options") or [], start=1)
                    ],
                )
                for question_number, question in enumerate(section.get("questions", []), start=1)
            ],
        ))
    return built


def questions_response(deadline: Deadline) -> DeadlineQuestionsResponse:
    """Deadline plus its sections; options flattened to their text"""
    return DeadlineQuestionsResponse(
        deadline=DeadlineResponse.model_validate(deadline),
        sections=[
            {
                "id": section.id,
                "section_number": section.section_number,
                "name": section.name,
                "desc": section.desc,
                "questions": [
                    {
                        "id": question.id,
                        "question_number": question.question_number,
                        "question": question.question,
                        "desc": question.desc,
                        "type": question.type,
                        "is_anonymous": question.is_anonymous,
                        "options": [option.option for option in question.options],
                    }
                    for question in section.questions
                ],
            }
            for section in deadline.sections
        ],
    )


class DeadlineService:
    """Service for deadline operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_deadline(self, deadline_id: int) -> Deadline:
        deadline = await self.db.get(Deadline, deadline_id)
        if not deadline:
            raise ResourceNotFoundError("Deadline", deadline_id)
        return deadline

    async def get_with_questions(self, deadline_id: int) -> Deadline:
        result = await self.db.execute(
            select(Deadline)
            .options(
                selectinload(Deadline.sections)
                .selectinload(Section.questions)
                .selectinload(Question.options)
            )
            .where(Deadline.id == deadline_id)
            .execution_options(populate_existing=True)
        )
        deadline = result.scalar_one_or_none()
        if not deadline:
            raise ResourceNotFoundError("Deadline", deadline_id)
        return deadline

    async def list_deadlines(self, cohort_year: Optional[int] = None, name: Optional[str] = None) -> List[Deadline]:
        query = select(Deadline).order_by(Deadline.due_by, Deadline.id)
        if cohort_year is not None:
            query = query.where(Deadline.cohort_year == cohort_year)
        if name:
            query = query.where(Deadline.name.ilike(f"%{name}%"))
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def _check_milestone(self, milestone_id: int, cohort_year: int) -> None:
        milestone = await self.db.get(Deadline, milestone_id)
        if not milestone or milestone.type != DeadlineType.MILESTONE:
            raise BadRequestError(f"Deadline {milestone_id} is not a milestone")
        if milestone.cohort_year != cohort_year:
            raise BadRequestError("The evaluated milestone must belong to the same cohort")

    # =====================================================
    # WRITES
    # =====================================================

    async def create_deadline(self, data: DeadlineCreate, with_template: bool = True) -> Deadline:
        if not await self.db.get(Cohort, data.cohort_year):
            raise BadRequestError(f"Cohort {data.cohort_year} does not exist")
        if data.type == DeadlineType.EVALUATION:
            await self._check_milestone(data.evaluating_milestone_id, data.cohort_year)

        deadline = Deadline(
            cohort_year=data.cohort_year,
            name=data.name,
            desc=data.desc,
            due_by=data.due_by,
            type=data.type,
            evaluating_milestone_id=data.evaluating_milestone_id,
        )
        self.db.add(deadline)
        await self.db.flush()

        if with_template and data.type == DeadlineType.APPLICATION:
            self.db.add_all(build_sections(deadline.id, [CURRENT_APPLICATION_FORM.section_template()]))

        await self.db.commit()
        logger.info(f"[Deadlines] Created {data.type.value} deadline {deadline.id} '{deadline.name}'")
        return deadline

    async def update_deadline(self, deadline_id: int, data: DeadlineUpdate) -> Deadline:
        deadline = await self.get_deadline(deadline_id)
        changes = data.model_dump(exclude_unset=True)

        milestone_id = changes.get("evaluating_milestone_id")
        if milestone_id is not None:
            if deadline.type != DeadlineType.EVALUATION:
                raise BadRequestError("Only evaluation deadlines may reference a milestone")
            await self._check_milestone(milestone_id, deadline.cohort_year)
        elif "evaluating_milestone_id" in changes:
            # An evaluation always points at a milestone
            changes.pop("evaluating_milestone_id")

        for field, value in changes.items():
            setattr(deadline, field, value)

        await self.db.commit()
        await self.db.refresh(deadline)
        return deadline

    async def delete_deadline(self, deadline_id: int) -> Deadline:
        deadline = await self.get_deadline(deadline_id)
        await self.db.delete(deadline)
        await self.db.commit()
        logger.info(f"[Deadlines] Deleted deadline {deadline_id}")
        return deadline

    async def replace_sections(self, deadline_id: int, sections: List[SectionInput]) -> DeadlineQuestionsResponse:
        """Drop every section (and with it questions, options and answers) and create the new set"""
        await self.get_deadline(deadline_id)

        await self.db.execute(delete(Section).where(Section.deadline_id == deadline_id))
        await self.db.flush()
        self.db.add_all(build_sections(deadline_id, [section.model_dump() for section in sections]))
        await self.db.commit()

        return questions_response(await self.get_with_questions(deadline_id))

    async def get_questions(self, deadline_id: int) -> DeadlineQuestionsResponse:
        return questions_response(await self.get_with_questions(deadline_id))

    async def duplicate_deadline(self, deadline_id: int, cohort_year: int) -> Deadline:
        """Copy a deadline and its form into a cohort as 'Copy of {name}'"""
        source = await self.get_with_questions(deadline_id)

        milestone_id = source.evaluating_milestone_id
        if milestone_id is not None and source.cohort_year != cohort_year:
            # The evaluated milestone lives in another cohort; the copy cannot point at it
            raise BadRequestError("Evaluation deadlines can only be duplicated within their own cohort")

        copy = await self.create_deadline(
            DeadlineCreate(
                cohort_year=cohort_year,
                name=f"Copy of {source.name}",
                desc=source.desc,
                due_by=source.due_by,
                type=source.type,
                evaluating_milestone_id=milestone_id,
            ),
            with_template=False,
        )

        sections = [
            {
                "name": section.name,
                "desc": section.desc,
                "questions": [
                    {
                        "question": question.question,
                        "desc": question.desc,
                        "type": question.type,
                        "is_anonymous": question.is_anonymous,
                        "options": [option.option for option in question.options],
                    }
                    for question in section.questions
                ],
            }
            for section in source.sections
        ]
        self.db.add_all(build_sections(copy.id, sections))
        await self.db.commit()

        logger.info(f"[Deadlines] Duplicated deadline {deadline_id} as {copy.id}")
        return copy

    async def latest_application_deadline(self) -> Deadline:
        """Ongoing Application deadline of the running cohort, most recently updated first"""
        now = datetime.utcnow()
        result = await self.db.execute(
            select(Deadline)
            .join(Cohort, Deadline.cohort_year == Cohort.academic_year)
            .where(
                Deadline.type == DeadlineType.APPLICATION,
                Deadline.due_by >= now,
                Cohort.start_date < now,
                Cohort.end_date >= now,
            )
            .order_by(Deadline.updated_at.desc(), Deadline.id.desc())
            .limit(1)
        )
        deadline = result.scalar_one_or_none()
        if not deadline:
            raise BadRequestError("No ongoing application")
        return deadline


def get_deadline_service(db: AsyncSession) -> DeadlineService:
    return DeadlineService(db)
