"""
Submission Service Layer
Answer-sets filed against deadlines, and the status derived from them
"""

from typing import List, Optional, Iterable, Dict, Callable, Hashable
from datetime import datetime
from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.deadline import Deadline, DeadlineType, Section, Question
from app.models.roles import Student, Adviser
from app.models.submission import Submission, Answer, SubmissionStatus
from app.schemas.submission import (
    AnswerInput,
    SubmissionCreate,
    SubmissionUpdate,
    SubmissionDetailResponse,
    SubmissionFormResponse,
    AnonymousAnswerResponse,
)
from app.services.deadline_service import DeadlineService, questions_response


# =====================================================
# STATUS
# =====================================================

def classify_submission(submission: Optional[Submission], deadline: Deadline) -> SubmissionStatus:
    """Late strictly after dueBy; drafts count as nothing submitted"""
    if submission is None or submission.is_draft:
        return SubmissionStatus.UNSUBMITTED
    if submission.updated_at > deadline.due_by:
        return SubmissionStatus.SUBMITTED_LATE
    return SubmissionStatus.SUBMITTED


def _rank(submission: Submission):
    return (not submission.is_draft, submission.updated_at, submission.id)


def latest_by(submissions: Iterable[Submission], key: Callable[[Submission], Hashable]) -> Dict[Hashable, Submission]:
    """Pick one submission per key: a final one over drafts, then the most recently updated"""
    picked: Dict[Hashable, Submission] = {}
    for submission in submissions:
        k = key(submission)
        current = picked.get(k)
        if current is None or _rank(submission) > _rank(current):
            picked[k] = submission
    return picked


# Target shapes accepted per deadline type: (from_project, from_user, to_project, to_user)
SUBMISSION_SHAPES = {
    DeadlineType.MILESTONE: [(True, False, False, False)],
    DeadlineType.EVALUATION: [(True, False, True, False), (False, True, True, False)],
    DeadlineType.FEEDBACK: [(True, False, False, True)],
}


def check_submission_shape(deadline: Deadline, data: SubmissionCreate) -> None:
    if deadline.type == DeadlineType.APPLICATION:
        raise BadRequestError("Applications are submitted through the application endpoint")

    shape = (
        data.from_project_id is not None,
        data.from_user_id is not None,
        data.to_project_id is not None,
        data.to_user_id is not None,
    )
    if shape not in SUBMISSION_SHAPES[deadline.type]:
        raise BadRequestError(f"Submission target does not match a {deadline.type.value} deadline")


class SubmissionService:
    """Service for submission operations"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, submission_id: int) -> Submission:
        result = await self.db.execute(
            select(Submission)
            .options(selectinload(Submission.answers))
            .where(Submission.id == submission_id)
            .execution_options(populate_existing=True)
        )
        submission = result.scalar_one_or_none()
        if not submission:
            raise ResourceNotFoundError("Submission", submission_id)
        return submission

    async def _question_ids(self, deadline_id: int) -> set:
        result = await self.db.execute(
            select(Question.id)
            .join(Section, Question.section_id == Section.id)
            .where(Section.deadline_id == deadline_id)
        )
        return set(result.scalars().all())

    async def _answers(self, submission: Submission, answers: List[AnswerInput]) -> List[Answer]:
        question_ids = [answer.question_id for answer in answers]
        if len(question_ids) != len(set(question_ids)):
            raise BadRequestError("Each question may only be answered once")

        unknown = set(question_ids) - await self._question_ids(submission.deadline_id)
        if unknown:
            raise BadRequestError(f"Questions {sorted(unknown)} do not belong to this deadline")

        return [
            Answer(submission_id=submission.id, question_id=answer.question_id, answer=answer.answer)
            for answer in answers
        ]

    # =====================================================
    # QUERIES
    # =====================================================

    async def get_submission(self, submission_id: int) -> Submission:
        return await self._load(submission_id)

    async def get_with_form(self, submission_id: int) -> SubmissionFormResponse:
        submission = await self._load(submission_id)
        form = questions_response(await DeadlineService(self.db).get_with_questions(submission.deadline_id))
        return SubmissionFormResponse(
            **SubmissionDetailResponse.model_validate(submission).model_dump(),
            deadline=form.deadline,
            sections=form.sections,
        )

    # =====================================================
    # WRITES
    # =====================================================

    async def create_submission(self, data: SubmissionCreate) -> SubmissionDetailResponse:
        deadline = await self.db.get(Deadline, data.deadline_id)
        if not deadline:
            raise BadRequestError(f"Deadline {data.deadline_id} does not exist")
        check_submission_shape(deadline, data)

        submission = Submission(
            deadline_id=data.deadline_id,
            from_project_id=data.from_project_id,
            from_user_id=data.from_user_id,
            to_project_id=data.to_project_id,
            to_user_id=data.to_user_id,
            is_draft=data.is_draft,
        )
        self.db.add(submission)
        await self.db.flush()

        self.db.add_all(await self._answers(submission, data.answers))
        await self.db.commit()

        logger.info(
            f"[Submissions] Created submission {submission.id} for deadline {data.deadline_id} "
            f"(draft={data.is_draft})"
        )
        return SubmissionDetailResponse.model_validate(await self._load(submission.id))

    async def update_submission(self, submission_id: int, data: SubmissionUpdate) -> SubmissionDetailResponse:
        """New answers replace every prior answer; the edit always moves updatedAt"""
        submission = await self._load(submission_id)

        if data.answers is not None:
            new_answers = await self._answers(submission, data.answers)
            await self.db.execute(delete(Answer).where(Answer.submission_id == submission_id))
            await self.db.flush()
            self.db.add_all(new_answers)

        if data.is_draft is not None:
            submission.is_draft = data.is_draft
        submission.updated_at = datetime.utcnow()

        await self.db.commit()
        return SubmissionDetailResponse.model_validate(await self._load(submission_id))

    # =====================================================
    # ANONYMOUS ANSWERS
    # =====================================================

    async def _anonymous_answers(self, cohort_year: int, *target) -> List[AnonymousAnswerResponse]:
        result = await self.db.execute(
            select(Answer, Question, Deadline)
            .join(Question, Answer.question_id == Question.id)
            .join(Submission, Answer.submission_id == Submission.id)
            .join(Deadline, Submission.deadline_id == Deadline.id)
            .where(
                Deadline.cohort_year == cohort_year,
                Submission.is_draft.is_(False),
                Question.is_anonymous.is_(True),
                *target,
            )
            .order_by(Deadline.due_by, Deadline.id, Question.id, Answer.submission_id)
        )
        return [
            AnonymousAnswerResponse(
                deadline_id=deadline.id,
                deadline_name=deadline.name,
                question_id=question.id,
                question=question.question,
                answer=answer.answer,
            )
            for answer, question, deadline in result.all()
        ]

    async def anonymous_answers_for_student(self, student_id: int) -> List[AnonymousAnswerResponse]:
        student = await self.db.get(Student, student_id)
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        if student.project_id is None:
            raise BadRequestError("Student is not part of project")
        return await self._anonymous_answers(student.cohort_year, Submission.to_project_id == student.project_id)

    async def anonymous_answers_for_adviser(self, adviser_id: int) -> List[AnonymousAnswerResponse]:
        adviser = await self.db.get(Adviser, adviser_id)
        if not adviser:
            raise ResourceNotFoundError("Adviser", adviser_id)
        return await self._anonymous_answers(adviser.cohort_year, Submission.to_user_id == adviser.user_id)


def get_submission_service(db: AsyncSession) -> SubmissionService:
    return SubmissionService(db)
