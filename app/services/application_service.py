"""
Application Review Pipeline

Unprocessed -> Approved | Rejected. Approval turns the two applicants into
Student records of one new project. An approved application is final: it
cannot be approved again, rejected or withdrawn. A rejected application
cannot be rejected again but may still be approved.
"""

from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.application import Application, Applicant, ApplicationStatus
from app.models.deadline import Deadline, DeadlineType
from app.models.project import AchievementLevel
from app.models.submission import Submission, Answer
from app.schemas.application import ApplicationSubmit, ApplicationResponse
from app.schemas.deadline import DeadlineQuestionsResponse
from app.services.application_form import CURRENT_APPLICATION_FORM, validate_particulars
from app.services.deadline_service import DeadlineService
from app.services.user_service import UserService
from app.utils.pagination import PaginationParams


ALREADY_APPROVED = "This application has already been approved"
ALREADY_REJECTED = "This application has already been rejected"


class ApplicationService:
    """Service for the application pipeline"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _load(self, submission_id: int) -> Application:
        result = await self.db.execute(
            select(Application)
            .options(selectinload(Application.applicants))
            .where(Application.submission_id == submission_id)
            .execution_options(populate_existing=True)
        )
        application = result.scalar_one_or_none()
        if not application:
            raise ResourceNotFoundError("Application", submission_id)
        return application

    # =====================================================
    # APPLICANT SIDE
    # =====================================================

    async def latest_application(self) -> DeadlineQuestionsResponse:
        deadlines = DeadlineService(self.db)
        deadline = await deadlines.latest_application_deadline()
        return await deadlines.get_questions(deadline.id)

    async def submit(self, data: ApplicationSubmit) -> ApplicationResponse:
        deadline = await self.db.get(Deadline, data.deadline_id)
        if not deadline or deadline.type != DeadlineType.APPLICATION:
            raise BadRequestError(f"Deadline {data.deadline_id} is not an application deadline")

        particulars = CURRENT_APPLICATION_FORM.decode(
            [(answer.question_id, answer.answer) for answer in data.answers]
        )
        validate_particulars(particulars)

        submission = Submission(deadline_id=deadline.id, is_draft=False)
        self.db.add(submission)
        await self.db.flush()

        self.db.add(Application(
            submission_id=submission.id,
            team_name=particulars["team_name"],
            achievement=AchievementLevel(particulars["achievement"]),
            status=ApplicationStatus.UNPROCESSED,
            applicants=[
                Applicant(
                    deadline_id=deadline.id,
                    name=particulars[f"student{index}_name"],
                    email=particulars[f"student{index}_email"].lower(),
                    matric_no=particulars[f"student{index}_matric_no"].upper(),
                    nusnet_id=particulars[f"student{index}_nusnet_id"].upper(),
                )
                for index in (1, 2)
            ],
        ))
        self.db.add_all([
            Answer(submission_id=submission.id, question_id=answer.question_id, answer=answer.answer)
            for answer in data.answers
        ])
        await self.db.commit()

        logger.info(f"[Applications] Team '{particulars['team_name']}' applied (submission {submission.id})")
        return ApplicationResponse.model_validate(await self._load(submission.id))

    # =====================================================
    # REVIEW
    # =====================================================

    async def list_applications(
        self,
        pagination: PaginationParams,
        search: Optional[str] = None,
        achievement: Optional[AchievementLevel] = None,
        status: Optional[ApplicationStatus] = None,
    ) -> List[ApplicationResponse]:
        """Applications to the ongoing application deadline"""
        deadline = await DeadlineService(self.db).latest_application_deadline()

        query = (
            select(Application)
            .options(selectinload(Application.applicants))
            .join(Submission, Application.submission_id == Submission.id)
            .where(Submission.deadline_id == deadline.id)
            .order_by(Application.created_at, Application.submission_id)
        )
        if search:
            query = query.where(Application.team_name.ilike(f"%{search}%"))
        if achievement is not None:
            query = query.where(Application.achievement == achievement)
        if status is not None:
            query = query.where(Application.status == status)

        result = await self.db.execute(pagination.apply(query))
        return [ApplicationResponse.model_validate(a) for a in result.scalars().all()]

    async def approve(self, submission_id: int) -> ApplicationResponse:
        application = await self._load(submission_id)
        if application.status == ApplicationStatus.APPROVED:
            raise BadRequestError(ALREADY_APPROVED)

        applicants = list(application.applicants)
        cohort_year = (await self.db.get(Deadline, applicants[0].deadline_id)).cohort_year
        team_name = application.team_name

        errors = await UserService(self.db).create_team(
            name=team_name,
            team_name=team_name,
            achievement=application.achievement,
            cohort_year=cohort_year,
            members=[
                {
                    "name": applicant.name,
                    "email": applicant.email,
                    "matric_no": applicant.matric_no,
                    "nusnet_id": applicant.nusnet_id,
                }
                for applicant in applicants
            ],
        )
        if errors:
            raise BadRequestError("; ".join(errors), meta=errors)

        application = await self._load(submission_id)
        application.status = ApplicationStatus.APPROVED
        await self.db.commit()

        logger.info(f"[Applications] Approved '{team_name}' into cohort {cohort_year}")
        return ApplicationResponse.model_validate(await self._load(submission_id))

    async def reject(self, submission_id: int) -> ApplicationResponse:
        application = await self._load(submission_id)
        if application.status == ApplicationStatus.APPROVED:
            raise BadRequestError(ALREADY_APPROVED)
        if application.status == ApplicationStatus.REJECTED:
            raise BadRequestError(ALREADY_REJECTED)

        application.status = ApplicationStatus.REJECTED
        await self.db.commit()
        return ApplicationResponse.model_validate(await self._load(submission_id))

    async def withdraw(self, submission_id: int) -> ApplicationResponse:
        """The application row goes first, then the submission it hangs off"""
        application = await self._load(submission_id)
        if application.status == ApplicationStatus.APPROVED:
            raise BadRequestError(ALREADY_APPROVED)

        response = ApplicationResponse.model_validate(application)
        await self.db.delete(application)
        await self.db.flush()

        submission = await self.db.get(Submission, submission_id)
        if submission is not None:
            await self.db.delete(submission)
        await self.db.commit()

        logger.info(f"[Applications] Withdrew application {submission_id}")
        return response


def get_application_service(db: AsyncSession) -> ApplicationService:
    return ApplicationService(db)
