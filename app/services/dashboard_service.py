"""
Dashboard Read Models
Per-role lists of relevant deadlines with the submission status against each.

Every method is read-only. Independent lookups run concurrently, each on its
own session from the shared factory, because one AsyncSession cannot run
statements concurrently.
"""

import asyncio
from typing import List, Optional, Dict, Any
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from app.core.exceptions import BadRequestError, ResourceNotFoundError
from app.core.logging_config import logger
from app.models.deadline import Deadline, DeadlineType
from app.models.evaluation import EvaluationRelation
from app.models.project import Project
from app.models.roles import Student, Adviser, Mentor
from app.models.submission import Submission, Answer, SubmissionStatus
from app.schemas.dashboard import (
    StudentDeadlineEntry,
    ReceivedSubmission,
    ReceivedEvaluationsEntry,
    EvaluationTarget,
    AdviserDeadlineEntry,
    ProjectSubmission,
    DeadlineSubmissionsEntry,
    TeamSubmissionRow,
    TeamSubmissionsResponse,
)
from app.schemas.deadline import DeadlineResponse
from app.schemas.project import ProjectResponse
from app.schemas.submission import SubmissionResponse, SubmissionDetailResponse
from app.schemas.user import UserResponse
from app.services.submission_service import classify_submission, latest_by
from app.utils.pagination import PaginationParams


NO_PROJECT = "This student is not part of a project, and hence has no deadlines!"
ADVISER_WITHOUT_PROJECTS = "This adviser is not in charge of any projects, and hence has no deadlines!"
MENTOR_WITHOUT_PROJECTS = "This mentor is not in charge of any projects, and hence has no project submissions to view!"


def _deadline(deadline: Deadline) -> DeadlineResponse:
    return DeadlineResponse.model_validate(deadline)


def _project(project: Project) -> ProjectResponse:
    return ProjectResponse.model_validate(project)


def _submission(submission: Optional[Submission]) -> Dict[str, Any]:
    return {"submission": SubmissionResponse.model_validate(submission)} if submission else {}


def _received(submission: Optional[Submission]) -> Dict[str, Any]:
    """Answers to anonymous questions are left out; they are served without the submitter"""
    if submission is None:
        return {}
    detail = SubmissionDetailResponse.model_validate(submission)
    detail.answers = [
        answer for answer, row in zip(detail.answers, submission.answers)
        if not row.question.is_anonymous
    ]
    return {"submission": detail}


class DashboardService:
    """Read models for the student, adviser, mentor and administrator dashboards"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def _read(self, query):
        async with self.session_factory() as session:
            result = await session.execute(query)
            return list(result.scalars().all())

    async def _first(self, query):
        rows = await self._read(query)
        return rows[0] if rows else None

    def _deadlines(self, cohort_year: int, *types: DeadlineType, only: Optional[DeadlineType] = None):
        """Deadlines of the given types, narrowed to `only` when a type filter is requested"""
        if only is not None:
            types = tuple(t for t in types if t == only)
        return (
            select(Deadline)
            .where(Deadline.cohort_year == cohort_year, Deadline.type.in_(types))
            .order_by(Deadline.due_by, Deadline.id)
        )

    def _submissions(self, deadline_ids: List[int], *criteria, final_only: bool = False, with_answers: bool = False):
        query = select(Submission).where(Submission.deadline_id.in_(deadline_ids), *criteria)
        if final_only:
            query = query.where(Submission.is_draft.is_(False))
        if with_answers:
            query = query.options(selectinload(Submission.answers).selectinload(Answer.question))
        return query.order_by(Submission.id)

    # =====================================================
    # STUDENT
    # =====================================================

    async def _student(self, student_id: int) -> Student:
        student = await self._first(
            select(Student)
            .options(
                selectinload(Student.project)
                .selectinload(Project.adviser)
                .selectinload(Adviser.user)
            )
            .where(Student.id == student_id)
        )
        if not student:
            raise ResourceNotFoundError("Student", student_id)
        if student.project is None:
            raise BadRequestError(NO_PROJECT)
        return student

    async def _student_milestones(
        self, student: Student, only: Optional[DeadlineType] = None
    ) -> List[StudentDeadlineEntry]:
        project = student.project
        milestones = await self._read(self._deadlines(student.cohort_year, DeadlineType.MILESTONE, only=only))
        submissions = latest_by(
            await self._read(self._submissions(
                [d.id for d in milestones], Submission.from_project_id == project.id
            )),
            key=lambda s: s.deadline_id,
        )
        return [
            StudentDeadlineEntry(deadline=_deadline(milestone), **_submission(submissions.get(milestone.id)))
            for milestone in milestones
        ]

    async def _student_evaluations(
        self, student: Student, only: Optional[DeadlineType] = None
    ) -> List[StudentDeadlineEntry]:
        project = student.project
        evaluations, relations = await asyncio.gather(
            self._read(self._deadlines(student.cohort_year, DeadlineType.EVALUATION, only=only)),
            self._read(
                select(EvaluationRelation)
                .options(selectinload(EvaluationRelation.to_project))
                .where(EvaluationRelation.from_project_id == project.id)
                .order_by(EvaluationRelation.to_project_id)
            ),
        )
        target_ids = [relation.to_project_id for relation in relations]
        milestone_ids = [e.evaluating_milestone_id for e in evaluations if e.evaluating_milestone_id]

        own, targets = await asyncio.gather(
            self._read(self._submissions(
                [e.id for e in evaluations],
                Submission.from_project_id == project.id,
                Submission.to_project_id.in_(target_ids),
            )),
            self._read(self._submissions(
                milestone_ids, Submission.from_project_id.in_(target_ids), final_only=True
            )),
        )
        own = latest_by(own, key=lambda s: (s.deadline_id, s.to_project_id))
        targets = latest_by(targets, key=lambda s: (s.deadline_id, s.from_project_id))

        entries = []
        for evaluation in evaluations:
            for relation in relations:
                target_submission = targets.get((evaluation.evaluating_milestone_id, relation.to_project_id))
                fields = {
                    "deadline": _deadline(evaluation),
                    "to_project": _project(relation.to_project),
                    **_submission(own.get((evaluation.id, relation.to_project_id))),
                }
                if target_submission:
                    fields["to_project_submission"] = SubmissionResponse.model_validate(target_submission)
                entries.append(StudentDeadlineEntry(**fields))
        return entries

    async def _student_feedbacks(
        self, student: Student, only: Optional[DeadlineType] = None
    ) -> List[StudentDeadlineEntry]:
        """Feedback is addressed to the project's adviser; without one nothing is owed"""
        project = student.project
        if project.adviser is None:
            return []

        adviser_user = project.adviser.user
        feedbacks = await self._read(self._deadlines(student.cohort_year, DeadlineType.FEEDBACK, only=only))
        submissions = latest_by(
            await self._read(self._submissions(
                [d.id for d in feedbacks],
                Submission.from_project_id == project.id,
                Submission.to_user_id == adviser_user.id,
            )),
            key=lambda s: s.deadline_id,
        )
        return [
            StudentDeadlineEntry(
                deadline=_deadline(feedback),
                to_user=UserResponse.model_validate(adviser_user),
                **_submission(submissions.get(feedback.id)),
            )
            for feedback in feedbacks
        ]

    async def student_deadlines(
        self, student_id: int, only: Optional[DeadlineType] = None
    ) -> List[StudentDeadlineEntry]:
        student = await self._student(student_id)
        milestones, evaluations, feedbacks = await asyncio.gather(
            self._student_milestones(student, only),
            self._student_evaluations(student, only),
            self._student_feedbacks(student, only),
        )
        return milestones + evaluations + feedbacks

    async def student_evaluations_feedbacks(
        self, student_id: int, only: Optional[DeadlineType] = None
    ) -> List[ReceivedEvaluationsEntry]:
        """What peers (and the adviser, for evaluations) submitted about the student's project"""
        student = await self._student(student_id)
        project = student.project
        adviser_user = project.adviser.user if project.adviser else None

        deadlines, relations = await asyncio.gather(
            self._read(self._deadlines(
                student.cohort_year, DeadlineType.EVALUATION, DeadlineType.FEEDBACK, only=only
            )),
            self._read(
                select(EvaluationRelation)
                .options(selectinload(EvaluationRelation.from_project))
                .where(EvaluationRelation.to_project_id == project.id)
                .order_by(EvaluationRelation.from_project_id)
            ),
        )
        deadline_ids = [d.id for d in deadlines]
        peer_ids = [relation.from_project_id for relation in relations]

        branches = [
            self._read(self._submissions(
                deadline_ids,
                Submission.from_project_id.in_(peer_ids),
                Submission.to_project_id == project.id,
                final_only=True,
                with_answers=True,
            ))
        ]
        if adviser_user is not None:
            branches.append(self._read(self._submissions(
                deadline_ids,
                Submission.from_user_id == adviser_user.id,
                Submission.to_project_id == project.id,
                final_only=True,
                with_answers=True,
            )))
        results = await asyncio.gather(*branches)

        peers = latest_by(results[0], key=lambda s: (s.deadline_id, s.from_project_id))
        adviser = latest_by(results[1], key=lambda s: s.deadline_id) if adviser_user is not None else {}

        entries = []
        for deadline in deadlines:
            received = [
                ReceivedSubmission(
                    from_project=_project(relation.from_project),
                    **_received(peers.get((deadline.id, relation.from_project_id))),
                )
                for relation in relations
            ]
            if deadline.type == DeadlineType.EVALUATION and adviser_user is not None:
                received.append(ReceivedSubmission(
                    from_user=UserResponse.model_validate(adviser_user),
                    **_received(adviser.get(deadline.id)),
                ))
            entries.append(ReceivedEvaluationsEntry(deadline=_deadline(deadline), submissions=received))
        return entries

    # =====================================================
    # ADVISER
    # =====================================================

    async def _adviser(self, adviser_id: int) -> Adviser:
        adviser = await self._first(
            select(Adviser)
            .options(selectinload(Adviser.projects))
            .where(Adviser.id == adviser_id)
        )
        if not adviser:
            raise ResourceNotFoundError("Adviser", adviser_id)
        if not adviser.projects:
            raise BadRequestError(ADVISER_WITHOUT_PROJECTS)
        return adviser

    async def _adviser_evaluations(
        self, adviser: Adviser, only: Optional[DeadlineType] = None
    ) -> List[AdviserDeadlineEntry]:
        projects = sorted(adviser.projects, key=lambda p: p.id)
        project_ids = [p.id for p in projects]
        evaluations = await self._read(self._deadlines(adviser.cohort_year, DeadlineType.EVALUATION, only=only))
        milestone_ids = [e.evaluating_milestone_id for e in evaluations if e.evaluating_milestone_id]

        own, milestone_submissions = await asyncio.gather(
            self._read(self._submissions(
                [e.id for e in evaluations],
                Submission.from_user_id == adviser.user_id,
                Submission.to_project_id.in_(project_ids),
            )),
            self._read(self._submissions(
                milestone_ids, Submission.from_project_id.in_(project_ids), final_only=True
            )),
        )
        own = latest_by(own, key=lambda s: (s.deadline_id, s.to_project_id))
        milestone_submissions = latest_by(milestone_submissions, key=lambda s: (s.deadline_id, s.from_project_id))

        entries = []
        for evaluation in evaluations:
            for project in projects:
                target = milestone_submissions.get((evaluation.evaluating_milestone_id, project.id))
                entries.append(AdviserDeadlineEntry(
                    deadline=_deadline(evaluation),
                    to_project=EvaluationTarget(
                        **_project(project).model_dump(),
                        submission_id=target.id if target else None,
                    ),
                    **_submission(own.get((evaluation.id, project.id))),
                ))
        return entries

    async def _adviser_feedbacks(
        self, adviser: Adviser, only: Optional[DeadlineType] = None
    ) -> List[AdviserDeadlineEntry]:
        """Whether each project has handed in its feedback on the adviser"""
        projects = sorted(adviser.projects, key=lambda p: p.id)
        feedbacks = await self._read(self._deadlines(adviser.cohort_year, DeadlineType.FEEDBACK, only=only))
        submissions = latest_by(
            await self._read(self._submissions(
                [d.id for d in feedbacks],
                Submission.from_project_id.in_([p.id for p in projects]),
                Submission.to_user_id == adviser.user_id,
                final_only=True,
            )),
            key=lambda s: (s.deadline_id, s.from_project_id),
        )
        return [
            AdviserDeadlineEntry(
                deadline=_deadline(feedback),
                to_project=EvaluationTarget(**_project(project).model_dump()),
                **_submission(submissions.get((feedback.id, project.id))),
            )
            for feedback in feedbacks
            for project in projects
        ]

    async def adviser_deadlines(
        self, adviser_id: int, only: Optional[DeadlineType] = None
    ) -> List[AdviserDeadlineEntry]:
        adviser = await self._adviser(adviser_id)
        evaluations, feedbacks = await asyncio.gather(
            self._adviser_evaluations(adviser, only),
            self._adviser_feedbacks(adviser, only),
        )
        return evaluations + feedbacks

    async def adviser_submissions(
        self, adviser_id: int, only: Optional[DeadlineType] = None
    ) -> List[DeadlineSubmissionsEntry]:
        """Final submissions made by the adviser's projects, grouped per deadline"""
        adviser = await self._adviser(adviser_id)
        projects = {project.id: project for project in adviser.projects}

        deadlines = await self._read(self._deadlines(
            adviser.cohort_year, DeadlineType.MILESTONE, DeadlineType.EVALUATION, DeadlineType.FEEDBACK, only=only
        ))
        submissions = await self._read(self._submissions(
            [d.id for d in deadlines], Submission.from_project_id.in_(list(projects)), final_only=True
        ))

        grouped: Dict[int, List[Submission]] = {}
        for submission in submissions:
            grouped.setdefault(submission.deadline_id, []).append(submission)

        return [
            DeadlineSubmissionsEntry(
                deadline=_deadline(deadline),
                submissions=[
                    ProjectSubmission(
                        from_project=_project(projects[submission.from_project_id]),
                        submission=SubmissionResponse.model_validate(submission),
                    )
                    for submission in grouped.get(deadline.id, [])
                ],
            )
            for deadline in deadlines
        ]

    # =====================================================
    # MENTOR
    # =====================================================

    async def mentor_submissions(
        self, mentor_id: int, only: Optional[DeadlineType] = None
    ) -> List[DeadlineSubmissionsEntry]:
        mentor = await self._first(
            select(Mentor).options(selectinload(Mentor.projects)).where(Mentor.id == mentor_id)
        )
        if not mentor:
            raise ResourceNotFoundError("Mentor", mentor_id)
        if not mentor.projects:
            raise BadRequestError(MENTOR_WITHOUT_PROJECTS)

        projects = sorted(mentor.projects, key=lambda p: p.id)
        milestones = await self._read(self._deadlines(mentor.cohort_year, DeadlineType.MILESTONE, only=only))
        submissions = latest_by(
            await self._read(self._submissions(
                [m.id for m in milestones],
                Submission.from_project_id.in_([p.id for p in projects]),
                final_only=True,
            )),
            key=lambda s: (s.deadline_id, s.from_project_id),
        )
        return [
            DeadlineSubmissionsEntry(
                deadline=_deadline(milestone),
                submissions=[
                    ProjectSubmission(
                        from_project=_project(project),
                        **_submission(submissions.get((milestone.id, project.id))),
                    )
                    for project in projects
                ],
            )
            for milestone in milestones
        ]

    # =====================================================
    # ADMINISTRATOR
    # =====================================================

    def _team_rows(
        self,
        deadline: Deadline,
        projects: List[Project],
        relations: List[EvaluationRelation],
        submissions: List[Submission],
    ) -> List[TeamSubmissionRow]:
        def students(project: Project) -> List[UserResponse]:
            return [UserResponse.model_validate(student.user) for student in project.students]

        def row(submission: Optional[Submission], **endpoints) -> TeamSubmissionRow:
            return TeamSubmissionRow(
                status=classify_submission(submission, deadline),
                **_submission(submission),
                **endpoints,
            )

        if deadline.type == DeadlineType.EVALUATION:
            by_pair = latest_by(submissions, key=lambda s: (s.from_project_id, s.to_project_id))
            return [
                row(
                    by_pair.get((relation.from_project_id, relation.to_project_id)),
                    from_project=_project(relation.from_project),
                    to_project=_project(relation.to_project),
                    students=students(relation.from_project),
                )
                for relation in relations
            ]

        by_target = latest_by(submissions, key=lambda s: (s.from_project_id, s.to_user_id))
        rows = []
        for project in projects:
            endpoints = {"from_project": _project(project), "students": students(project)}
            to_user_id = None
            if deadline.type == DeadlineType.FEEDBACK and project.adviser is not None:
                to_user_id = project.adviser.user_id
                endpoints["to_user"] = UserResponse.model_validate(project.adviser.user)
            submission = by_target.get((project.id, to_user_id))
            if deadline.type == DeadlineType.FEEDBACK and to_user_id is None:
                submission = None
            rows.append(row(submission, **endpoints))
        return rows

    async def team_submissions(
        self,
        cohort_year: int,
        deadline_id: int,
        pagination: PaginationParams,
        submission_status: Optional[SubmissionStatus] = None,
        search: Optional[str] = None,
    ) -> TeamSubmissionsResponse:
        """
        One row per project (or per relation, for evaluations) with the most
        recent final submission and its status. Filtering by Submitted keeps
        late submissions too.
        """
        projects_query = (
            select(Project)
            .options(
                selectinload(Project.students).selectinload(Student.user),
                selectinload(Project.adviser).selectinload(Adviser.user),
            )
            .where(Project.cohort_year == cohort_year)
            .order_by(Project.id)
        )
        if search:
            projects_query = projects_query.where(Project.name.ilike(f"%{search}%"))

        deadline, projects = await asyncio.gather(
            self._first(select(Deadline).where(Deadline.id == deadline_id)),
            self._read(pagination.apply(projects_query)),
        )
        if not deadline:
            raise ResourceNotFoundError("Deadline", deadline_id)
        if deadline.cohort_year != cohort_year:
            raise BadRequestError(f"Deadline {deadline_id} is not part of cohort {cohort_year}")
        if deadline.type == DeadlineType.APPLICATION:
            raise BadRequestError("Application deadlines are reviewed through the application list")

        project_ids = [project.id for project in projects]
        relations: List[EvaluationRelation] = []
        if deadline.type == DeadlineType.EVALUATION:
            relations, submissions = await asyncio.gather(
                self._read(
                    select(EvaluationRelation)
                    .options(
                        selectinload(EvaluationRelation.from_project)
                        .selectinload(Project.students)
                        .selectinload(Student.user),
                        selectinload(EvaluationRelation.to_project),
                    )
                    .where(EvaluationRelation.from_project_id.in_(project_ids))
                    .order_by(EvaluationRelation.from_project_id, EvaluationRelation.to_project_id)
                ),
                self._read(self._submissions(
                    [deadline.id], Submission.from_project_id.in_(project_ids), final_only=True
                )),
            )
        else:
            submissions = await self._read(self._submissions(
                [deadline.id], Submission.from_project_id.in_(project_ids), final_only=True
            ))

        rows = self._team_rows(deadline, projects, relations, submissions)
        if submission_status == SubmissionStatus.UNSUBMITTED:
            rows = [r for r in rows if r.status == SubmissionStatus.UNSUBMITTED]
        elif submission_status == SubmissionStatus.SUBMITTED_LATE:
            rows = [r for r in rows if r.status == SubmissionStatus.SUBMITTED_LATE]
        elif submission_status == SubmissionStatus.SUBMITTED:
            rows = [r for r in rows if r.status != SubmissionStatus.UNSUBMITTED]

        logger.debug(f"[Dashboard] {len(rows)} team submission rows for deadline {deadline_id}")
        return TeamSubmissionsResponse(deadline=_deadline(deadline), rows=rows)


def get_dashboard_service(session_factory: async_sessionmaker[AsyncSession]) -> DashboardService:
    return DashboardService(session_factory)
