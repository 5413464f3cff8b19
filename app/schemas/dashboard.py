"""Read models for the per-role dashboards"""
from typing import Optional, List

from app.models.submission import SubmissionStatus
from app.schemas.common import CamelModel
from app.schemas.deadline import DeadlineResponse
from app.schemas.project import ProjectResponse
from app.schemas.submission import SubmissionResponse, SubmissionDetailResponse
from app.schemas.user import UserResponse


class StudentDeadlineEntry(CamelModel):
    """
    Milestone:  {deadline, submission}
    Evaluation: {deadline, toProject, submission, toProjectSubmission}
    Feedback:   {deadline, toUser, submission}
    """
    deadline: DeadlineResponse
    submission: Optional[SubmissionResponse] = None
    to_project: Optional[ProjectResponse] = None
    to_project_submission: Optional[SubmissionResponse] = None
    to_user: Optional[UserResponse] = None


class ReceivedSubmission(CamelModel):
    from_project: Optional[ProjectResponse] = None
    from_user: Optional[UserResponse] = None
    submission: Optional[SubmissionDetailResponse] = None


class ReceivedEvaluationsEntry(CamelModel):
    deadline: DeadlineResponse
    submissions: List[ReceivedSubmission]


class EvaluationTarget(ProjectResponse):
    """Project under evaluation plus its own submission for the evaluated milestone"""
    submission_id: Optional[int] = None


class AdviserDeadlineEntry(CamelModel):
    deadline: DeadlineResponse
    to_project: Optional[EvaluationTarget] = None
    submission: Optional[SubmissionResponse] = None


class ProjectSubmission(CamelModel):
    from_project: ProjectResponse
    submission: Optional[SubmissionResponse] = None


class DeadlineSubmissionsEntry(CamelModel):
    deadline: DeadlineResponse
    submissions: List[ProjectSubmission]


class TeamSubmissionRow(CamelModel):
    """One row of the admin table; which endpoints are set depends on the deadline type"""
    status: SubmissionStatus
    submission: Optional[SubmissionResponse] = None
    from_project: Optional[ProjectResponse] = None
    to_project: Optional[ProjectResponse] = None
    to_user: Optional[UserResponse] = None
    students: List[UserResponse] = []


class TeamSubmissionsResponse(CamelModel):
    deadline: DeadlineResponse
    rows: List[TeamSubmissionRow]
