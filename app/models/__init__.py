# Re-export all models for convenient imports
from app.models.cohort import Cohort
from app.models.user import User
from app.models.roles import Student, Adviser, Mentor, Administrator, UserRolesEnum
from app.models.project import Project, AchievementLevel
from app.models.deadline import Deadline, Section, Question, Option, DeadlineType, QuestionType
from app.models.submission import Submission, Answer, SubmissionStatus
from app.models.evaluation import EvaluationGroup, EvaluationRelation, evaluation_group_projects
from app.models.application import Application, Applicant, ApplicationStatus
from app.models.announcement import (
    Announcement,
    AnnouncementComment,
    AnnouncementReadLog,
    TargetAudienceRole,
)
from app.models.forum import ForumPost, ForumComment, ForumCategory
from app.models.vote_event import VoteEvent, ExternalVoter, VoterManagement, vote_event_internal_voters

__all__ = [
    # Cohort
    "Cohort",
    # Users & roles
    "User",
    "Student",
    "Adviser",
    "Mentor",
    "Administrator",
    "UserRolesEnum",
    # Projects
    "Project",
    "AchievementLevel",
    # Deadlines
    "Deadline",
    "Section",
    "Question",
    "Option",
    "DeadlineType",
    "QuestionType",
    # Submissions
    "Submission",
    "Answer",
    "SubmissionStatus",
    # Evaluation
    "EvaluationGroup",
    "EvaluationRelation",
    "evaluation_group_projects",
    # Applications
    "Application",
    "Applicant",
    "ApplicationStatus",
    # Announcements
    "Announcement",
    "AnnouncementComment",
    "AnnouncementReadLog",
    "TargetAudienceRole",
    # Forum
    "ForumPost",
    "ForumComment",
    "ForumCategory",
    # Voting
    "VoteEvent",
    "ExternalVoter",
    "VoterManagement",
    "vote_event_internal_voters",
]
