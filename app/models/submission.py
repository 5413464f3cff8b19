from sqlalchemy import Column, DateTime, Integer, Text, ForeignKey, Boolean, Index, and_, or_, false, func
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base


class SubmissionStatus(str, enum.Enum):
    """Derived on read, never stored"""
    UNSUBMITTED = "Unsubmitted"
    SUBMITTED = "Submitted"
    SUBMITTED_LATE = "Submitted_Late"


class Submission(Base):
    """
    An answer-set filed against a deadline.

    Submitted by exactly one of from_project / from_user, optionally aimed at
    to_project / to_user. Drafts are ignored by every status computation.
    """
    __tablename__ = "submissions"

    __table_args__ = (
        Index('ix_submissions_deadline_from_project', 'deadline_id', 'from_project_id'),
        Index('ix_submissions_to_project', 'to_project_id'),
        Index('ix_submissions_to_user', 'to_user_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    deadline_id = Column(Integer, ForeignKey("deadlines.id", ondelete="CASCADE"), nullable=False)

    from_project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True)
    from_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    to_project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=True)
    to_user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)

    is_draft = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    deadline = relationship("Deadline")
    from_project = relationship("Project", foreign_keys=[from_project_id])
    from_user = relationship("User", foreign_keys=[from_user_id])
    to_project = relationship("Project", foreign_keys=[to_project_id])
    to_user = relationship("User", foreign_keys=[to_user_id])
    answers = relationship(
        "Answer",
        back_populates="submission",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Submission {self.id} deadline={self.deadline_id} draft={self.is_draft}>"


# At most one final submission per (deadline, submitter, target).
# NULL endpoints are folded to 0 so they take part in the comparison.
# Application submissions have no submitter and are left out.
_final_with_submitter = and_(
    Submission.is_draft == false(),
    or_(Submission.from_project_id.isnot(None), Submission.from_user_id.isnot(None)),
)
Index(
    'uq_submissions_final_per_target',
    Submission.deadline_id,
    func.coalesce(Submission.from_project_id, 0),
    func.coalesce(Submission.from_user_id, 0),
    func.coalesce(Submission.to_project_id, 0),
    func.coalesce(Submission.to_user_id, 0),
    unique=True,
    postgresql_where=_final_with_submitter,
    sqlite_where=_final_with_submitter,
)


class Answer(Base):
    """One response to one question within one submission"""
    __tablename__ = "answers"

    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), primary_key=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True)
    answer = Column(Text, nullable=False, default="")

    submission = relationship("Submission", back_populates="answers")
    question = relationship("Question")
