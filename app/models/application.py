from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, ForeignKey, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base
from app.models.project import AchievementLevel


class ApplicationStatus(str, enum.Enum):
    UNPROCESSED = "Unprocessed"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Application(Base):
    """A two-student team applying to the program; keyed by its form submission"""
    __tablename__ = "applications"

    __table_args__ = (
        Index('ix_applications_status', 'status'),
    )

    submission_id = Column(Integer, ForeignKey("submissions.id", ondelete="CASCADE"), primary_key=True)
    team_name = Column(String(255), nullable=False)
    achievement = Column(SQLEnum(AchievementLevel), nullable=False)
    status = Column(SQLEnum(ApplicationStatus), default=ApplicationStatus.UNPROCESSED, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    submission = relationship("Submission")
    applicants = relationship(
        "Applicant",
        back_populates="application",
        order_by="Applicant.id",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Applicant(Base):
    __tablename__ = "applicants"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(
        Integer, ForeignKey("applications.submission_id", ondelete="CASCADE"), nullable=False, index=True
    )
    deadline_id = Column(Integer, ForeignKey("deadlines.id", ondelete="CASCADE"), nullable=False)

    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    matric_no = Column(String(20), nullable=False)
    nusnet_id = Column(String(20), nullable=False)

    application = relationship("Application", back_populates="applicants")
    deadline = relationship("Deadline")
