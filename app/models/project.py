from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, ForeignKey, Boolean, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base


class AchievementLevel(str, enum.Enum):
    """Graded outcome of a project, lowest first"""
    VOSTOK = "Vostok"
    GEMINI = "Gemini"
    APOLLO = "Apollo"
    ARTEMIS = "Artemis"


class Project(Base):
    """A student team within one cohort"""
    __tablename__ = "projects"

    __table_args__ = (
        Index('ix_projects_cohort_year', 'cohort_year'),
        Index('ix_projects_adviser_id', 'adviser_id'),
        Index('ix_projects_mentor_id', 'mentor_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    team_name = Column(String(255), nullable=True)
    achievement = Column(SQLEnum(AchievementLevel), default=AchievementLevel.VOSTOK, nullable=False)
    cohort_year = Column(Integer, ForeignKey("cohorts.academic_year", ondelete="CASCADE"), nullable=False)

    adviser_id = Column(Integer, ForeignKey("advisers.id", ondelete="SET NULL"), nullable=True)
    mentor_id = Column(Integer, ForeignKey("mentors.id", ondelete="SET NULL"), nullable=True)

    has_dropped = Column(Boolean, default=False, nullable=False)
    proposal_pdf = Column(String(500), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    cohort = relationship("Cohort", back_populates="projects")
    students = relationship("Student", back_populates="project")
    adviser = relationship("Adviser", back_populates="projects")
    mentor = relationship("Mentor", back_populates="projects")

    def __repr__(self):
        return f"<Project {self.name} ({self.cohort_year})>"
