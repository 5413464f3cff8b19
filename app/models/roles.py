"""Role records linking a User to a cohort"""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base


class UserRolesEnum(str, enum.Enum):
    STUDENT = "Student"
    ADVISER = "Adviser"
    MENTOR = "Mentor"
    ADMINISTRATOR = "Administrator"


class Student(Base):
    __tablename__ = "students"

    __table_args__ = (
        UniqueConstraint('user_id', 'cohort_year', name='uq_students_user_cohort'),
        UniqueConstraint('matric_no', 'cohort_year', name='uq_students_matric_cohort'),
        UniqueConstraint('nusnet_id', 'cohort_year', name='uq_students_nusnet_cohort'),
        Index('ix_students_project_id', 'project_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    cohort_year = Column(Integer, ForeignKey("cohorts.academic_year", ondelete="CASCADE"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)

    matric_no = Column(String(20), nullable=True)
    nusnet_id = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="students")
    project = relationship("Project", back_populates="students")

    def __repr__(self):
        return f"<Student {self.id} user={self.user_id} cohort={self.cohort_year}>"


class Adviser(Base):
    __tablename__ = "advisers"

    __table_args__ = (
        UniqueConstraint('user_id', 'cohort_year', name='uq_advisers_user_cohort'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    cohort_year = Column(Integer, ForeignKey("cohorts.academic_year", ondelete="CASCADE"), nullable=False)

    matric_no = Column(String(20), nullable=True)
    nusnet_id = Column(String(20), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="advisers")
    projects = relationship("Project", back_populates="adviser")

    def __repr__(self):
        return f"<Adviser {self.id} user={self.user_id} cohort={self.cohort_year}>"


class Mentor(Base):
    __tablename__ = "mentors"

    __table_args__ = (
        UniqueConstraint('user_id', 'cohort_year', name='uq_mentors_user_cohort'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    cohort_year = Column(Integer, ForeignKey("cohorts.academic_year", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="mentors")
    projects = relationship("Project", back_populates="mentor")

    def __repr__(self):
        return f"<Mentor {self.id} user={self.user_id} cohort={self.cohort_year}>"


class Administrator(Base):
    """Administrator access is time-boxed rather than cohort-bound"""
    __tablename__ = "administrators"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    end_date = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="administrators")

    def __repr__(self):
        return f"<Administrator {self.id} user={self.user_id}>"
