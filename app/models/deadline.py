"""Deadlines and the form (sections, questions, options) attached to each"""
from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, Boolean, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base


class DeadlineType(str, enum.Enum):
    APPLICATION = "Application"
    MILESTONE = "Milestone"
    EVALUATION = "Evaluation"
    FEEDBACK = "Feedback"


class QuestionType(str, enum.Enum):
    SHORT_ANSWER = "ShortAnswer"
    PARAGRAPH = "Paragraph"
    MULTIPLE_CHOICE = "MultipleChoice"
    CHECKBOXES = "Checkboxes"
    DROPDOWN = "Dropdown"
    URL = "Url"
    DATE = "Date"
    TIME = "Time"


class Deadline(Base):
    """A scheduled work item of one type within a cohort"""
    __tablename__ = "deadlines"

    __table_args__ = (
        UniqueConstraint('cohort_year', 'name', name='uq_deadlines_cohort_name'),
        Index('ix_deadlines_cohort_type', 'cohort_year', 'type'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    cohort_year = Column(Integer, ForeignKey("cohorts.academic_year", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=False)
    desc = Column(Text, nullable=True)
    due_by = Column(DateTime, nullable=False)
    type = Column(SQLEnum(DeadlineType), default=DeadlineType.MILESTONE, nullable=False)

    # Evaluation deadlines point at the Milestone they evaluate
    evaluating_milestone_id = Column(Integer, ForeignKey("deadlines.id", ondelete="SET NULL"), nullable=True)

    created_on = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    cohort = relationship("Cohort", back_populates="deadlines")
    evaluating_milestone = relationship("Deadline", remote_side=[id])
    sections = relationship(
        "Section",
        back_populates="deadline",
        order_by="Section.section_number",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Deadline {self.name} ({self.type})>"


class Section(Base):
    __tablename__ = "sections"

    __table_args__ = (
        UniqueConstraint('deadline_id', 'section_number', name='uq_sections_deadline_number'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    deadline_id = Column(Integer, ForeignKey("deadlines.id", ondelete="CASCADE"), nullable=False)
    section_number = Column(Integer, nullable=False)
    name = Column(String(255), nullable=False)
    desc = Column(Text, nullable=True)

    deadline = relationship("Deadline", back_populates="sections")
    questions = relationship(
        "Question",
        back_populates="section",
        order_by="Question.question_number",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Question(Base):
    __tablename__ = "questions"

    __table_args__ = (
        UniqueConstraint('section_id', 'question_number', name='uq_questions_section_number'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    section_id = Column(Integer, ForeignKey("sections.id", ondelete="CASCADE"), nullable=False)
    question_number = Column(Integer, nullable=False)
    question = Column(Text, nullable=False)
    desc = Column(Text, nullable=True)
    type = Column(SQLEnum(QuestionType), default=QuestionType.SHORT_ANSWER, nullable=False)
    is_anonymous = Column(Boolean, default=False, nullable=False)

    section = relationship("Section", back_populates="questions")
    options = relationship(
        "Option",
        back_populates="question",
        order_by="Option.order",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Option(Base):
    __tablename__ = "options"

    id = Column(Integer, primary_key=True, autoincrement=True)
    question_id = Column(Integer, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False, index=True)
    order = Column(Integer, nullable=False)
    option = Column(String(500), nullable=False)

    question = relationship("Question", back_populates="options")
