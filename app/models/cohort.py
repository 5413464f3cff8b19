"""Cohort model - one program year"""
from sqlalchemy import Column, Integer, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


class Cohort(Base):
    """A program cycle; bounds role memberships, projects and deadlines"""
    __tablename__ = "cohorts"

    academic_year = Column(Integer, primary_key=True, autoincrement=False)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    projects = relationship("Project", back_populates="cohort", passive_deletes=True)
    deadlines = relationship("Deadline", back_populates="cohort", passive_deletes=True)

    def __repr__(self):
        return f"<Cohort {self.academic_year}>"
