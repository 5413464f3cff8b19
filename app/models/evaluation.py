"""Peer evaluation graph: adviser-scoped groups and directed relations"""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Table, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


evaluation_group_projects = Table(
    "evaluation_group_projects",
    Base.metadata,
    Column("group_id", Integer, ForeignKey("evaluation_groups.id", ondelete="CASCADE"), primary_key=True),
    Column("project_id", Integer, ForeignKey("projects.id", ondelete="CASCADE"), primary_key=True),
)


class EvaluationGroup(Base):
    """A set of projects under one adviser that evaluate each other"""
    __tablename__ = "evaluation_groups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    adviser_id = Column(Integer, ForeignKey("advisers.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    adviser = relationship("Adviser")
    projects = relationship("Project", secondary=evaluation_group_projects, order_by="Project.id")
    relations = relationship("EvaluationRelation", back_populates="group")


class EvaluationRelation(Base):
    """Directed edge: from_project evaluates to_project"""
    __tablename__ = "evaluation_relations"

    __table_args__ = (
        UniqueConstraint('from_project_id', 'to_project_id', name='uq_relations_from_to'),
        Index('ix_relations_to_project', 'to_project_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    from_project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    to_project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    group_id = Column(Integer, ForeignKey("evaluation_groups.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    from_project = relationship("Project", foreign_keys=[from_project_id])
    to_project = relationship("Project", foreign_keys=[to_project_id])
    group = relationship("EvaluationGroup", back_populates="relations")

    def __repr__(self):
        return f"<EvaluationRelation {self.from_project_id} -> {self.to_project_id}>"
