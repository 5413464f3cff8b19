"""Voting campaigns and their voter intake"""
from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Boolean, Table, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


vote_event_internal_voters = Table(
    "vote_event_internal_voters",
    Base.metadata,
    Column("vote_event_id", Integer, ForeignKey("vote_events.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
)


class VoteEvent(Base):
    __tablename__ = "vote_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    external_voters = relationship("ExternalVoter", back_populates="vote_event", passive_deletes=True)
    voter_management = relationship(
        "VoterManagement", back_populates="vote_event", uselist=False, passive_deletes=True
    )
    internal_voters = relationship("User", secondary=vote_event_internal_voters)


class ExternalVoter(Base):
    """Voter outside the user base, identified by an issued voter id"""
    __tablename__ = "external_voters"

    __table_args__ = (
        UniqueConstraint('vote_event_id', 'voter_id', name='uq_external_voters_event_voter'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vote_event_id = Column(Integer, ForeignKey("vote_events.id", ondelete="CASCADE"), nullable=False)
    voter_id = Column(String(100), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    vote_event = relationship("VoteEvent", back_populates="external_voters")


class VoterManagement(Base):
    __tablename__ = "voter_management"

    vote_event_id = Column(Integer, ForeignKey("vote_events.id", ondelete="CASCADE"), primary_key=True)
    is_registration_open = Column(Boolean, default=False, nullable=False)
    has_internal_list = Column(Boolean, default=False, nullable=False)
    has_external_list = Column(Boolean, default=False, nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    vote_event = relationship("VoteEvent", back_populates="voter_management")
