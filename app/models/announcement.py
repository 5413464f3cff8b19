from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Integer, Text, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from app.core.database import Base


class TargetAudienceRole(str, enum.Enum):
    STUDENT = "Student"
    MENTOR = "Mentor"
    ADVISER = "Adviser"
    ALL = "All"


class Announcement(Base):
    """Broadcast message for one cohort and one audience"""
    __tablename__ = "announcements"

    __table_args__ = (
        Index('ix_announcements_cohort_audience', 'cohort_year', 'target_audience_role'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    cohort_year = Column(Integer, ForeignKey("cohorts.academic_year", ondelete="CASCADE"), nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    target_audience_role = Column(SQLEnum(TargetAudienceRole), default=TargetAudienceRole.ALL, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    author = relationship("User")
    comments = relationship("AnnouncementComment", back_populates="announcement", passive_deletes=True)
    read_logs = relationship("AnnouncementReadLog", back_populates="announcement", passive_deletes=True)


class AnnouncementComment(Base):
    __tablename__ = "announcement_comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    announcement_id = Column(Integer, ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False, index=True)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    parent_comment_id = Column(
        Integer, ForeignKey("announcement_comments.id", ondelete="CASCADE"), nullable=True, index=True
    )
    content = Column(Text, nullable=False)

    # Set when a comment with replies is removed; the row stays to anchor the thread
    deleted_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    announcement = relationship("Announcement", back_populates="comments")
    author = relationship("User")


class AnnouncementReadLog(Base):
    __tablename__ = "announcement_read_logs"

    __table_args__ = (
        UniqueConstraint('user_id', 'announcement_id', name='uq_read_logs_user_announcement'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    announcement_id = Column(Integer, ForeignKey("announcements.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    announcement = relationship("Announcement", back_populates="read_logs")
