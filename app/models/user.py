from sqlalchemy import Column, String, DateTime, Integer, Text, Index
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base


class User(Base):
    """
    Identity record.

    A user holds roles through separate Student / Adviser / Mentor /
    Administrator records, at most one of each kind per cohort.
    """
    __tablename__ = "users"

    __table_args__ = (
        Index('ix_users_email', 'email', unique=True),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    password = Column(String(255), nullable=False)

    # Profile
    profile_pic_url = Column(String(500), nullable=True)
    github_url = Column(String(500), nullable=True)
    linkedin_url = Column(String(500), nullable=True)
    personal_site_url = Column(String(500), nullable=True)
    self_intro = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Role records
    students = relationship("Student", back_populates="user", passive_deletes=True)
    advisers = relationship("Adviser", back_populates="user", passive_deletes=True)
    mentors = relationship("Mentor", back_populates="user", passive_deletes=True)
    administrators = relationship("Administrator", back_populates="user", passive_deletes=True)

    def __repr__(self):
        return f"<User {self.email}>"
