"""
SQLAlchemy ORM Models
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship, declarative_base
from sqlalchemy.sql import func

Base = declarative_base()

class User(Base):
    __tablename__ = 'users'

    user_id = Column(Integer, primary_key=True)
    name = Column(String)
    email = Column(String, unique=True, nullable=False)
    login_password_hash = Column(String, nullable=False)  # one-way hash
    mail_password_cipher = Column(Text, nullable=False)  # credential vault token
    created_at = Column(DateTime, server_default=func.now())

    # Relationships
    reminders = relationship("Reminder", back_populates="user")

class Reminder(Base):
    __tablename__ = 'reminders'

    reminder_id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey('users.user_id'), nullable=False, index=True)
    recipients = Column(Text)  # comma-separated; owner's email when empty
    message = Column(Text, nullable=False)
    scheduled_time = Column(DateTime, nullable=False, index=True)  # naive UTC
    sent = Column(Boolean, nullable=False, default=False)
    deleted = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, server_default=func.now())
    sent_at = Column(DateTime)

    # Relationships
    user = relationship("User", back_populates="reminders")
