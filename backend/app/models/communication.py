"""
Modèles SQLAlchemy pour la messagerie, les notes personnelles et les notifications.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from app.database import Base


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sender_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    recipient_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    topic = Column(String(255), nullable=False)
    body = Column(Text, nullable=False, default="")
    attachment_file_name = Column(String(255), nullable=True)
    sent_on = Column(DateTime, nullable=False)


class Note(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    date = Column(DateTime, nullable=False)
    body = Column(Text, nullable=False, default="")
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    notification_type = Column(String(40), nullable=False)
    message = Column(String(500), nullable=False)
    notification_time = Column(DateTime, nullable=False)
