"""
Modèles SQLAlchemy pour les séances de cours et les devoirs associés.
Le nom TutoringSession évite la confusion avec sqlalchemy.orm.Session.
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text

from app.database import Base


class TutoringSession(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    student_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    session_date_time = Column(DateTime, nullable=False)
    is_paid_for = Column(Boolean, nullable=False, default=False)
    confirmation_status = Column(String(10), nullable=False, default="UNKNOWN")  # UNKNOWN, YES, NO
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}


class HomeworkAssignment(Base):
    __tablename__ = "homework_assignments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(Integer, ForeignKey("sessions.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    objective = Column(Text, nullable=False, default="")
    solution_file_name = Column(String(255), nullable=True)  # écrit une seule fois
    solution_feedback = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}
