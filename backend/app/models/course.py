"""
Modèles SQLAlchemy pour les cours, les inscriptions et les supports de cours.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, String, Text

from app.database import Base


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tutor_username = Column(String(50), ForeignKey("accounts.username"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    price_per_session = Column(Numeric(10, 2), nullable=False, default=0)
    description = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}


class StudentCourse(Base):
    """Inscription d'un élève à un cours (clé composite)."""
    __tablename__ = "student_courses"

    student_username = Column(String(50), ForeignKey("accounts.username"), primary_key=True)
    course_id = Column(Integer, ForeignKey("courses.id"), primary_key=True)
    frequency = Column(String(100), nullable=False)
    end_date = Column(DateTime, nullable=False)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}


class TeachingMaterial(Base):
    __tablename__ = "teaching_materials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    file_name = Column(String(255), nullable=True)
    version = Column(Integer, nullable=False, default=1)

    __mapper_args__ = {"version_id_col": version}
