from sqlalchemy import CheckConstraint, Column, DateTime, Enum, String, func
from sqlalchemy.orm import relationship

from .base import Base

ROLES = ('admin', 'faculty', 'student')
DEPARTMENTS = ('CSE', 'IT', 'AIDS')


class Profile(Base):
    """Principal record. The id is issued by the external identity provider."""

    __tablename__ = 'profile'
    __table_args__ = (
        CheckConstraint("role IN ('admin', 'faculty', 'student')", name='ck_profile_role'),
        CheckConstraint("department IN ('CSE', 'IT', 'AIDS')", name='ck_profile_department'),
    )

    id = Column(String(255), primary_key=True)
    full_name = Column(String(255), nullable=False, server_default='')
    role = Column(Enum(*ROLES, name='app_role'), nullable=False, server_default='student')
    department = Column(String(16))
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())

    # Relationships
    enrollments = relationship("StudentSubject", back_populates="student", cascade="all, delete-orphan", passive_deletes=True)
    assignments = relationship("FacultySubject", back_populates="faculty", cascade="all, delete-orphan", passive_deletes=True)
    submissions = relationship("ExperimentSubmission", back_populates="student", cascade="all, delete-orphan", passive_deletes=True)
    evaluations = relationship("Evaluation", back_populates="faculty", cascade="all, delete-orphan", passive_deletes=True)
