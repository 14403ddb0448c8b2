from uuid import uuid4
from sqlalchemy import (
    CheckConstraint, Column, Date, DateTime, ForeignKey,
    Integer, String, Text, UniqueConstraint, func
)
from sqlalchemy.orm import relationship

from .base import Base


def new_id() -> str:
    return str(uuid4())


class Subject(Base):
    __tablename__ = 'subject'
    __table_args__ = (
        CheckConstraint("department IN ('CSE', 'IT', 'AIDS')", name='ck_subject_department'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    code = Column(String(64))
    department = Column(String(16))
    description = Column(Text)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    # Relationships
    experiments = relationship("Experiment", back_populates="subject", cascade="all, delete-orphan", passive_deletes=True)
    student_subjects = relationship("StudentSubject", back_populates="subject", cascade="all, delete-orphan", passive_deletes=True)
    faculty_subjects = relationship("FacultySubject", back_populates="subject", cascade="all, delete-orphan", passive_deletes=True)


class Experiment(Base):
    __tablename__ = 'experiment'

    id = Column(String(36), primary_key=True, default=new_id)
    subject_id = Column(ForeignKey('subject.id', ondelete='CASCADE'), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    experiment_number = Column(Integer)
    due_date = Column(Date)
    created_at = Column(DateTime(True), nullable=False, server_default=func.now())

    subject = relationship("Subject", back_populates="experiments")
    submissions = relationship("ExperimentSubmission", back_populates="experiment", cascade="all, delete-orphan", passive_deletes=True)


class StudentSubject(Base):
    """Enrollment edge between a student and a subject."""

    __tablename__ = 'student_subject'
    __table_args__ = (
        UniqueConstraint('student_id', 'subject_id', name='uq_student_subject'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    student_id = Column(ForeignKey('profile.id', ondelete='CASCADE'), nullable=False, index=True)
    subject_id = Column(ForeignKey('subject.id', ondelete='CASCADE'), nullable=False, index=True)
    enrolled_at = Column(DateTime(True), nullable=False, server_default=func.now())

    student = relationship("Profile", back_populates="enrollments")
    subject = relationship("Subject", back_populates="student_subjects")


class FacultySubject(Base):
    """Assignment edge between a faculty member and a subject."""

    __tablename__ = 'faculty_subject'
    __table_args__ = (
        UniqueConstraint('faculty_id', 'subject_id', name='uq_faculty_subject'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    faculty_id = Column(ForeignKey('profile.id', ondelete='CASCADE'), nullable=False, index=True)
    subject_id = Column(ForeignKey('subject.id', ondelete='CASCADE'), nullable=False, index=True)
    assigned_at = Column(DateTime(True), nullable=False, server_default=func.now())

    faculty = relationship("Profile", back_populates="assignments")
    subject = relationship("Subject", back_populates="faculty_subjects")
