from sqlalchemy import (
    CheckConstraint, Column, DateTime, ForeignKey, Integer,
    String, Text, UniqueConstraint, case, func, select
)
from sqlalchemy.orm import relationship, column_property

from .base import Base
from .subject import new_id

SUBMISSION_STATES = ('draft', 'submitted')
SUBMISSION_STATUSES = ('draft', 'submitted', 'evaluated')


class ExperimentSubmission(Base):
    __tablename__ = 'experiment_submission'
    __table_args__ = (
        UniqueConstraint('experiment_id', 'student_id', name='uq_submission_experiment_student'),
        CheckConstraint("state IN ('draft', 'submitted')", name='ck_submission_state'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    experiment_id = Column(ForeignKey('experiment.id', ondelete='CASCADE'), nullable=False, index=True)
    student_id = Column(ForeignKey('profile.id', ondelete='CASCADE'), nullable=False, index=True)
    code = Column(Text)
    language = Column(String(32))
    file_url = Column(String(2048))
    # Only the student's own intent is stored; "evaluated" is derived below.
    state = Column(String(16), nullable=False, server_default='submitted')
    submitted_at = Column(DateTime(True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(True), nullable=False, server_default=func.now(), onupdate=func.now())

    experiment = relationship("Experiment", back_populates="submissions")
    student = relationship("Profile", back_populates="submissions")
    evaluation = relationship("Evaluation", back_populates="submission", uselist=False, cascade="all, delete-orphan", passive_deletes=True)


class Evaluation(Base):
    __tablename__ = 'evaluation'
    __table_args__ = (
        UniqueConstraint('submission_id', name='uq_evaluation_submission'),
        CheckConstraint('marks >= 0 AND marks <= 100', name='ck_evaluation_marks'),
    )

    id = Column(String(36), primary_key=True, default=new_id)
    submission_id = Column(ForeignKey('experiment_submission.id', ondelete='CASCADE'), nullable=False)
    faculty_id = Column(ForeignKey('profile.id', ondelete='CASCADE'), nullable=False, index=True)
    marks = Column(Integer)
    feedback = Column(Text)
    evaluated_at = Column(DateTime(True), nullable=False, server_default=func.now())

    submission = relationship("ExperimentSubmission", back_populates="evaluation")
    faculty = relationship("Profile", back_populates="evaluations")


ExperimentSubmission.status = column_property(
    case(
        (
            select(Evaluation.id)
            .where(Evaluation.submission_id == ExperimentSubmission.id)
            .exists(),
            'evaluated'
        ),
        else_=ExperimentSubmission.state
    )
)
