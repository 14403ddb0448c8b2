"""
Role specific dashboards. One provider per role, looked up by the caller's role.
"""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from typing import Dict, List
from sqlalchemy import func
from sqlalchemy.orm import Session

from labrecord_backend.interface.dashboard import (
    AdminOverview,
    DashboardGet,
    SubjectProgress,
    SubjectReview,
)
from labrecord_backend.model.auth import Profile
from labrecord_backend.model.subject import Experiment, FacultySubject, StudentSubject, Subject
from labrecord_backend.model.submission import Evaluation, ExperimentSubmission
from labrecord_backend.permissions.principal import Principal, Role

logger = logging.getLogger(__name__)


def _count(db: Session, column, *criteria) -> int:
    return db.query(func.count(column)).filter(*criteria).scalar() or 0


def _status_counts(db: Session, subject_id: str, student_id: str = None) -> Counter:
    query = (
        db.query(ExperimentSubmission.status)
        .join(Experiment, Experiment.id == ExperimentSubmission.experiment_id)
        .filter(Experiment.subject_id == subject_id)
    )
    if student_id is not None:
        query = query.filter(ExperimentSubmission.student_id == student_id)
    return Counter(status for (status,) in query.all())


class DashboardProvider(ABC):

    role: Role

    @abstractmethod
    def build(self, db: Session, principal: Principal) -> DashboardGet:
        pass


class AdminDashboardProvider(DashboardProvider):

    role = Role.admin

    def build(self, db, principal):
        overview = AdminOverview(
            subjects=_count(db, Subject.id),
            experiments=_count(db, Experiment.id),
            students=_count(db, Profile.id, Profile.role == "student"),
            faculty=_count(db, Profile.id, Profile.role == "faculty"),
            submissions=_count(db, ExperimentSubmission.id),
            evaluations=_count(db, Evaluation.id),
        )
        return DashboardGet(role=self.role, overview=overview)


class FacultyDashboardProvider(DashboardProvider):
    """Submissions awaiting review in each assigned subject"""

    role = Role.faculty

    def build(self, db, principal):
        subjects = (
            db.query(Subject)
            .join(FacultySubject, FacultySubject.subject_id == Subject.id)
            .filter(FacultySubject.faculty_id == principal.user_id)
            .order_by(Subject.code)
            .all()
        )

        reviews: List[SubjectReview] = []
        for subject in subjects:
            counts = _status_counts(db, subject.id)
            reviews.append(SubjectReview(
                subject_id=subject.id,
                name=subject.name,
                code=subject.code,
                total=counts["submitted"] + counts["evaluated"],
                pending=counts["submitted"],
                evaluated=counts["evaluated"],
            ))

        return DashboardGet(role=self.role, reviews=reviews)


class StudentDashboardProvider(DashboardProvider):
    """Progress through the experiments of each enrolled subject"""

    role = Role.student

    def build(self, db, principal):
        subjects = (
            db.query(Subject)
            .join(StudentSubject, StudentSubject.subject_id == Subject.id)
            .filter(StudentSubject.student_id == principal.user_id)
            .order_by(Subject.code)
            .all()
        )

        progress: List[SubjectProgress] = []
        for subject in subjects:
            total = _count(db, Experiment.id, Experiment.subject_id == subject.id)
            counts = _status_counts(db, subject.id, principal.user_id)
            # drafts do not count as handed in
            handed_in = counts["submitted"] + counts["evaluated"]
            progress.append(SubjectProgress(
                subject_id=subject.id,
                name=subject.name,
                code=subject.code,
                total_experiments=total,
                submitted=handed_in,
                evaluated=counts["evaluated"],
                pending=max(total - handed_in, 0),
                progress=round(100 * handed_in / total) if total else 0,
            ))

        return DashboardGet(role=self.role, progress=progress)


DASHBOARD_PROVIDERS: Dict[Role, DashboardProvider] = {
    provider.role: provider
    for provider in (AdminDashboardProvider(), FacultyDashboardProvider(), StudentDashboardProvider())
}


def build_dashboard(db: Session, principal: Principal) -> DashboardGet:
    return DASHBOARD_PROVIDERS[principal.role].build(db, principal)
