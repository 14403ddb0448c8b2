from .base import Base, metadata
from .auth import Profile, ROLES, DEPARTMENTS
from .subject import Subject, Experiment, StudentSubject, FacultySubject
from .submission import ExperimentSubmission, Evaluation, SUBMISSION_STATES, SUBMISSION_STATUSES

__all__ = [
    'Base',
    'metadata',
    # Principals
    'Profile',
    'ROLES',
    'DEPARTMENTS',
    # Resource hierarchy
    'Subject',
    'Experiment',
    'ExperimentSubmission',
    'Evaluation',
    'SUBMISSION_STATES',
    'SUBMISSION_STATUSES',
    # Relations
    'StudentSubject',
    'FacultySubject',
]
