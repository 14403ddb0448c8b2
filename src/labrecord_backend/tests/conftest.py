"""
Pytest configuration and fixtures for all tests.

Every test gets a fresh in-memory SQLite database with foreign keys enabled,
populated with a small lab:

- subjects CS101 and CS302, one experiment each (exp1, exp2)
- admin ``admin1``
- faculty ``fac1`` assigned to CS101, ``fac2`` assigned to CS302
- students ``stu1`` and ``stu2`` enrolled in CS101, ``stu3`` enrolled nowhere
"""

from types import SimpleNamespace
import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from labrecord_backend.database import build_engine
from labrecord_backend.model import (
    Base,
    Experiment,
    FacultySubject,
    Profile,
    StudentSubject,
    Subject,
)
from labrecord_backend.permissions.principal import PrincipalBuilder


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def Session(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(Session):
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def lab(db):
    """Populate the database and return the ids of everything created."""
    profiles = [
        Profile(id="admin1", full_name="Admin", role="admin", department="CSE"),
        Profile(id="fac1", full_name="Faculty One", role="faculty", department="CSE"),
        Profile(id="fac2", full_name="Faculty Two", role="faculty", department="IT"),
        Profile(id="stu1", full_name="Student One", role="student", department="CSE"),
        Profile(id="stu2", full_name="Student Two", role="student", department="CSE"),
        Profile(id="stu3", full_name="Student Three", role="student", department="IT"),
    ]
    db.add_all(profiles)

    cs101 = Subject(name="Problem Solving and Python Programming", code="CS101", department="CSE")
    cs302 = Subject(name="Database Management Systems", code="CS302", department="CSE")
    db.add_all([cs101, cs302])
    db.flush()

    exp1 = Experiment(subject_id=cs101.id, title="Hello World", experiment_number=1)
    exp2 = Experiment(subject_id=cs302.id, title="Joins", experiment_number=1)
    db.add_all([exp1, exp2])

    db.add_all([
        FacultySubject(faculty_id="fac1", subject_id=cs101.id),
        FacultySubject(faculty_id="fac2", subject_id=cs302.id),
        StudentSubject(student_id="stu1", subject_id=cs101.id),
        StudentSubject(student_id="stu2", subject_id=cs101.id),
    ])
    db.commit()

    return SimpleNamespace(cs101=cs101.id, cs302=cs302.id, exp1=exp1.id, exp2=exp2.id)


@pytest.fixture
def principal(db):
    """Build the principal for a profile id, the way a request would."""
    def build(user_id):
        return PrincipalBuilder.from_profile(db.get(Profile, user_id))
    return build
