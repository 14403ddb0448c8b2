"""
The alembic revisions applied to an empty database produce the schema the
models describe, constraints and cascades included.
"""

import pytest
from sqlalchemy import delete, inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from labrecord_backend.database import build_engine, upgrade_database
from labrecord_backend.model import (
    Base,
    Evaluation,
    Experiment,
    ExperimentSubmission,
    Profile,
    StudentSubject,
    Subject,
)
from labrecord_backend.model.seeder import seed_subjects


@pytest.fixture
def migrated():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    upgrade_database(engine=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def migrated_db(migrated):
    session = sessionmaker(bind=migrated, autocommit=False, autoflush=False)()
    yield session
    session.close()


class TestInitialRevision:

    def test_creates_every_mapped_table(self, migrated):
        tables = set(inspect(migrated).get_table_names())

        assert set(Base.metadata.tables) <= tables
        assert "alembic_version" in tables

    def test_columns_match_models(self, migrated):
        inspector = inspect(migrated)

        for name, table in Base.metadata.tables.items():
            columns = {column["name"] for column in inspector.get_columns(name)}
            assert columns == set(table.columns.keys()), name

    def test_unique_constraints(self, migrated):
        inspector = inspect(migrated)
        names = {
            constraint["name"]
            for table in Base.metadata.tables
            for constraint in inspector.get_unique_constraints(table)
        }

        assert {
            "uq_student_subject",
            "uq_faculty_subject",
            "uq_submission_experiment_student",
            "uq_evaluation_submission",
        } <= names

    def test_upgrade_at_head_is_a_no_op(self, migrated):
        upgrade_database(engine=migrated)

        assert set(Base.metadata.tables) <= set(inspect(migrated).get_table_names())

    def test_seeding_after_upgrade(self, migrated_db):
        assert seed_subjects(migrated_db) == 16
        assert seed_subjects(migrated_db) == 0


class TestMigratedConstraints:

    @pytest.fixture
    def graded(self, migrated_db):
        db = migrated_db
        db.add_all([
            Profile(id="stu1", full_name="Student", role="student", department="CSE"),
            Profile(id="fac1", full_name="Faculty", role="faculty", department="CSE"),
        ])
        subject = Subject(name="Programming in C", code="CS101", department="CSE")
        db.add(subject)
        db.flush()
        experiment = Experiment(subject_id=subject.id, title="Hello world", experiment_number=1)
        db.add(experiment)
        db.flush()
        submission = ExperimentSubmission(experiment_id=experiment.id, student_id="stu1", code="x", language="c")
        db.add(submission)
        db.flush()
        db.add(Evaluation(submission_id=submission.id, faculty_id="fac1", marks=80))
        db.add(StudentSubject(student_id="stu1", subject_id=subject.id))
        db.commit()
        return subject.id, experiment.id

    def test_duplicate_submission_rejected(self, migrated_db, graded):
        _, experiment_id = graded
        migrated_db.add(ExperimentSubmission(experiment_id=experiment_id, student_id="stu1", code="y", language="c"))

        with pytest.raises(IntegrityError):
            migrated_db.commit()
        migrated_db.rollback()

    def test_marks_out_of_range_rejected(self, migrated_db, graded):
        submission = migrated_db.query(ExperimentSubmission).one()
        migrated_db.query(Evaluation).delete()
        migrated_db.add(Evaluation(submission_id=submission.id, faculty_id="fac1", marks=101))

        with pytest.raises(IntegrityError):
            migrated_db.commit()
        migrated_db.rollback()

    def test_unknown_department_rejected(self, migrated_db):
        migrated_db.add(Profile(id="x", full_name="", role="student", department="MECH"))

        with pytest.raises(IntegrityError):
            migrated_db.commit()
        migrated_db.rollback()

    def test_deleting_subject_cascades(self, migrated_db, graded):
        subject_id, _ = graded

        migrated_db.execute(delete(Subject).where(Subject.id == subject_id))
        migrated_db.commit()

        assert migrated_db.query(Experiment).count() == 0
        assert migrated_db.query(ExperimentSubmission).count() == 0
        assert migrated_db.query(Evaluation).count() == 0
        assert migrated_db.query(StudentSubject).count() == 0
