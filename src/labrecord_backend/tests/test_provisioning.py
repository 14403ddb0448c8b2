import pytest

from labrecord_backend.api.exceptions import (
    ConflictException,
    NotFoundException,
    ValidationException,
)
from labrecord_backend.interface.identity import PrincipalCreatedEvent
from labrecord_backend.model import FacultySubject, Profile, Subject
from labrecord_backend.model.seeder import DEFAULT_SUBJECTS, seed_subjects
from labrecord_backend.settings import settings
from labrecord_backend.workflow.provisioning import (
    assign_faculty,
    enroll_student,
    provision_principal,
)


class TestProvisionPrincipal:

    def test_defaults(self, db):
        profile = provision_principal(db, PrincipalCreatedEvent(id="new-user"))

        assert profile.full_name == ""
        assert profile.role == "student"
        assert profile.department == settings.DEFAULT_DEPARTMENT

    def test_metadata_is_used(self, db):
        event = PrincipalCreatedEvent.model_validate({
            "id": "f-1",
            "metadata": {"full_name": "Dr. Rao", "role": "faculty", "department": "IT"},
        })

        profile = provision_principal(db, event)

        assert (profile.full_name, profile.role, profile.department) == ("Dr. Rao", "faculty", "IT")

    def test_identity_provider_field_name(self, db):
        event = PrincipalCreatedEvent.model_validate({
            "id": "s-9",
            "raw_user_meta_data": {"full_name": "Asha", "email": "asha@example.com"},
        })

        profile = provision_principal(db, event)

        assert profile.full_name == "Asha"
        assert profile.role == "student"

    def test_unknown_role_is_rejected(self, db):
        event = PrincipalCreatedEvent.model_validate({"id": "x", "metadata": {"role": "superuser"}})

        with pytest.raises(ValidationException):
            provision_principal(db, event)
        assert db.get(Profile, "x") is None

    def test_unknown_department_is_rejected(self, db):
        event = PrincipalCreatedEvent.model_validate({"id": "x", "metadata": {"department": "MECH"}})

        with pytest.raises(ValidationException):
            provision_principal(db, event)

    @pytest.mark.parametrize("metadata", [{"role": "Admin"}, {"role": " admin"}, {"department": "cse"}])
    def test_role_and_department_match_exactly(self, db, metadata):
        event = PrincipalCreatedEvent.model_validate({"id": "x", "metadata": metadata})

        with pytest.raises(ValidationException):
            provision_principal(db, event)
        assert db.get(Profile, "x") is None

    def test_one_profile_per_identity(self, db):
        provision_principal(db, PrincipalCreatedEvent(id="dup"))

        with pytest.raises(ConflictException):
            provision_principal(db, PrincipalCreatedEvent(id="dup"))


class TestSystemEdges:

    def test_assign_and_enroll_by_code(self, db, lab):
        assignment = assign_faculty(db, "fac1", "CS302")
        enrollment = enroll_student(db, "stu3", "CS302")

        assert assignment.subject_id == lab.cs302
        assert enrollment.subject_id == lab.cs302

    def test_duplicate_assignment_conflicts(self, db, lab):
        with pytest.raises(ConflictException):
            assign_faculty(db, "fac1", "CS101")
        assert db.query(FacultySubject).filter(FacultySubject.faculty_id == "fac1").count() == 1

    def test_duplicate_enrollment_conflicts(self, db, lab):
        with pytest.raises(ConflictException):
            enroll_student(db, "stu1", "CS101")

    def test_role_must_match(self, db, lab):
        with pytest.raises(ValidationException):
            assign_faculty(db, "stu1", "CS302")
        with pytest.raises(ValidationException):
            enroll_student(db, "fac1", "CS302")

    def test_unknown_subject(self, db, lab):
        with pytest.raises(NotFoundException):
            enroll_student(db, "stu3", "XX999")


class TestSeeder:

    def test_seed_is_repeatable(self, db):
        assert seed_subjects(db) == len(DEFAULT_SUBJECTS)
        assert seed_subjects(db) == 0
        assert db.query(Subject).count() == len(DEFAULT_SUBJECTS)

    def test_existing_codes_are_skipped(self, db, lab):
        # CS101 and CS302 are already present
        assert seed_subjects(db) == len(DEFAULT_SUBJECTS) - 2
