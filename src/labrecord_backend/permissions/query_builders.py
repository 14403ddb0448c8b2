from typing import Any, Type
from sqlalchemy import Select, select
from sqlalchemy.sql.elements import ColumnElement

from labrecord_backend.model.subject import Subject, StudentSubject, FacultySubject
from labrecord_backend.permissions.relations import HIERARCHY, MODELS


class SubjectScopeQueryBuilder:
    """Builds SQL filters that restrict resources to a set of subjects"""

    @classmethod
    def faculty_subjects_subquery(cls, principal_id: str) -> Select:
        """Subjects the principal is assigned to as faculty"""
        return select(FacultySubject.subject_id).where(FacultySubject.faculty_id == principal_id)

    @classmethod
    def student_subjects_subquery(cls, principal_id: str) -> Select:
        """Subjects the principal is enrolled in"""
        return select(StudentSubject.subject_id).where(StudentSubject.student_id == principal_id)

    @classmethod
    def within_subjects(cls, entity: Type[Any], subject_ids: Select) -> ColumnElement:
        """Filter clause keeping rows of ``entity`` whose owning subject is in ``subject_ids``.

        Recurses along the ownership chain, e.g. an evaluation is kept when its
        submission's experiment belongs to one of the subjects.
        """
        kind = entity.__tablename__

        if kind == Subject.__tablename__:
            return entity.id.in_(subject_ids)

        foreign_key, parent_kind = HIERARCHY[kind]
        column = getattr(entity, foreign_key)

        if parent_kind == Subject.__tablename__:
            return column.in_(subject_ids)

        parent = MODELS[parent_kind]
        return column.in_(select(parent.id).where(cls.within_subjects(parent, subject_ids)))
