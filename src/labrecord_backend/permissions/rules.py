"""
Predicate terms used by the permission handlers.

Each rule answers the same question twice:

- ``check`` for a single resource, given its column values ("facts"), and
- ``clause`` as a SQL expression, so list queries are filtered by the very
  same rule instead of a hand-written duplicate.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Type
from sqlalchemy import and_, false, select, true
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from labrecord_backend.permissions.principal import Principal
from labrecord_backend.permissions.query_builders import SubjectScopeQueryBuilder
from labrecord_backend.permissions import relations


class Rule(ABC):

    @abstractmethod
    def check(self, principal: Principal, db: Session, kind: str, facts: Dict[str, Any]) -> bool:
        pass

    @abstractmethod
    def clause(self, principal: Principal, db: Session, entity: Type[Any]) -> ColumnElement:
        pass

    def __repr__(self):
        return self.__class__.__name__


class Anyone(Rule):
    """Any authenticated caller"""

    def check(self, principal, db, kind, facts):
        return principal.user_id is not None

    def clause(self, principal, db, entity):
        return true() if principal.user_id is not None else false()


class IsSelf(Rule):
    """The caller is the principal referenced by ``field`` on the resource"""

    def __init__(self, field: str):
        self.field = field

    def check(self, principal, db, kind, facts):
        value = facts.get(self.field)
        return value is not None and value == principal.user_id

    def clause(self, principal, db, entity):
        return getattr(entity, self.field) == principal.user_id

    def __repr__(self):
        return f"IsSelf({self.field})"


class FacultyForSubject(Rule):
    """The caller holds an assignment edge to the subject owning the resource"""

    def check(self, principal, db, kind, facts):
        subject_id = relations.resolve_subject_id(db, kind, facts)
        return relations.is_faculty_for(db, principal.user_id, subject_id)

    def clause(self, principal, db, entity):
        subjects = SubjectScopeQueryBuilder.faculty_subjects_subquery(principal.user_id)
        return SubjectScopeQueryBuilder.within_subjects(entity, subjects)


class StudentForSubject(Rule):
    """The caller holds an enrollment edge to the subject owning the resource"""

    def check(self, principal, db, kind, facts):
        subject_id = relations.resolve_subject_id(db, kind, facts)
        return relations.is_student_for(db, principal.user_id, subject_id)

    def clause(self, principal, db, entity):
        subjects = SubjectScopeQueryBuilder.student_subjects_subquery(principal.user_id)
        return SubjectScopeQueryBuilder.within_subjects(entity, subjects)


class OwnsParent(Rule):
    """The caller is referenced by ``field`` on the parent resource (one hop up)"""

    def __init__(self, field: str):
        self.field = field

    def check(self, principal, db, kind, facts):
        parent = relations.load_parent(db, kind, facts)
        if parent is None:
            return False
        _, parent_facts = parent
        value = parent_facts.get(self.field)
        return value is not None and value == principal.user_id

    def clause(self, principal, db, entity):
        foreign_key, parent_kind = relations.HIERARCHY[entity.__tablename__]
        parent = relations.MODELS[parent_kind]
        owned = select(parent.id).where(getattr(parent, self.field) == principal.user_id)
        return getattr(entity, foreign_key).in_(owned)

    def __repr__(self):
        return f"OwnsParent({self.field})"


class AllOf(Rule):

    def __init__(self, *rules: Rule):
        self.rules = rules

    def check(self, principal, db, kind, facts):
        return all(rule.check(principal, db, kind, facts) for rule in self.rules)

    def clause(self, principal, db, entity):
        return and_(*(rule.clause(principal, db, entity) for rule in self.rules))

    def __repr__(self):
        return f"AllOf({', '.join(repr(rule) for rule in self.rules)})"
