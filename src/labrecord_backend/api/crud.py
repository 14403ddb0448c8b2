import logging
from enum import Enum
from typing import Any
from fastapi import HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from sqlalchemy import exc
from labrecord_backend.api.exceptions import (
    BadRequestException,
    ConflictException,
    InternalServerException,
    NotFoundException,
    ValidationException,
)
from labrecord_backend.permissions.core import ResourceRef, authorize, check_permissions
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.interface.base import EntityInterface, ListQuery

logger = logging.getLogger(__name__)


def integrity_error_to_http(e: exc.IntegrityError) -> HTTPException:
    """Translate a constraint violation raised by the datastore.

    Unique violations are conflicts the caller can recover from (e.g. by
    switching to an update); check violations are validation errors; a
    dangling foreign key is indistinguishable from a missing resource.
    """
    error_msg = str(e.orig) if hasattr(e, 'orig') else str(e)
    lowered = error_msg.lower()
    first_line = error_msg.split('\n')[0]

    if 'unique' in lowered or 'duplicate key' in lowered:
        return ConflictException(detail=first_line)
    if 'check constraint' in lowered:
        return ValidationException(detail=first_line)
    if 'foreign key' in lowered:
        return NotFoundException()
    if 'not null' in lowered or 'not-null' in lowered:
        return ValidationException(detail=first_line)
    return BadRequestException(detail=first_line)


def payload_dict(entity: Any, exclude_unset: bool = True) -> dict:
    if isinstance(entity, BaseModel):
        values = entity.model_dump(exclude_unset=exclude_unset)
    else:
        values = dict(entity or {})
    # columns store the plain enum values
    return {key: value.value if isinstance(value, Enum) else value for key, value in values.items()}


def create_db(permissions: Principal, db: Session, entity: BaseModel, db_type: Any, response_type: Any):

    model_dump = payload_dict(entity)

    resource = ResourceRef(kind=db_type.__tablename__, context=model_dump)
    if not authorize(permissions, "create", resource, db):
        raise NotFoundException()

    try:
        db_item = db_type(**model_dump)

        db.add(db_item)
        db.commit()
        db.refresh(db_item)

        return response_type.model_validate(db_item, from_attributes=True)

    except exc.IntegrityError as e:
        db.rollback()
        raise integrity_error_to_http(e)

    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error while creating %s: %s", db_type.__tablename__, e)
        raise InternalServerException()


def get_id_db(permissions: Principal, db: Session, id: str, interface: EntityInterface, scope: str = "get"):

    db_type = interface.model

    query = check_permissions(permissions, db_type, scope, db)

    try:
        item = query.filter(db_type.id == id).first()
    except exc.StatementError as e:
        raise BadRequestException(detail=str(e.orig) if e.orig else str(e))

    if item is None:
        raise NotFoundException(detail=f"{db_type.__name__} with id [{id}] not found")

    return interface.get.model_validate(item, from_attributes=True)


def list_db(permissions: Principal, db: Session, params: ListQuery, interface: EntityInterface):

    db_type = interface.model
    query_func = interface.search

    query = check_permissions(permissions, db_type, "list", db)

    query = query_func(db, query, params)

    total = query.order_by(None).count()

    if params.limit is not None:
        query = query.limit(params.limit)
    if params.skip is not None:
        query = query.offset(params.skip)

    query_result = [interface.list.model_validate(entity, from_attributes=True) for entity in query.all()]

    return query_result, total


def update_db(permissions: Principal, db: Session, id: str, entity: Any, db_type: Any, response_type: Any):

    changes = payload_dict(entity)

    resource = ResourceRef(kind=db_type.__tablename__, id=id, context=changes)
    if not authorize(permissions, "update", resource, db):
        raise NotFoundException()

    db_item = db.get(db_type, id)

    if db_item is None:
        raise NotFoundException()

    try:
        for key, value in changes.items():
            setattr(db_item, key, value)

        db.commit()
        db.refresh(db_item)

        return response_type.model_validate(db_item, from_attributes=True)

    except exc.IntegrityError as e:
        db.rollback()
        raise integrity_error_to_http(e)

    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error while updating %s: %s", db_type.__tablename__, e)
        raise InternalServerException()


def delete_db(permissions: Principal, db: Session, id: str, db_type: Any):

    resource = ResourceRef(kind=db_type.__tablename__, id=id)
    if not authorize(permissions, "delete", resource, db):
        raise NotFoundException(detail=f"{db_type.__name__} not found")

    entity = db.get(db_type, id)

    if entity is None:
        raise NotFoundException(detail=f"{db_type.__name__} not found")

    try:
        db.delete(entity)
        db.commit()
    except exc.IntegrityError as e:
        db.rollback()
        raise integrity_error_to_http(e)
    except exc.SQLAlchemyError as e:
        db.rollback()
        logger.error("Database error while deleting %s: %s", db_type.__tablename__, e)
        raise InternalServerException(detail="An unexpected database error occurred while deleting.")

    return {"ok": True}
