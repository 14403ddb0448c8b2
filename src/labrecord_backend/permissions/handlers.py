import logging
from typing import Any, Dict, List, Optional, Type
from sqlalchemy import false, or_
from sqlalchemy.orm import Session, Query
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.permissions.relations import row_facts
from labrecord_backend.permissions.rules import Rule
from labrecord_backend.permissions import relations

logger = logging.getLogger(__name__)

# Storage-level verbs mapped onto the API verbs used by the handlers
ACTION_ALIASES = {
    "select": "get",
    "insert": "create",
}

# Reading a single item and listing share the same rules
READ_ACTIONS = ("get", "list")


def normalize_action(action: str) -> str:
    action = ACTION_ALIASES.get(action, action)
    return "get" if action in READ_ACTIONS else action


class PermissionHandler:
    """Base class for entity-specific permission handlers.

    Subclasses declare ``RULES``: a mapping from action to the rules of which at
    least one must hold. Actions missing from the table are denied to everyone
    except admins, who pass every check on every existing resource.
    """

    RULES: Dict[str, List[Rule]] = {}

    def __init__(self, entity: Type[Any]):
        self.entity = entity
        self.resource_name = entity.__tablename__

    def check_admin(self, principal: Principal, db: Session) -> bool:
        """Check if principal has admin privileges"""
        return relations.is_admin(db, principal.user_id)

    def rules_for(self, action: str) -> List[Rule]:
        return self.RULES.get(normalize_action(action), [])

    def load_facts(self, db: Session, resource_id: Optional[str]) -> Optional[Dict[str, Any]]:
        item = db.get(self.entity, resource_id)
        if item is None:
            return None
        return row_facts(item)

    def evaluate(self, principal: Principal, action: str, db: Session, facts: Dict[str, Any]) -> bool:
        return any(rule.check(principal, db, self.resource_name, facts) for rule in self.rules_for(action))

    def can_perform_action(self, principal: Principal, action: str, db: Session, resource_id: Optional[str] = None, context: Optional[Dict[str, Any]] = None) -> bool:
        """Check if principal can perform an action on a resource.

        Args:
            principal: Current principal
            action: Action to perform (get, list, create, update, delete or select/insert)
            db: Session used for the relation lookups
            resource_id: Identifier of an existing resource; omitted for creation
            context: Column values of the candidate row for create, or the new values for update
        """
        if resource_id is None:
            if self.check_admin(principal, db):
                return True
            # Creation is judged on the candidate row alone
            return self.evaluate(principal, action, db, dict(context or {}))

        facts = self.load_facts(db, resource_id)
        if facts is None:
            return False

        if self.check_admin(principal, db):
            return True

        if not self.evaluate(principal, action, db, facts):
            return False

        if context:
            # Updates must also keep the row inside the caller's reach afterwards
            return self.evaluate(principal, action, db, {**facts, **context})

        return True

    def build_query(self, principal: Principal, action: str, db: Session) -> Query:
        """Build a query restricted to the rows the principal may act on"""
        if self.check_admin(principal, db):
            return db.query(self.entity)

        rules = self.rules_for(action)
        if not rules:
            return db.query(self.entity).filter(false())
        return db.query(self.entity).filter(or_(*(rule.clause(principal, db, self.entity) for rule in rules)))


class PermissionRegistry:
    """Registry for managing entity permission handlers"""

    _instance = None
    _handlers: Dict[Type[Any], PermissionHandler] = {}

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def register(self, entity: Type[Any], handler: PermissionHandler):
        """Register a permission handler for an entity"""
        self._handlers[entity] = handler

    def get_handler(self, entity: Type[Any]) -> Optional[PermissionHandler]:
        """Get the permission handler for an entity"""
        return self._handlers.get(entity)

    def get_handler_by_name(self, resource_name: str) -> Optional[PermissionHandler]:
        for handler in self._handlers.values():
            if handler.resource_name == resource_name:
                return handler
        return None

    def check_permissions(self, principal: Principal, entity: Type[Any], action: str, db: Session) -> Query:
        """Check permissions and return filtered query"""
        handler = self.get_handler(entity)
        if not handler:
            # Unregistered entities are invisible
            logger.debug("No permission handler for %s", entity.__tablename__)
            return db.query(entity).filter(false())

        return handler.build_query(principal, action, db)


# Global registry instance
permission_registry = PermissionRegistry()
