from abc import ABC
from datetime import datetime
from typing import Optional, Any
from pydantic import BaseModel, Field

class ListQuery(BaseModel):
    skip: Optional[int] = Field(0, ge=0)
    limit: Optional[int] = Field(100, ge=1, le=1000)

class EntityInterface(ABC):
    """DTO bundle for one table. ``None`` operations get no generic route."""

    create: BaseModel = None
    get: BaseModel = None
    list: BaseModel = None
    update: BaseModel = None
    query: BaseModel = None
    search: Any = None
    endpoint: str = None
    model: Any = None

class BaseEntityList(BaseModel):
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")

class BaseEntityGet(BaseEntityList):
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")
