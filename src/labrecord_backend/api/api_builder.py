from typing import Annotated, Optional
from fastapi import APIRouter, Depends, FastAPI, Response, status
from sqlalchemy.orm import Session
from labrecord_backend.api.crud import create_db, get_id_db, list_db, update_db, delete_db
from labrecord_backend.database import get_db
from labrecord_backend.interface.base import EntityInterface
from labrecord_backend.permissions.auth import get_current_principal
from labrecord_backend.permissions.principal import Principal


class CrudRouter:
    """Generates list/get/create/update/delete routes for an ``EntityInterface``.

    Only the operations the interface defines a DTO for are registered.
    """

    id_type = "id"

    path: str
    dto: EntityInterface

    def __init__(self, dto, endpoint: Optional[str] = None):
        self.dto = dto
        if endpoint is None:
            self.path = self.dto.endpoint
        else:
            self.path = endpoint

        self.router = APIRouter()

    def create(self):
        def route(permissions: Annotated[Principal, Depends(get_current_principal)], entity: self.dto.create, db: Session = Depends(get_db)) -> self.dto.get:
            return create_db(permissions, db, entity, self.dto.model, self.dto.get)
        return route

    def get(self):
        def route(permissions: Annotated[Principal, Depends(get_current_principal)], id: str, db: Session = Depends(get_db)) -> self.dto.get:
            return get_id_db(permissions, db, id, self.dto)
        return route

    def list(self):
        def route(permissions: Annotated[Principal, Depends(get_current_principal)], response: Response, params: self.dto.query = Depends(), db: Session = Depends(get_db)) -> list[self.dto.list]:
            list_result, total = list_db(permissions, db, params, self.dto)
            response.headers["X-Total-Count"] = str(total)
            return list_result
        return route

    def update(self):
        def route(permissions: Annotated[Principal, Depends(get_current_principal)], id: str, entity: self.dto.update, db: Session = Depends(get_db)) -> self.dto.get:
            return update_db(permissions, db, id, entity, self.dto.model, self.dto.get)
        return route

    def delete(self):
        def route(permissions: Annotated[Principal, Depends(get_current_principal)], id: str, db: Session = Depends(get_db)):
            delete_db(permissions, db, id, self.dto.model)
        return route

    def register_routes(self, app: FastAPI, create: bool = True, update: bool = True, delete: bool = True):

        scope_name = self.path.replace("/","").replace("_"," ")

        if create and self.dto.create is not None:
            self.router.add_api_route("", self.create(), methods=["POST"],
                        status_code=status.HTTP_201_CREATED, name=f"create {scope_name.capitalize()}")
        self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.get(), methods=["GET"],
                    status_code=status.HTTP_200_OK, name=f"get {scope_name.capitalize()}")
        self.router.add_api_route("", self.list(), methods=["GET"],
                    status_code=status.HTTP_200_OK, name=f"list {scope_name.capitalize()}")
        if update and self.dto.update is not None:
            self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.update(), methods=["PATCH"],
                        status_code=status.HTTP_200_OK, name=f"update {scope_name.capitalize()}")
        if delete:
            self.router.add_api_route(f"/{{{CrudRouter.id_type}}}", self.delete(), methods=["DELETE"],
                        status_code=status.HTTP_204_NO_CONTENT, name=f"delete {scope_name.capitalize()}")

        app.include_router(
            self.router,
            prefix=f"/{self.path}",
            tags=[scope_name]
        )

        return self
