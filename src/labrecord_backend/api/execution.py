from typing import Annotated
from fastapi import APIRouter, Depends
from labrecord_backend.interface.execution import ExecutionRequest, ExecutionResult
from labrecord_backend.permissions.auth import get_current_principal
from labrecord_backend.permissions.principal import Principal
from labrecord_backend.services.execution import ExecutionClient, get_execution_client

execution_router = APIRouter()

@execution_router.post("", response_model=ExecutionResult, response_model_by_alias=True)
async def execute_code(request: ExecutionRequest, permissions: Annotated[Principal, Depends(get_current_principal)], client: ExecutionClient = Depends(get_execution_client)):
    return await client.execute(request)
