"""
Client for the remote code execution sandbox (piston compatible API).

The sandbox is an external collaborator: this module only shapes the request
and normalizes the response. Failures are reported as ``UpstreamException``
and never retried.
"""

import logging
from typing import Any, Dict, Optional
import httpx

from labrecord_backend.api.exceptions import UpstreamException
from labrecord_backend.interface.execution import LANGUAGE_MAP, ExecutionRequest, ExecutionResult
from labrecord_backend.settings import settings

logger = logging.getLogger(__name__)


def source_file_name(language: str) -> str:
    # Java requires the public class to live in a file of the same name
    return "Main.java" if language == "java" else "main"


class ExecutionClient:

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url or settings.EXECUTION_API_URL
        self.timeout = timeout if timeout is not None else settings.EXECUTION_HTTP_TIMEOUT
        self.transport = transport

    def build_payload(self, request: ExecutionRequest) -> Dict[str, Any]:
        runtime, version = LANGUAGE_MAP[request.language]
        return {
            "language": runtime,
            "version": version,
            "files": [{"name": source_file_name(request.language), "content": request.code}],
            "stdin": request.stdin or "",
            "run_timeout": settings.EXECUTION_RUN_TIMEOUT_MS,
            "compile_timeout": settings.EXECUTION_COMPILE_TIMEOUT_MS,
        }

    @staticmethod
    def parse_result(body: Dict[str, Any]) -> ExecutionResult:
        run = body.get("run") or {}
        compile_stage = body.get("compile") or {}

        exit_code = run.get("code")

        return ExecutionResult(
            output=run.get("output") or "",
            stdout=run.get("stdout") or "",
            stderr=run.get("stderr") or "",
            compile_output=compile_stage.get("output") or "",
            compile_error=compile_stage.get("stderr") or "",
            exit_code=exit_code if isinstance(exit_code, int) else -1,
        )

    async def execute(self, request: ExecutionRequest) -> ExecutionResult:
        payload = self.build_payload(request)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(self.url, json=payload)
                response.raise_for_status()
                body = response.json()

        except httpx.TimeoutException as e:
            logger.warning("Execution sandbox timed out: %s", e)
            raise UpstreamException(detail="Execution service timed out")
        except httpx.HTTPStatusError as e:
            logger.warning("Execution sandbox returned %s", e.response.status_code)
            raise UpstreamException(detail=f"Execution service returned {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning("Execution sandbox unreachable: %s", e)
            raise UpstreamException(detail="Execution service unavailable")
        except ValueError:
            logger.warning("Execution sandbox returned a non JSON body")
            raise UpstreamException(detail="Execution service returned an invalid response")

        if not isinstance(body, dict):
            raise UpstreamException(detail="Execution service returned an invalid response")

        return self.parse_result(body)


def get_execution_client() -> ExecutionClient:
    return ExecutionClient()
