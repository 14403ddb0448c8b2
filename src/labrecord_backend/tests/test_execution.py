import asyncio
import json
import httpx
import pytest
from pydantic import ValidationError

from labrecord_backend.api.exceptions import UpstreamException
from labrecord_backend.interface.execution import ExecutionRequest
from labrecord_backend.services.execution import ExecutionClient

SANDBOX_URL = "http://sandbox.test/api/v2/execute"


def client_for(handler):
    return ExecutionClient(url=SANDBOX_URL, timeout=5, transport=httpx.MockTransport(handler))


def run(client, **request):
    return asyncio.run(client.execute(ExecutionRequest(**request)))


class TestExecutionRequest:

    def test_language_is_case_insensitive(self):
        assert ExecutionRequest(code="x", language="JavaScript").language == "javascript"

    def test_stdin_defaults_to_empty(self):
        assert ExecutionRequest(code="x", language="c", stdin=None).stdin == ""

    @pytest.mark.parametrize("payload", [
        {"language": "python"},
        {"code": "print(1)"},
        {"code": "", "language": "python"},
        {"code": "print(1)", "language": "brainfuck"},
    ])
    def test_invalid_requests(self, payload):
        with pytest.raises(ValidationError):
            ExecutionRequest(**payload)


class TestExecutionClient:

    def test_success(self):
        seen = {}

        def handler(request: httpx.Request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={
                "run": {"stdout": "hi\n", "stderr": "", "output": "hi\n", "code": 0},
                "compile": {"output": "", "stderr": ""},
            })

        result = run(client_for(handler), code="print('hi')", language="python", stdin="abc")

        assert result.stdout == "hi\n"
        assert result.output == "hi\n"
        assert result.exit_code == 0
        assert seen["language"] == "python"
        assert seen["version"] == "3.10.0"
        assert seen["stdin"] == "abc"
        assert seen["files"] == [{"name": "main", "content": "print('hi')"}]
        assert seen["run_timeout"] == 10000
        assert seen["compile_timeout"] == 10000

    def test_java_source_is_named_main_java(self):
        seen = {}

        def handler(request: httpx.Request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"run": {"code": 0}})

        run(client_for(handler), code="class Main {}", language="java")

        assert seen["files"][0]["name"] == "Main.java"

    def test_cpp_alias(self):
        seen = {}

        def handler(request: httpx.Request):
            seen.update(json.loads(request.content))
            return httpx.Response(200, json={"run": {"code": 0}})

        run(client_for(handler), code="int main(){}", language="cpp")

        assert (seen["language"], seen["version"]) == ("c++", "10.2.0")

    def test_compile_failure_is_reported(self):
        def handler(request):
            return httpx.Response(200, json={
                "compile": {"output": "error: expected ';'", "stderr": "error: expected ';'", "code": 1},
            })

        result = run(client_for(handler), code="int main(){return 0}", language="c")

        assert result.compile_error == "error: expected ';'"
        assert result.exit_code == -1
        assert result.model_dump(by_alias=True)["compileError"] == "error: expected ';'"

    @pytest.mark.parametrize("handler", [
        lambda request: httpx.Response(503, text="maintenance"),
        lambda request: httpx.Response(200, text="<html>not json</html>"),
        lambda request: httpx.Response(200, json=["unexpected"]),
    ])
    def test_bad_upstream_responses(self, handler):
        with pytest.raises(UpstreamException):
            run(client_for(handler), code="print(1)", language="python")

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(UpstreamException) as info:
            run(client_for(handler), code="print(1)", language="python")
        assert info.value.status_code == 502

    def test_unreachable(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UpstreamException):
            run(client_for(handler), code="print(1)", language="python")
