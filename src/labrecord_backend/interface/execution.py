from pydantic import BaseModel, ConfigDict, Field, field_validator

# Languages accepted by the editor, mapped to the sandbox runtime and version
LANGUAGE_MAP = {
    "python": ("python", "3.10.0"),
    "javascript": ("javascript", "18.15.0"),
    "java": ("java", "15.0.2"),
    "c": ("c", "10.2.0"),
    "cpp": ("c++", "10.2.0"),
    "c++": ("c++", "10.2.0"),
}


def normalize_language(value: str) -> str:
    """Lower-case ``value`` and reject languages the sandbox is not configured for"""
    language = (value or "").strip().lower()
    if not language:
        raise ValueError("language is required")
    if language not in LANGUAGE_MAP:
        raise ValueError(f"Unsupported language: {value}")
    return language


class ExecutionRequest(BaseModel):
    code: str
    language: str
    stdin: str = ""

    @field_validator('code')
    @classmethod
    def validate_code(cls, v):
        if not v or not v.strip():
            raise ValueError("code is required")
        return v

    @field_validator('language')
    @classmethod
    def validate_language(cls, v):
        return normalize_language(v)

    @field_validator('stdin', mode='before')
    @classmethod
    def none_to_empty(cls, v):
        return v or ""


class ExecutionResult(BaseModel):
    output: str = ""
    stdout: str = ""
    stderr: str = ""
    compile_output: str = Field("", alias="compileOutput")
    compile_error: str = Field("", alias="compileError")
    exit_code: int = Field(-1, alias="exitCode")

    model_config = ConfigDict(populate_by_name=True)
