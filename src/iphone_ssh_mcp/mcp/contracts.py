"""Argument models for the MCP tools and the result shape handlers return."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Any, Dict, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, Field, ValidationError

from ..remote.ssh import ExecResult

TimeoutSec = Optional[Annotated[int, Field(ge=1, le=300)]]

ModelT = TypeVar("ModelT", bound=BaseModel)


class InvalidArguments(ValueError):
    """Tool arguments failed validation."""


def parse_args(model: Type[ModelT], args: Dict[str, Any] | None) -> ModelT:
    """Validate ``args`` against ``model``, flattening errors into one message."""

    try:
        return model.model_validate(args or {})
    except ValidationError as exc:
        issues = [
            f"{'.'.join(str(part) for part in error['loc']) or '<root>'}: {error['msg']}"
            for error in exc.errors()
        ]
        raise InvalidArguments(f"Invalid arguments. {'; '.join(issues)}") from exc


class NoArgs(BaseModel):
    pass


class RunCommandArgs(BaseModel):
    command: str = Field(min_length=1)
    timeout_sec: TimeoutSec = None


class RunWriteCommandArgs(BaseModel):
    command: str = Field(min_length=1)
    write_paths: List[Annotated[str, Field(min_length=1)]] = Field(min_length=1)
    timeout_sec: TimeoutSec = None


class ListDirArgs(BaseModel):
    path: str = "/var/mobile"
    show_hidden: bool = True
    max_entries: int = Field(default=200, ge=1, le=2000)
    timeout_sec: TimeoutSec = None


class ReadFileArgs(BaseModel):
    path: str = Field(min_length=1)
    max_bytes: int = Field(default=64_000, ge=1, le=1_000_000)
    encoding: Literal["text", "base64"] = "text"
    timeout_sec: TimeoutSec = None


class WriteFileArgs(BaseModel):
    path: str = Field(min_length=1)
    content: str
    mode: str = Field(default="0644", pattern=r"^[0-7]{3,4}$")
    timeout_sec: TimeoutSec = None


class PullFileArgs(BaseModel):
    remote_path: str = Field(min_length=1)
    local_path: str = Field(min_length=1)
    timeout_sec: TimeoutSec = None


class PushFileArgs(BaseModel):
    local_path: str = Field(min_length=1)
    remote_path: str = Field(min_length=1)
    timeout_sec: TimeoutSec = None


class LogsArgs(BaseModel):
    filter: Optional[str] = None
    lines: int = Field(default=200, ge=1, le=5000)
    minutes: int = Field(default=10, ge=1, le=120)
    timeout_sec: TimeoutSec = None


class CrashLogsArgs(BaseModel):
    app_name: str = Field(min_length=1)
    lines: int = Field(default=120, ge=1, le=2000)
    timeout_sec: TimeoutSec = None


class RespringArgs(BaseModel):
    confirm: bool = False
    timeout_sec: int = Field(default=20, ge=1, le=60)


class TweakRequestArgs(BaseModel):
    endpoint: str = Field(min_length=1)
    method: Literal["GET", "POST", "PUT", "PATCH", "DELETE"] = "GET"
    body: Any = None


class ScreenshotArgs(BaseModel):
    save_path: Optional[str] = None


@dataclass(slots=True)
class ToolResult:
    """What a tool handler hands back to the server.

    ``image`` carries base64 PNG data and is rendered as an image block after
    the text.
    """

    text: str
    is_error: bool = False
    image: Optional[str] = None

    @classmethod
    def from_exec(cls, result: ExecResult, summary: Optional[str] = None) -> "ToolResult":
        """Render an ssh/scp outcome; a non-zero exit is an error result."""

        text = result.format()
        if summary:
            text = f"{summary}\n\n{text}"
        return cls(text, is_error=not result.ok)
