"""
Pydantic models for the sidecar wire documents (request + result).

Wire keys are camelCase; Python attributes are snake_case and mapped through
aliases. Results travel as plain dicts and are parsed into these models only
where a typed view is useful (CLI rendering, tests).
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator


def _str_list(v: Any) -> Optional[List[str]]:
    # Non-list values are dropped so the worker falls back to its defaults
    if not isinstance(v, (list, tuple)):
        return None
    items = [str(x) for x in v]
    return items or None


class RunRequest(BaseModel):
    """One build request; crosses the process boundary exactly once."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    input_dir: str = Field(alias="inputDir")
    output_dir: str = Field(alias="outputDir")
    name: Optional[str] = None
    font_types: Optional[List[str]] = Field(default=None, alias="fontTypes")
    asset_types: Optional[List[str]] = Field(default=None, alias="assetTypes")
    prefix: Optional[str] = None
    tag: Optional[str] = None
    fonts_url: Optional[str] = Field(default=None, alias="fontsUrl")
    config_path: Optional[str] = Field(default=None, alias="configPath")

    @field_validator("input_dir", "output_dir")
    @classmethod
    def required_path(cls, v: str) -> str:
        if not str(v or "").strip():
            raise ValueError("must not be empty")
        return str(v)

    @field_validator("font_types", "asset_types", mode="before")
    @classmethod
    def tag_list(cls, v: Any) -> Optional[List[str]]:
        return _str_list(v)

    @field_validator("name", "prefix", "tag", "fonts_url", "config_path", mode="before")
    @classmethod
    def optional_str(cls, v: Any) -> Optional[str]:
        # Empty values mean "use worker defaults"
        if v is None or v == "":
            return None
        return str(v)

    def to_wire(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_wire())


class WriteResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    write_path: Optional[str] = Field(default=None, alias="writePath")
    bytes: Optional[int] = None


class RunData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    options: Optional[Dict[str, Any]] = None
    write_results: List[WriteResult] = Field(default_factory=list, alias="writeResults")
    codepoints: Optional[Dict[str, int]] = None


class RunSuccess(BaseModel):
    ok: Literal[True] = True
    data: RunData


class RunFailure(BaseModel):
    ok: Literal[False] = False
    error: str
    stderr: Optional[str] = None


RunResult = Union[RunSuccess, RunFailure]

_RESULT_ADAPTER: TypeAdapter[RunResult] = TypeAdapter(
    Union[RunSuccess, RunFailure]
)


def parse_result(raw: Dict[str, Any]) -> RunResult:
    """Parse a wire result dict into ``RunSuccess`` or ``RunFailure``."""
    return _RESULT_ADAPTER.validate_python(raw)


def failure(error: str, stderr: Optional[str] = None) -> Dict[str, Any]:
    """Build a ``Fail`` wire dict."""
    out: Dict[str, Any] = {"ok": False, "error": str(error)}
    if stderr is not None:
        out["stderr"] = stderr
    return out
