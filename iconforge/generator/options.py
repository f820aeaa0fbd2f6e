"""
Generator options: defaults, supported font/asset types, and normalization.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_NAME = "icons"
DEFAULT_PREFIX = "icon"
DEFAULT_TAG = "i"
DEFAULT_START_CODEPOINT = 0xF101


class FontType(str, Enum):
    TTF = "ttf"
    WOFF = "woff"
    WOFF2 = "woff2"


class AssetType(str, Enum):
    CSS = "css"
    SCSS = "scss"
    HTML = "html"
    JSON = "json"
    TS = "ts"


DEFAULT_FONT_TYPES: List[FontType] = [FontType.WOFF2, FontType.WOFF]
DEFAULT_ASSET_TYPES: List[AssetType] = [AssetType.CSS, AssetType.HTML, AssetType.JSON, AssetType.TS]


def _enum_list(enum_cls, values: Any, what: str) -> List[Any]:
    out = []
    for v in values:
        try:
            item = enum_cls(str(v).lower())
        except ValueError:
            supported = ", ".join(e.value for e in enum_cls)
            raise ValueError(f"Unsupported {what}: {v} (supported: {supported})")
        if item not in out:
            out.append(item)
    return out


class GeneratorOptions(BaseModel):
    """Normalized build options; unknown keys (e.g. configPath) are ignored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    input_dir: Path = Field(alias="inputDir")
    output_dir: Path = Field(alias="outputDir")
    name: str = DEFAULT_NAME
    font_types: List[FontType] = Field(default_factory=lambda: list(DEFAULT_FONT_TYPES), alias="fontTypes")
    asset_types: List[AssetType] = Field(default_factory=lambda: list(DEFAULT_ASSET_TYPES), alias="assetTypes")
    prefix: str = DEFAULT_PREFIX
    tag: str = DEFAULT_TAG
    fonts_url: Optional[str] = Field(default=None, alias="fontsUrl")
    codepoints: Dict[str, int] = Field(default_factory=dict)
    font_height: int = Field(default=1000, alias="fontHeight", gt=0)
    descent: int = 0
    start_codepoint: int = Field(default=DEFAULT_START_CODEPOINT, alias="startCodepoint", ge=0, le=0x10FFFF)

    @field_validator("input_dir", "output_dir", mode="before")
    @classmethod
    def abs_path(cls, v: Any) -> Path:
        if v is None or str(v).strip() == "":
            raise ValueError("path is required")
        return Path(str(v)).resolve()

    @field_validator("font_types", mode="before")
    @classmethod
    def font_types_valid(cls, v: Any) -> List[FontType]:
        if not v:
            return list(DEFAULT_FONT_TYPES)
        return _enum_list(FontType, v, "font type")

    @field_validator("asset_types", mode="before")
    @classmethod
    def asset_types_valid(cls, v: Any) -> List[AssetType]:
        if v is None:
            return list(DEFAULT_ASSET_TYPES)
        return _enum_list(AssetType, v, "asset type")

    @field_validator("name", "prefix", "tag", mode="before")
    @classmethod
    def nonempty(cls, v: Any, info) -> str:
        if v is None or str(v).strip() == "":
            return {"name": DEFAULT_NAME, "prefix": DEFAULT_PREFIX, "tag": DEFAULT_TAG}[info.field_name]
        return str(v)

    @field_validator("codepoints", mode="before")
    @classmethod
    def codepoints_valid(cls, v: Any) -> Dict[str, int]:
        if not v:
            return {}
        if not isinstance(v, dict):
            raise ValueError("codepoints must be a mapping of glyph name to integer")
        out: Dict[str, int] = {}
        for k, cp in v.items():
            if isinstance(cp, str):
                cp = int(cp, 16) if cp.lower().startswith("0x") else int(cp)
            if isinstance(cp, bool) or not isinstance(cp, int) or not 0 <= cp <= 0x10FFFF:
                raise ValueError(f"invalid codepoint for {k}: {cp!r}")
            out[str(k)] = cp
        return out

    def to_wire(self) -> Dict[str, Any]:
        """JSON-safe dict with camelCase keys, echoed back in the run result."""
        data = self.model_dump(by_alias=True, mode="json")
        return data
