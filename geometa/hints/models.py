from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .. import config
from .errors import HintValidationError

_WORD_START = re.compile(r"\b\w")


@dataclass(frozen=True)
class Hint:
    """A single crowd-sourced hint as stored in the hints table."""

    id: str
    country: str
    continent: str
    meta_type: str
    description: str
    created_at: str
    image_url: Optional[str] = None

    @property
    def search_text(self) -> str:
        return f"{self.description} {self.country} {self.meta_type}".lower()

    def to_dict(self) -> Dict[str, object]:
        return {
            "id": self.id,
            "country": self.country,
            "continent": self.continent,
            "meta_type": self.meta_type,
            "description": self.description,
            "image_url": self.image_url,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Hint":
        image_url = payload.get("image_url")
        return cls(
            id=str(payload["id"]),
            country=str(payload["country"]),
            continent=str(payload["continent"]),
            meta_type=str(payload["meta_type"]),
            description=str(payload["description"]),
            created_at=str(payload["created_at"]),
            image_url=str(image_url) if image_url else None,
        )


class HintDraft(BaseModel):
    """Fields a contributor supplies when adding a hint."""

    model_config = ConfigDict(str_strip_whitespace=True)

    country: str = Field(..., min_length=1, description="Country the hint applies to")
    meta_type: str = Field(
        ..., min_length=1, description="Category tag, e.g. 'bollards'; new tags are allowed"
    )
    description: str = Field(..., min_length=config.MIN_DESCRIPTION_LENGTH)
    continent: Optional[str] = Field(
        default=None, description="Resolved from existing hints when omitted"
    )
    image_url: Optional[str] = Field(default=None, description="Absolute http(s) URL")

    @field_validator("continent", "image_url", mode="before")
    @classmethod
    def _blank_to_none(cls, value: Any) -> Any:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("image_url")
    @classmethod
    def _check_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return value
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("must be a valid absolute http(s) URL")
        return value

    def to_row(self) -> Dict[str, object]:
        return self.model_dump(exclude_none=True)


def validate_draft(data: Union[HintDraft, Mapping[str, Any]]) -> HintDraft:
    """Coerce ``data`` into a :class:`HintDraft` or raise ``HintValidationError``."""
    if isinstance(data, HintDraft):
        return data
    try:
        return HintDraft.model_validate(dict(data))
    except ValidationError as exc:
        problems = []
        for error in exc.errors():
            field = ".".join(str(part) for part in error.get("loc", ())) or "hint"
            problems.append(f"{field}: {error.get('msg', 'invalid value')}")
        raise HintValidationError(problems) from exc


def format_meta_type(meta_type: str) -> str:
    """Render a meta type tag for display: ``bollard_types`` -> ``Bollard Types``."""
    spaced = (meta_type or "").replace("_", " ")
    return _WORD_START.sub(lambda match: match.group(0).upper(), spaced)
