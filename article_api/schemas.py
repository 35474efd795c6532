from __future__ import annotations

import enum
from dataclasses import dataclass, fields
from datetime import datetime
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from article_api.config import settings


# --- Article input ---

class ArticleCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1)
    content: str = Field(min_length=1)
    excerpt: str | None = None
    slug: str = Field(min_length=1)
    published: bool = False


class ArticleUpdate(BaseModel):
    """
    Partial update body.  Omitted fields are left alone; ``excerpt`` may be
    sent as ``null`` to clear it.  The other fields are not nullable.
    """

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(None, min_length=1)
    content: str | None = Field(None, min_length=1)
    excerpt: str | None = None
    slug: str | None = Field(None, min_length=1)
    published: bool | None = None

    @field_validator("title", "content", "slug", "published", mode="before")
    @classmethod
    def _reject_null(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            raise ValueError(f"{info.field_name} may be omitted but not null")
        return value


# --- Listing parameters ---

class PublishedArticlesParams(BaseModel):
    model_config = ConfigDict(extra="forbid")

    limit: int = Field(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE)
    offset: int = Field(0, ge=0)


class ListArticlesParams(PublishedArticlesParams):
    published: bool | None = None


# --- Article output ---

class ArticleRead(BaseModel):
    id: int
    title: str
    content: str
    excerpt: str | None
    slug: str
    published: bool
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Explicit partial-update request used by the store ---

class _Unset(enum.Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset.UNSET


@dataclass(frozen=True)
class ArticleChanges:
    """
    One slot per updatable column.  Each slot is ``UNSET`` (leave the
    column alone), ``None`` (clear it; only valid for ``excerpt``) or a
    new value.
    """

    title: Union[str, _Unset] = UNSET
    content: Union[str, _Unset] = UNSET
    excerpt: Union[str, None, _Unset] = UNSET
    slug: Union[str, _Unset] = UNSET
    published: Union[bool, _Unset] = UNSET

    def __post_init__(self) -> None:
        for name in ("title", "content", "slug", "published"):
            if getattr(self, name) is None:
                raise ValueError(f"{name} cannot be cleared")

    @classmethod
    def from_update(cls, data: ArticleUpdate) -> "ArticleChanges":
        return cls(**{name: getattr(data, name) for name in data.model_fields_set})

    def provided(self) -> dict[str, Any]:
        """Return ``{column: value}`` for every slot that is not ``UNSET``."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if getattr(self, f.name) is not UNSET
        }

    def __bool__(self) -> bool:
        return bool(self.provided())
