from __future__ import annotations

from pydantic import Field

from pkb.core.models.base import AppBaseModel


class TagCreate(AppBaseModel):
    name: str = Field(min_length=1, max_length=100)


class TagRead(AppBaseModel):
    id: int
    name: str
