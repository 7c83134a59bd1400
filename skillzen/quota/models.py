from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ApiStatus = Literal["online", "offline", "quota-exceeded"]

DEFAULT_QUOTA_TOTAL = 50


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class QuotaInfo(_CamelModel):
    remaining: int = Field(default=DEFAULT_QUOTA_TOTAL, ge=0)
    total: int = Field(default=DEFAULT_QUOTA_TOTAL, ge=0)
    last_updated: int = 0
    api_key_index: int = 0
    exhausted: bool = False


class ApiKeyInfo(_CamelModel):
    key: str
    quota: QuotaInfo
    is_active: bool = False


class QuotaSnapshot(_CamelModel):
    active_key_index: int | None = None
    quota: QuotaInfo | None = None
    status: ApiStatus = "offline"
    has_backup: bool = False
    quota_low: bool = False
    quota_exhausted: bool = False
