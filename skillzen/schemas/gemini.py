from __future__ import annotations

import base64
import binascii

from pydantic import BaseModel, ConfigDict, Field, field_validator


class GeminiRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    prompt: str = Field(min_length=1, max_length=100000)
    audio: str | None = Field(default=None, description="Base64-encoded audio/webm clip to transcribe.")
    model_id: str | None = Field(default=None, alias="modelId", max_length=100)

    @field_validator("audio")
    @classmethod
    def _validate_audio(cls, value: str | None) -> str | None:
        if not value:
            return None
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("audio must be base64-encoded") from exc
        return value


class QuotaResetRequest(BaseModel):
    total: int = Field(default=50, ge=0, le=100000)
