from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GrammarCheckRequest(BaseModel):
    text: str = Field(min_length=1, max_length=50000)
    language: str | None = Field(default=None, max_length=20)


class CompileRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str = Field(min_length=1, max_length=100000)
    language: str = Field(min_length=1, max_length=30)
    input: str = ""
    expected_output: str | None = Field(default=None, alias="expectedOutput")
