"""Pydantic models for the generation request/response contract."""
from __future__ import annotations
from enum import Enum

from pydantic import BaseModel, field_validator


class GenerationType(str, Enum):
    """Closed set of generation kinds a client may ask for."""
    TEXT = "text"
    IMAGE = "image"


class GenerationRequest(BaseModel):
    prompt: str
    type: GenerationType

    @field_validator("prompt")
    @classmethod
    def _prompt_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("prompt must not be blank")
        return value


class GenerationResponse(BaseModel):
    """Generated content; base64 PNG data when type is image."""
    type: GenerationType
    content: str


class ErrorBody(BaseModel):
    error: str
