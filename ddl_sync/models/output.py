"""Generated artifact models."""

from pydantic import BaseModel, Field
from typing import Optional


class GeneratedFile(BaseModel):
    """One generated SQL artifact."""

    filename: str
    content: str
    description: str = ""


class GenerationResult(BaseModel):
    """Outcome of a generator run."""

    success: bool
    files: list[GeneratedFile] = Field(default_factory=list)
    error: Optional[str] = None
    skipped: bool = False
