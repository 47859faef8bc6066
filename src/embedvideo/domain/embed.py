"""Domain models for embed requests and their normalized form.

These models define the payloads of the embed API and the value handed from
the validator to the markup generator.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EmbedRequest(BaseModel):
    """One authoring call, in the primary parameter order."""

    service: Optional[str] = Field(default=None, description="Service name, e.g. youtube")
    id: Optional[str] = Field(default=None, description="Service-specific video identifier")
    width: Optional[str] = Field(default=None, description="Raw width; blank or * uses the default")
    align: Optional[str] = Field(default=None, description="left, right, center or auto")
    description: Optional[str] = Field(default=None, description="Caption shown with aligned embeds")

    @field_validator("width", mode="before")
    @classmethod
    def width_as_text(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ParserFunctionCall(BaseModel):
    """Positional arguments for a named parser function (``ev`` or ``evp``)."""

    args: list[Optional[str]] = Field(default_factory=list, description="Positional arguments")


class ResolvedEmbed(BaseModel):
    """Validated parameters; every field is concrete by the time markup is built."""

    model_config = ConfigDict(frozen=True)

    id: str
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    alignment_class: Optional[str] = None
    description_markup: str = ""

    @property
    def aligned(self) -> bool:
        return self.alignment_class is not None


class EmbedResponse(BaseModel):
    """Rendered fragment plus the flags telling the host not to touch it."""

    html: str = Field(description="Embed markup or an inline error block")
    noparse: bool = Field(default=True, description="Host must not re-parse the fragment")
    isHTML: bool = Field(default=True, description="Fragment is raw markup")
