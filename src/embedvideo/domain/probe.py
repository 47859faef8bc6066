"""Domain models for ffprobe metadata of local media files.

``FormatInfo`` and ``StreamInfo`` mirror the ``format`` and ``streams``
sections of ``ffprobe -print_format json`` output. Unknown keys are kept.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _lenient_float(value: Any) -> Optional[float]:
    """ffprobe reports numbers as strings and uses ``"N/A"`` for unknowns."""

    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _lenient_int(value: Any) -> Optional[int]:
    number: Optional[float] = _lenient_float(value)
    return int(number) if number is not None else None


class ProbeStatus(str, Enum):
    """Lifecycle of a probe.

    Notes
    -----
    - ``UNPROBED`` until the first metadata access.
    - ``MISSING_TOOL``, ``TIMED_OUT`` and ``PARSE_FAILURE`` leave the metadata empty.
    """

    UNPROBED = "unprobed"
    OK = "ok"
    MISSING_TOOL = "missing_tool"
    TIMED_OUT = "timed_out"
    PARSE_FAILURE = "parse_failure"


class StreamKind(str, Enum):
    """Codec types reported by ffprobe, plus ``ANY`` for selectors."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"
    DATA = "data"
    ATTACHMENT = "attachment"
    ANY = "any"


class FormatInfo(BaseModel):
    """Container-level attributes."""

    model_config = ConfigDict(extra="allow")

    filename: Optional[str] = None
    format_name: Optional[str] = None
    format_long_name: Optional[str] = None
    nb_streams: Optional[int] = None
    duration: Optional[float] = None
    size: Optional[int] = None
    bit_rate: Optional[int] = None

    @field_validator("size", "bit_rate", "nb_streams", mode="before")
    @classmethod
    def coerce_ints(cls, value: Any) -> Optional[int]:
        return _lenient_int(value)

    @field_validator("duration", mode="before")
    @classmethod
    def coerce_floats(cls, value: Any) -> Optional[float]:
        return _lenient_float(value)


class StreamInfo(BaseModel):
    """A single stream descriptor."""

    model_config = ConfigDict(extra="allow")

    index: Optional[int] = None
    codec_type: Optional[str] = None
    codec_name: Optional[str] = None
    codec_long_name: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    bits_per_raw_sample: Optional[int] = None
    duration: Optional[float] = None
    bit_rate: Optional[int] = None
    sample_rate: Optional[int] = None
    channels: Optional[int] = None

    @field_validator(
        "width", "height", "bits_per_raw_sample", "bit_rate", "sample_rate", "channels", mode="before"
    )
    @classmethod
    def coerce_ints(cls, value: Any) -> Optional[int]:
        return _lenient_int(value)

    @field_validator("duration", mode="before")
    @classmethod
    def coerce_floats(cls, value: Any) -> Optional[float]:
        return _lenient_float(value)

    @property
    def bit_depth(self) -> int:
        return self.bits_per_raw_sample or 0


class MediaMetadata(BaseModel):
    """Everything one probe learned about a file; empty when the probe failed."""

    status: ProbeStatus = ProbeStatus.UNPROBED
    format: Optional[FormatInfo] = None
    streams: list[StreamInfo] = Field(default_factory=list)


class MediaProbeRequest(BaseModel):
    """Request payload to probe a local media file."""

    path: str = Field(description="Media file path, relative to or inside the media base directory")
    width: Optional[int] = Field(default=None, description="Requested display width")
    height: Optional[int] = Field(default=None, description="Requested display height")


class MediaProbeResponse(BaseModel):
    """Probe result plus the text and dimensions derived from it."""

    status: ProbeStatus
    format: Optional[FormatInfo] = None
    streams: list[StreamInfo] = Field(default_factory=list)
    width: int = Field(description="Display width after normalization")
    height: int = Field(description="Display height after normalization")
    dimensions: str = Field(description="Duration and pixel size summary")
    shortDesc: str = Field(description="Short description for search results")
    longDesc: str = Field(description="Long description for the file page")
