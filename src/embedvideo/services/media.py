"""Descriptions and display dimensions for locally stored media files."""
from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from embedvideo.domain.probe import FormatInfo, StreamInfo
from embedvideo.infra.messages import MessageCatalog
from embedvideo.services.ffprobe import FFProbe

FALLBACK_WIDTH: int = 640
FALLBACK_HEIGHT: int = 360


def format_time_period(seconds: Optional[float]) -> str:
    """``m:ss`` below an hour, ``h:mm:ss`` above."""

    total: int = int(round(seconds or 0))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def _scaled(value: float, base: int, units: tuple[str, ...]) -> str:
    index: int = 0
    while value >= base and index < len(units) - 1:
        value /= base
        index += 1
    if index == 0:
        return f"{int(value)} {units[0]}"
    return f"{value:.2f}".rstrip("0").rstrip(".") + f" {units[index]}"


def format_size(size: Optional[int]) -> str:
    return _scaled(float(size or 0), 1024, ("bytes", "KB", "MB", "GB", "TB"))


def format_bitrate(bit_rate: Optional[int]) -> str:
    return _scaled(float(bit_rate or 0), 1000, ("bps", "kbps", "Mbps", "Gbps"))


class VideoHandler:
    """Answers the host's questions about one local video through a probe.

    Notes
    -----
    - One ``FFProbe`` per file; all methods share its cached metadata.
    - When the probe finds no video stream the generic media texts and the
      640×360 fallback size are used.
    """

    def __init__(self, probe: FFProbe, catalog: Optional[MessageCatalog] = None) -> None:
        self.probe: FFProbe = probe
        self.catalog: MessageCatalog = catalog or MessageCatalog()

    @property
    def file_path(self) -> Path:
        return self.probe.file_path

    def get_image_size(self) -> tuple[int, int, int]:
        """Width, height and bit depth of the first video stream, else zeros."""

        stream: Optional[StreamInfo] = self.probe.get_stream("v:0")
        if stream is None:
            return 0, 0, 0
        return stream.width or 0, stream.height or 0, stream.bit_depth

    def normalise_params(self, params: dict[str, Any]) -> dict[str, Any]:
        """Fit requested ``width``/``height`` to the source size and aspect ratio.

        Notes
        -----
        - An unknown source size is treated as 640×360.
        - A square request (``width == height``) is honoured as-is.
        - Requests larger than the source are reduced to the source size.
        - A mismatched aspect ratio is corrected by recomputing the height.
        """

        result: dict[str, Any] = dict(params)
        width, height, _ = self.get_image_size()
        if width == 0 and height == 0:
            width, height = FALLBACK_WIDTH, FALLBACK_HEIGHT

        req_width: Optional[int] = result.get("width")
        req_height: Optional[int] = result.get("height")

        if req_width is not None and req_width > 0 and req_height == req_width:
            return result

        if req_width is not None and 0 < req_width < width:
            result["width"] = int(req_width)
            if req_height is None:
                result["height"] = round(height / width * req_width)
        else:
            result["width"] = width

        new_height: Optional[int] = result.get("height")
        if new_height is not None and 0 < new_height < height:
            result["height"] = int(new_height)
        else:
            result["height"] = height

        if width > 0 and result["width"] > 0 and height / width != result["height"] / result["width"]:
            result["height"] = round(height / width * result["width"])

        return result

    def _file_size(self, fmt: Optional[FormatInfo]) -> int:
        if fmt is not None and fmt.size is not None:
            return fmt.size
        try:
            return self.file_path.stat().st_size
        except OSError:
            return 0

    def get_dimensions_string(self) -> str:
        fmt: Optional[FormatInfo] = self.probe.get_format()
        stream: Optional[StreamInfo] = self.probe.get_stream("v:0")
        if fmt is None or stream is None:
            return ""
        return self.catalog.text(
            "ev_video_short_desc",
            format_time_period(fmt.duration),
            stream.width or 0,
            stream.height or 0,
        )

    def get_short_desc(self) -> str:
        fmt: Optional[FormatInfo] = self.probe.get_format()
        stream: Optional[StreamInfo] = self.probe.get_stream("v:0")
        size: int = self._file_size(fmt)
        if fmt is None or stream is None:
            return self.catalog.text("ev_media_generic_desc_size", format_size(size))
        return self.catalog.text(
            "ev_video_short_desc_size",
            format_time_period(fmt.duration),
            stream.width or 0,
            stream.height or 0,
            format_size(size),
        )

    def get_long_desc(self) -> str:
        fmt: Optional[FormatInfo] = self.probe.get_format()
        stream: Optional[StreamInfo] = self.probe.get_stream("v:0")
        if fmt is None or stream is None:
            return self.catalog.text("ev_media_generic_desc")
        extension: str = self.file_path.suffix.lstrip(".").upper()
        return self.catalog.text(
            "ev_video_long_desc",
            extension,
            stream.codec_name or "unknown",
            format_time_period(fmt.duration),
            stream.width or 0,
            stream.height or 0,
            format_bitrate(fmt.bit_rate),
        )
