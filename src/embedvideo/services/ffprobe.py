"""Probe service running ffprobe against local media files."""
from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Optional

from pydantic import ValidationError

from embedvideo.domain.probe import FormatInfo, MediaMetadata, ProbeStatus, StreamInfo, StreamKind

logger = logging.getLogger(__name__)

_SELECTOR_KINDS: dict[str, StreamKind] = {
    "v": StreamKind.VIDEO,
    "a": StreamKind.AUDIO,
    "s": StreamKind.SUBTITLE,
    "d": StreamKind.DATA,
    "t": StreamKind.ATTACHMENT,
    "i": StreamKind.ANY,
}
_SELECTOR_KINDS.update({kind.value: kind for kind in StreamKind})


def parse_selector(select: str) -> tuple[StreamKind, int]:
    """Split a ``kind:ordinal`` selector such as ``"v:0"`` or ``"audio:1"``.

    Raises
    ------
    ValueError
        If the kind is unknown or the ordinal is not a non-negative integer.
    """

    kind_str, sep, ordinal_str = select.partition(":")
    kind: Optional[StreamKind] = _SELECTOR_KINDS.get(kind_str.strip().lower())
    if not sep or kind is None:
        raise ValueError(f"Invalid stream selector: {select!r}")
    try:
        ordinal: int = int(ordinal_str)
    except ValueError as ex:
        raise ValueError(f"Invalid stream selector: {select!r}") from ex
    if ordinal < 0:
        raise ValueError(f"Invalid stream selector: {select!r}")
    return kind, ordinal


def build_command(ffprobe_location: Path, file_path: Path) -> list[str]:
    return [
        str(ffprobe_location),
        "-v",
        "quiet",
        "-print_format",
        "json",
        "-show_format",
        "-show_streams",
        str(file_path),
    ]


class FFProbe:
    """Lazily probes one file, at most once per instance.

    Notes
    -----
    - The first call to ``get_metadata``, ``get_format`` or ``get_stream`` runs
      ffprobe; later calls reuse the cached ``MediaMetadata``.
    - Failures never raise: a missing executable or unusable output leaves an
      empty metadata record whose ``status`` says why.
    """

    def __init__(self, file_path: Path, ffprobe_location: Path, timeout: float = 30.0) -> None:
        self.file_path: Path = file_path
        self.ffprobe_location: Path = ffprobe_location
        self.timeout: float = timeout
        self._metadata: Optional[MediaMetadata] = None

    @property
    def status(self) -> ProbeStatus:
        return self._metadata.status if self._metadata is not None else ProbeStatus.UNPROBED

    def get_metadata(self) -> MediaMetadata:
        if self._metadata is None:
            self._metadata = self._invoke()
        return self._metadata

    def get_format(self) -> Optional[FormatInfo]:
        return self.get_metadata().format

    def get_stream(self, select: str) -> Optional[StreamInfo]:
        """Return a stream using ffmpeg's selection style.

        Examples: ``"v:0"`` first video stream, ``"a:1"`` second audio stream,
        ``"i:0"`` first stream of any kind, ``"s:2"`` third subtitle,
        ``"d:0"`` first data stream, ``"t:1"`` second attachment.
        """

        kind, ordinal = parse_selector(select)
        seen: int = 0
        for stream in self.get_metadata().streams:
            if kind is not StreamKind.ANY and stream.codec_type != kind.value:
                continue
            if seen == ordinal:
                return stream
            seen += 1
        return None

    def _invoke(self) -> MediaMetadata:
        if not self.ffprobe_location.is_file():
            logger.warning("ffprobe not found at %s", self.ffprobe_location)
            return MediaMetadata(status=ProbeStatus.MISSING_TOOL)

        command: list[str] = build_command(self.ffprobe_location, self.file_path)
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired:
            logger.warning("ffprobe timed out after %ss on %s", self.timeout, self.file_path)
            return MediaMetadata(status=ProbeStatus.TIMED_OUT)
        except (OSError, subprocess.SubprocessError) as ex:
            logger.warning("ffprobe could not be run on %s: %s", self.file_path, ex)
            return MediaMetadata(status=ProbeStatus.MISSING_TOOL)

        # Tags are passed through as raw bytes and need not be UTF-8.
        output: str = completed.stdout.decode("utf-8", errors="replace")
        return parse_probe_output(output, self.file_path)


def parse_probe_output(output: str, file_path: Optional[Path] = None) -> MediaMetadata:
    """Model ffprobe's JSON output; unusable output yields empty metadata."""

    try:
        raw: Any = json.loads(output)
    except (json.JSONDecodeError, TypeError) as ex:
        logger.warning("ffprobe output for %s is not JSON: %s", file_path, ex)
        return MediaMetadata(status=ProbeStatus.PARSE_FAILURE)
    if not isinstance(raw, dict):
        logger.warning("ffprobe output for %s is not a JSON object", file_path)
        return MediaMetadata(status=ProbeStatus.PARSE_FAILURE)

    raw_format: Any = raw.get("format")
    raw_streams: Any = raw.get("streams", [])
    if (raw_format is not None and not isinstance(raw_format, dict)) or not isinstance(raw_streams, list):
        logger.warning("ffprobe output for %s has an unexpected shape", file_path)
        return MediaMetadata(status=ProbeStatus.PARSE_FAILURE)

    try:
        fmt: Optional[FormatInfo] = FormatInfo.model_validate(raw_format) if raw_format is not None else None
        streams: list[StreamInfo] = [StreamInfo.model_validate(s) for s in raw_streams]
    except ValidationError as ex:
        logger.warning("ffprobe output for %s failed validation: %s", file_path, ex)
        return MediaMetadata(status=ProbeStatus.PARSE_FAILURE)

    return MediaMetadata(status=ProbeStatus.OK, format=fmt, streams=streams)
