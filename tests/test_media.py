"""Unit tests for VideoHandler and the formatting helpers."""
from __future__ import annotations

import unittest
from pathlib import Path
from typing import Any, Optional
from unittest.mock import MagicMock

from embedvideo.domain.probe import FormatInfo, StreamInfo
from embedvideo.services.ffprobe import FFProbe
from embedvideo.services.media import VideoHandler, format_bitrate, format_size, format_time_period


def _probe(fmt: Optional[FormatInfo], video: Optional[StreamInfo]) -> MagicMock:
    probe: MagicMock = MagicMock(spec=FFProbe)
    probe.file_path = Path("/nonexistent/clip.mp4")
    probe.get_format.return_value = fmt
    probe.get_stream.side_effect = lambda select: video if select == "v:0" else None
    return probe


FULL_HD: StreamInfo = StreamInfo(codec_type="video", codec_name="h264", width=1920, height=1080)
FORMAT: FormatInfo = FormatInfo(duration=125.0, size=1572864, bit_rate=5000000)


class TestFormatting(unittest.TestCase):
    """Duration, size and bitrate text."""

    def test_time_period(self) -> None:
        self.assertEqual(format_time_period(125), "2:05")
        self.assertEqual(format_time_period(3725.4), "1:02:05")
        self.assertEqual(format_time_period(None), "0:00")

    def test_size_and_bitrate(self) -> None:
        self.assertEqual(format_size(512), "512 bytes")
        self.assertEqual(format_size(1536), "1.5 KB")
        self.assertEqual(format_size(1572864), "1.5 MB")
        self.assertEqual(format_bitrate(128000), "128 kbps")
        self.assertEqual(format_bitrate(1500000), "1.5 Mbps")


class TestVideoHandler(unittest.TestCase):
    """Dimensions and descriptions derived from a probe."""

    def test_missing_probe_falls_back_to_640_by_360(self) -> None:
        """Without a video stream the display size resets to 640×360."""
        handler: VideoHandler = VideoHandler(_probe(None, None))
        self.assertEqual(handler.get_image_size(), (0, 0, 0))
        params: dict[str, Any] = handler.normalise_params({"width": None, "height": None})
        self.assertEqual((params["width"], params["height"]), (640, 360))

    def test_smaller_width_keeps_aspect_ratio(self) -> None:
        """A narrower request gets a proportional height."""
        handler: VideoHandler = VideoHandler(_probe(FORMAT, FULL_HD))
        params: dict[str, Any] = handler.normalise_params({"width": 960})
        self.assertEqual((params["width"], params["height"]), (960, 540))

    def test_oversized_request_is_reduced_to_source(self) -> None:
        """Requests larger than the source are clamped to the source size."""
        handler: VideoHandler = VideoHandler(_probe(FORMAT, FULL_HD))
        params: dict[str, Any] = handler.normalise_params({"width": 4000, "height": 3000})
        self.assertEqual((params["width"], params["height"]), (1920, 1080))

    def test_mismatched_ratio_is_corrected(self) -> None:
        """A height that breaks the aspect ratio is recomputed from the width."""
        handler: VideoHandler = VideoHandler(_probe(FORMAT, FULL_HD))
        params: dict[str, Any] = handler.normalise_params({"width": 960, "height": 100})
        self.assertEqual((params["width"], params["height"]), (960, 540))

    def test_square_request_is_allowed(self) -> None:
        """Square embeds are left untouched."""
        handler: VideoHandler = VideoHandler(_probe(FORMAT, FULL_HD))
        self.assertEqual(handler.normalise_params({"width": 500, "height": 500}), {"width": 500, "height": 500})

    def test_descriptions(self) -> None:
        """Descriptions combine duration, size, codec and bitrate."""
        handler: VideoHandler = VideoHandler(_probe(FORMAT, FULL_HD))
        self.assertEqual(handler.get_dimensions_string(), "2:05, 1920 × 1080 pixels")
        self.assertEqual(handler.get_short_desc(), "2:05, 1920 × 1080 pixels, file size: 1.5 MB")
        self.assertEqual(
            handler.get_long_desc(),
            "MP4 video file, h264, length 2:05, 1920 × 1080 pixels, 5 Mbps overall",
        )

    def test_generic_descriptions_without_probe(self) -> None:
        """Without probe data the generic media texts are used."""
        handler: VideoHandler = VideoHandler(_probe(None, None))
        self.assertEqual(handler.get_dimensions_string(), "")
        self.assertEqual(handler.get_short_desc(), "Media file, file size: 0 bytes")
        self.assertEqual(handler.get_long_desc(), "Media file")


if __name__ == "__main__":
    unittest.main()
