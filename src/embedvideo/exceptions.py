"""User-facing embed failures.

Each error carries a message key and arguments; the resolver turns them into
localized error markup instead of letting them reach the host pipeline.
"""
from __future__ import annotations


class EmbedError(Exception):
    """Base class for failures caused by the author's input."""

    message_key: str = "embedvideo-error"

    def __init__(self, *args: str):
        self.args_for_message = tuple(args)
        super().__init__(f"{self.message_key}: {', '.join(args)}" if args else self.message_key)


class MissingParametersError(EmbedError):
    """Raised when the service name or the identifier is absent."""

    message_key = "embedvideo-missing-params"


class UnknownServiceError(EmbedError):
    """Raised when the service has no (enabled) registry entry."""

    message_key = "embedvideo-unrecognized-service"

    def __init__(self, service: str):
        self.service = service
        super().__init__(service)


class InvalidWidthError(EmbedError):
    """Raised when the width is non-numeric or outside the configured bounds."""

    message_key = "embedvideo-illegal-width"

    def __init__(self, width: str):
        self.width = width
        super().__init__(width)


class InvalidAlignmentError(EmbedError):
    """Raised when the alignment is not one of left, right, center or auto."""

    message_key = "embedvideo-illegal-alignment"

    def __init__(self, align: str):
        self.align = align
        super().__init__(align)


class InvalidIdentifierError(EmbedError):
    """Raised when the identifier is empty after escaping."""

    message_key = "embedvideo-bad-id"

    def __init__(self, video_id: str, service: str):
        self.video_id = video_id
        self.service = service
        super().__init__(video_id, service)


class InvalidServiceIdentifierError(EmbedError):
    """Raised when a structured, service-specific identifier cannot be parsed."""

    message_key = "embedvideo-illegal-service-id"

    def __init__(self, service: str):
        self.service = service
        super().__init__(service)


class UnresolvedPlaybackUrlError(EmbedError):
    """Raised when a service needs a playback URL lookup and it came back empty."""

    message_key = "embedvideo-unresolved-url"

    def __init__(self, service: str, video_id: str):
        self.service = service
        self.video_id = video_id
        super().__init__(service, video_id)
