"""Filesystem helpers for locating local media files safely."""
from __future__ import annotations

from pathlib import Path

from embedvideo.core.config import Settings


def resolve_media_path(path_str: str, settings: Settings) -> Path:
    """Resolve and validate the path of a media file to probe.

    Parameters
    ----------
    path_str: str
        File path, absolute or relative to ``settings.media_base_dir``.
    settings: Settings
        Application settings providing the media base directory.

    Returns
    -------
    Path
        The resolved file path.

    Notes
    -----
    - Sandboxes reads under ``settings.media_base_dir`` via ``Path.relative_to`` to
      prevent escaping the approved area (e.g., ".." traversal or absolute paths).
    - Expands user input with ``expanduser()`` and ``resolve()`` before checks.

    Raises
    ------
    ValueError
        If the path is empty or outside the media base directory.
    FileNotFoundError
        If the path does not name an existing file.
    """

    if not path_str or not path_str.strip():
        raise ValueError("Media path is required")

    base: Path = settings.media_base_dir.expanduser().resolve()
    candidate: Path = Path(path_str.strip()).expanduser()
    if not candidate.is_absolute():
        candidate = base / candidate
    target: Path = candidate.resolve()

    try:
        target.relative_to(base)
    except ValueError as ex:
        raise ValueError("Media path is outside the media base directory") from ex

    if not target.is_file():
        raise FileNotFoundError(f"Media file not found: {path_str}")
    return target
