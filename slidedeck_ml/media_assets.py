"""Media URL handling: asset copying and video embedding."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Callable, Dict, Optional
from urllib.parse import parse_qs, urlparse

from .exceptions import AssetCopyError
from .settings import ASSETS_URL_PREFIX

LOGGER = logging.getLogger(__name__)

AssetCopy = Callable[[str], str]


class AssetCopier:
    """Copy media referenced by relative path next to the generated deck."""

    def __init__(
        self,
        source_dir: Path,
        output_dir: Path,
        *,
        url_prefix: str = ASSETS_URL_PREFIX,
    ) -> None:
        self.source_dir = Path(source_dir)
        self.output_dir = Path(output_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self._copied: Dict[str, str] = {}

    def copy_asset(self, relative_path: str) -> str:
        """Copy ``relative_path`` once and return its output-relative URL."""

        if relative_path in self._copied:
            return self._copied[relative_path]

        source = self.source_dir / relative_path
        destination = self.output_dir / relative_path
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(source, destination)
        except OSError as exc:
            raise AssetCopyError(
                f"Cannot copy asset '{relative_path}' from {self.source_dir}",
                source=str(source),
                original_error=exc,
            ) from exc

        url = f"{self.url_prefix}/{relative_path}"
        self._copied[relative_path] = url
        LOGGER.debug("Copied asset %s -> %s", source, destination)
        return url

    __call__ = copy_asset

    @property
    def copied(self) -> Dict[str, str]:
        return dict(self._copied)


def is_absolute_url(url: str) -> bool:
    return url.startswith("http://") or url.startswith("https://")


def media_src(url: str, copy_asset: Optional[AssetCopy]) -> str:
    """Return the URL the viewer should load for ``url``."""

    if is_absolute_url(url) or copy_asset is None:
        return url
    return copy_asset(url)


def youtube_video_id(url: str) -> Optional[str]:
    """Extract the video id of a YouTube watch or short link."""

    parsed = urlparse(url)
    host = parsed.netloc.lower()
    if host.endswith("youtu.be"):
        video_id = parsed.path.rstrip("/").rsplit("/", 1)[-1]
        return video_id or None
    if host.endswith("youtube.com") and parsed.path.startswith("/watch"):
        values = parse_qs(parsed.query).get("v")
        return values[0] if values else None
    return None


def render_video(src: str, class_name: str, extra_attrs: str = "") -> str:
    video_id = youtube_video_id(src)
    if video_id:
        return (
            f'<iframe src="https://www.youtube.com/embed/{video_id}" class="{class_name}"'
            f"{extra_attrs} frameborder=\"0\" allowfullscreen></iframe>"
        )
    return f'<video src="{src}" class="{class_name}"{extra_attrs} controls></video>'
