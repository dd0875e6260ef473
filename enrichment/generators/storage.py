"""Local filesystem storage for generated images."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import requests

from .. import logging_manager
from ..config_manager import get_settings
from .capabilities import GeneratedImage

logger = logging_manager.get_logger().getChild("generators.storage")

_DOWNLOAD_TIMEOUT = 60


class LocalImageStorage:
    """Write images into the configured image output directory."""

    def __init__(
        self,
        output_dir: Optional[Path] = None,
        *,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._output_dir = Path(output_dir or get_settings().image_output_dir)
        self._session = session or requests.Session()

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def persist(self, image: GeneratedImage, filename: str) -> str:
        self._output_dir.mkdir(parents=True, exist_ok=True)
        destination = self._output_dir / filename
        if image.data is not None:
            destination.write_bytes(image.data)
        elif image.url:
            response = self._session.get(image.url, timeout=_DOWNLOAD_TIMEOUT)
            response.raise_for_status()
            destination.write_bytes(response.content)
        else:
            raise ValueError("Generated image carries neither data nor a URL")
        logger.info(
            "Stored image %s",
            destination,
            extra={"event": "image.persisted"},
        )
        return str(destination)


__all__ = ["LocalImageStorage"]
