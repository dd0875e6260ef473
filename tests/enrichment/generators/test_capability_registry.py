from __future__ import annotations

import pytest

from enrichment.config_manager import configure_settings
from enrichment.generators.capabilities import GeneratedImage, ImageStyle
from enrichment.generators.registry import Capabilities, load_capabilities
from enrichment.generators.storage import LocalImageStorage
from enrichment.generators.voices import resolve_voice


def test_missing_factory_yields_empty_capabilities() -> None:
    capabilities = load_capabilities()

    assert capabilities == Capabilities()
    assert not capabilities.supports_images


def test_factory_is_loaded_from_settings() -> None:
    configure_settings(capabilities_factory="enrichment.generators.registry:Capabilities")

    assert isinstance(load_capabilities(), Capabilities)


@pytest.mark.parametrize(
    ("path", "error"),
    [
        ("builtins:dict", TypeError),
        ("enrichment.generators.registry", ValueError),
        ("enrichment.generators.registry:missing", ValueError),
    ],
)
def test_bad_factories_are_rejected(path, error) -> None:
    with pytest.raises(error):
        load_capabilities(path)


def test_capabilities_report_image_support(mnemonic_generator, image_generator) -> None:
    capabilities = Capabilities(
        mnemonic_generator=mnemonic_generator, image_generator=image_generator
    )

    assert capabilities.supports_images


def test_local_storage_writes_bytes(tmp_path) -> None:
    storage = LocalImageStorage(tmp_path / "images")

    path = storage.persist(GeneratedImage(data=b"img"), "a.jpg")

    assert (tmp_path / "images" / "a.jpg").read_bytes() == b"img"
    assert path.endswith("a.jpg")
    with pytest.raises(ValueError):
        storage.persist(GeneratedImage(), "b.jpg")


def test_local_storage_downloads_urls(tmp_path) -> None:
    class _Response:
        content = b"remote"

        def raise_for_status(self) -> None:
            return None

    class _Session:
        def __init__(self) -> None:
            self.urls = []

        def get(self, url, timeout):
            self.urls.append(url)
            return _Response()

    session = _Session()
    storage = LocalImageStorage(tmp_path, session=session)

    storage.persist(GeneratedImage(url="https://images.example/1.jpg"), "c.jpg")

    assert session.urls == ["https://images.example/1.jpg"]
    assert (tmp_path / "c.jpg").read_bytes() == b"remote"


def test_voice_and_style_fallbacks() -> None:
    assert resolve_voice("KO").language_code == "ko-KR"
    assert resolve_voice("xx").language_code == "en-US"
    assert ImageStyle.from_value("animated 3d cinematic") is ImageStyle.ANIMATED_3D_CINEMATIC
    assert ImageStyle.from_value(None) is ImageStyle.REALISTIC_CINEMATIC
