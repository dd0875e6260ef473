from __future__ import annotations

import re

from enrichment.filenames import audio_file_stem, sanitize_filename, simple_stem, unique_filename


def test_sanitize_strips_accents_and_punctuation() -> None:
    assert sanitize_filename("  Ñandú rápido! ", "jpg") == "nandu_rapido.jpg"
    assert sanitize_filename("a   b__c") == "a_b_c"


def test_sanitize_falls_back_for_empty_values() -> None:
    assert re.fullmatch(r"unnamed_\d+\.mp3", sanitize_filename("", "mp3"))
    assert re.fullmatch(r"unnamed_\d+", sanitize_filename("???"))


def test_sanitize_uses_default_for_unreadable_values() -> None:
    assert sanitize_filename("дом", default="session") == "session"
    assert sanitize_filename("", "zip", default="session") == "session.zip"


def test_unique_filename_appends_timestamp() -> None:
    assert re.fullmatch(r"la_casa_\d+\.jpg", unique_filename("La casa", "jpg"))


def test_audio_stems_distinguish_texts_sharing_a_prefix() -> None:
    house = audio_file_stem("дом")
    houses = audio_file_stem("дома")

    assert house.startswith("audio_")
    assert houses.startswith("audio_")
    assert house != houses
    assert audio_file_stem("日本") != audio_file_stem("日本語")
    assert audio_file_stem("casa") == audio_file_stem("casa")
    assert re.fullmatch(r"casa_[0-9a-f]{12}", audio_file_stem("casa"))
    assert simple_stem("casa grande") == "casa_grande"
