import pytest

from traxit.i18n import i18n
from traxit.utils.locale import get_locale, safe_url_for_log


@pytest.mark.parametrize("header,expected", [
    (None, "en"),
    ("", "en"),
    ("ja", "ja"),
    ("ja-JP,ja;q=0.9,en;q=0.8", "ja"),
    ("fr-FR,fr;q=0.9,ja;q=0.5", "ja"),
    ("en;q=0.2,ja;q=0.8", "ja"),
    ("ja;q=0", "en"),
    ("de", "en"),
])
def test_get_locale(header, expected):
    assert get_locale(header) == expected


def test_safe_url_keeps_only_video_id():
    url = "https://www.youtube.com/watch?v=dQw4w9WgXcQ&list=PL123&si=tracking"
    assert safe_url_for_log(url) == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


def test_safe_url_hides_other_queries():
    assert safe_url_for_log("https://youtu.be/abc?si=tracking") == "https://youtu.be/abc?..."


def test_translation_falls_back_to_english():
    assert i18n.get("error.url_required", locale="xx") == i18n.get("error.url_required", locale="en")


def test_unknown_key_is_returned_as_is():
    assert i18n.get("error.does_not_exist") == "error.does_not_exist"


def test_translator_interpolates():
    translate = i18n.translator("en")
    assert "Instagram" in translate("error.not_implemented", platform="Instagram")
