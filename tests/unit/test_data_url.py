"""Unit tests for data URL helpers."""

import pytest

from magicprompt.utils.data_url import (
    get_data_url_mime,
    is_data_uri,
    mime_for_format,
    strip_data_url_prefix,
    to_data_url,
)


class TestDataUrlHelpers:
    """Test prefix detection, stripping and wrapping."""

    def test_is_data_uri(self):
        assert is_data_uri("data:image/png;base64,AAAA")
        assert not is_data_uri("AAAA")
        assert not is_data_uri("https://example.com/cat.png")
        assert not is_data_uri("")

    def test_get_data_url_mime(self):
        assert get_data_url_mime("data:image/webp;base64,AAAA") == "image/webp"
        assert get_data_url_mime("AAAA") is None

    def test_data_url_with_parameters(self):
        value = "data:image/png;name=x.png;base64,iVBORw0KGgo="
        assert is_data_uri(value)
        assert get_data_url_mime(value) == "image/png"
        assert to_data_url(value, "image/png") == "data:image/png;base64,iVBORw0KGgo="

    def test_non_base64_data_url_not_matched(self):
        assert not is_data_uri("data:image/png;name=x.png,iVBORw0KGgo=")

    @pytest.mark.parametrize("prefix", [
        "data:image/jpeg;base64,",
        "data:image/png;base64,",
        "DATA:image/png;base64,",
        "data:image/png;name=x.png;base64,",
        "data:image/png;charset=utf-8;name=x.png;base64,",
    ])
    def test_strip_prefix(self, prefix):
        assert strip_data_url_prefix(prefix + "iVBORw0KGgo=") == "iVBORw0KGgo="

    def test_strip_raw_base64_unchanged(self):
        assert strip_data_url_prefix("iVBORw0KGgo=") == "iVBORw0KGgo="

    def test_raw_and_data_url_wrap_identically(self):
        raw = "iVBORw0KGgo="
        assert to_data_url(raw, "image/png") == to_data_url(f"data:image/jpeg;base64,{raw}", "image/png")

    def test_strip_then_wrap_round_trip(self):
        original = "data:image/png;base64,iVBORw0KGgoAAAANSUhEUg=="
        assert to_data_url(strip_data_url_prefix(original), "image/png") == original

    def test_mime_for_format(self):
        assert mime_for_format("PNG") == "image/png"
        assert mime_for_format("webp") == "image/webp"
        assert mime_for_format("JPG") == "image/jpeg"
        with pytest.raises(ValueError):
            mime_for_format("GIF")
