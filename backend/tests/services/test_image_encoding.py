"""Tests for image encoding — data URLs and per-file concurrent encoding."""

import pytest

from lessonbook.infrastructure.image_encoding import (
    DEFAULT_MIME,
    PendingUpload,
    decode_data_url,
    encode_data_url,
    encode_uploads,
    guess_mime,
)


def test_data_url_decodes_back():
    url = encode_data_url(b"\x00\x01png", "image/png")
    assert url.startswith("data:image/png;base64,")
    assert decode_data_url(url) == (b"\x00\x01png", "image/png")


@pytest.mark.parametrize("bad", [
    "http://example.com/a.png",
    "data:image/png,rawtext",
    "data:image/png;base64,@@@",
    "no comma at all",
])
def test_decode_rejects_malformed(bad):
    with pytest.raises(ValueError):
        decode_data_url(bad)


def test_guess_mime_prefers_content_type_then_extension():
    assert guess_mime("a.bin", "image/webp") == "image/webp"
    assert guess_mime("a.png", None) == "image/png"
    assert guess_mime("noext", None) == DEFAULT_MIME


async def test_encode_uploads_yields_every_file():
    uploads = [PendingUpload(f"{i}.png", "image/png", bytes([i])) for i in range(4)]
    results = [r async for r in encode_uploads(uploads)]
    assert sorted(r.filename for r in results) == ["0.png", "1.png", "2.png", "3.png"]
    by_name = {r.filename: r.data_url for r in results}
    assert decode_data_url(by_name["2.png"]) == (b"\x02", "image/png")


async def test_encode_uploads_empty():
    assert [r async for r in encode_uploads([])] == []
