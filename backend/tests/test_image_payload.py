import base64

import magic

from gallery.services.image_payload import remove_base64_prefix, validate_image_payload


def test_removes_data_uri_prefix(png_base64):
    assert remove_base64_prefix(f"data:image/png;base64,{png_base64}") == png_base64


def test_keeps_raw_base64(png_base64):
    assert remove_base64_prefix(png_base64) == png_base64


def test_removes_prefix_with_subtype_and_uppercase():
    assert remove_base64_prefix("DATA:image/svg+xml;base64,PHN2Zz4=") == "PHN2Zz4="


def test_valid_png(png_base64):
    result = validate_image_payload(png_base64)
    assert result.is_valid is True
    assert result.mime_type == "image/png"


def test_valid_jpeg(jpeg_base64):
    result = validate_image_payload(jpeg_base64)
    assert result.is_valid is True
    assert result.mime_type == "image/jpeg"


def test_accepts_line_wrapped_base64(png_base64):
    wrapped = "\n".join(png_base64[i:i + 76] for i in range(0, len(png_base64), 76))
    assert validate_image_payload(wrapped).is_valid is True


def test_rejects_invalid_base64():
    result = validate_image_payload("not base64 at all!")
    assert result.is_valid is False
    assert "base64" in result.error


def test_rejects_non_image():
    data = base64.b64encode(b"#!/bin/bash\nrm -rf /").decode()
    result = validate_image_payload(data)
    assert result.is_valid is False
    assert "not allowed" in result.error.lower()


def test_rejects_oversized_image():
    data = base64.b64encode(b"\x89PNG" + b"x" * (10 * 1024 * 1024)).decode()
    result = validate_image_payload(data)
    assert result.is_valid is False
    assert "limit" in result.error.lower()


def test_mime_detection_failure_is_invalid(png_base64, monkeypatch):
    def broken_from_buffer(data, mime=False):
        raise magic.MagicException("could not find any valid magic files")

    monkeypatch.setattr("gallery.services.image_payload.magic.from_buffer", broken_from_buffer)

    result = validate_image_payload(png_base64)

    assert result.is_valid is False
    assert "Could not detect image type" in result.error
