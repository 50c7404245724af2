"""Tests for the upload handler."""

import io
import os
from unittest.mock import Mock

import pytest

from errors import PayloadTooLarge, UnsupportedMediaType, ValidationError
from uploads import UploadHandler


def test_save_image_stores_file_and_issues_reference(uploads):
    result = uploads.save("image", io.BytesIO(b"GIF89a"), "image/gif", "party.gif")

    assert result.filename.endswith(".gif")
    assert result.url == f"http://testserver/uploads/{result.filename}"
    assert result.mimetype == "image/gif"
    assert result.size == 6
    with open(os.path.join(uploads.root, result.filename), "rb") as fh:
        assert fh.read() == b"GIF89a"

    media = uploads.resolve(result.url)
    assert media is not None
    assert media.filename == result.filename


def test_filenames_are_unique(uploads):
    names = {uploads.save("image", io.BytesIO(b"x"), "image/png", "same.png").filename for _ in range(10)}
    assert len(names) == 10


@pytest.mark.parametrize(
    "kind,mimetype",
    [("image", "image/svg+xml"), ("image", "video/mp4"), ("video", "video/quicktime"), ("video", None)],
)
def test_unsupported_type_is_rejected_before_reading(uploads, kind, mimetype):
    stream = Mock()

    with pytest.raises(UnsupportedMediaType):
        uploads.save(kind, stream, mimetype, "file.bin")

    stream.read.assert_not_called()
    assert os.listdir(uploads.root) == []


def test_declared_oversize_image_is_rejected_before_reading(uploads):
    stream = Mock()

    with pytest.raises(PayloadTooLarge):
        uploads.save("image", stream, "image/jpeg", "big.jpg", declared_size=6 * 1024 * 1024)

    stream.read.assert_not_called()
    assert os.listdir(uploads.root) == []


def test_six_megabyte_image_is_rejected_without_writing(uploads):
    data = io.BytesIO(b"\0" * (6 * 1024 * 1024))

    with pytest.raises(PayloadTooLarge):
        uploads.save("image", data, "image/jpeg", "big.jpg")

    assert os.listdir(uploads.root) == []


def test_image_at_the_limit_is_accepted(cfg):
    cfg.max_image_bytes = 1024
    handler = UploadHandler(cfg)
    handler.reset()

    result = handler.save("image", io.BytesIO(b"a" * 1024), "image/webp", "ok.webp")

    assert result.size == 1024


def test_video_limit_is_separate(cfg):
    cfg.max_image_bytes = 10
    cfg.max_video_bytes = 100
    handler = UploadHandler(cfg)
    handler.reset()

    assert handler.save("video", io.BytesIO(b"v" * 50), "video/mp4", "clip.mp4").size == 50
    with pytest.raises(PayloadTooLarge):
        handler.save("video", io.BytesIO(b"v" * 101), "video/webm", "clip.webm")


def test_missing_stream(uploads):
    with pytest.raises(ValidationError):
        uploads.save("image", None, "image/png", "x.png")


def test_delete_is_idempotent(uploads):
    result = uploads.save("image", io.BytesIO(b"x"), "image/png", "x.png")
    media = uploads.resolve(result.url)

    assert uploads.delete(media) is True
    assert uploads.delete(media) is False
    assert uploads.resolve(result.url) is None


def test_external_references_do_not_resolve(uploads):
    assert uploads.resolve("https://vimeo.com/123") is None
    assert uploads.resolve(None) is None
    assert uploads.resolve("") is None


def test_reset_wipes_files_and_registry(uploads):
    result = uploads.save("image", io.BytesIO(b"x"), "image/png", "x.png")

    uploads.reset()

    assert os.listdir(uploads.root) == []
    assert uploads.resolve(result.url) is None


def test_path_for(uploads):
    result = uploads.save("video", io.BytesIO(b"x"), "video/ogg", "x.ogv")

    assert uploads.path_for(result.filename) == os.path.join(uploads.root, result.filename)
    assert uploads.path_for("missing.png") is None
    assert uploads.path_for("../secret") is None
    assert uploads.path_for("..") is None
