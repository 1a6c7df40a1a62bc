"""Unit tests for banner asset storage."""

import os
import stat
import tempfile
from pathlib import Path

import pytest

from surveykit.services.asset_store import (
    MAX_ASSET_BYTES,
    AssetRejectedError,
    LocalAssetStore,
    safe_filename,
    sniff_image_type,
)
from surveykit.services.survey_store import StorageError, StoragePermissionError

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class TestSafeFilename:
    @pytest.mark.parametrize("raw,expected", [
        ("banner.png", "banner.png"),
        ("../../etc/passwd.png", "passwd.png"),
        ("my banner (1).jpg", "my_banner__1_.jpg"),
        (".hidden.png", "hidden.png"),
        ("", "upload"),
    ])
    def test_sanitized(self, raw, expected):
        assert safe_filename(raw) == expected


class TestSniffImageType:
    @pytest.mark.parametrize("content,expected", [
        (PNG_BYTES, "png"),
        (b"\xff\xd8\xff\xdb", "jpeg"),
        (b"GIF87a...", "gif"),
        (b"RIFF\x00\x00\x00\x00WEBP", "webp"),
        (b"<svg></svg>", None),
        (b"RIFF\x00\x00\x00\x00WAVE", None),
    ])
    def test_detects_format(self, content, expected):
        assert sniff_image_type(content) == expected


class TestLocalAssetStore:
    """Tests for LocalAssetStore."""

    @pytest.fixture
    def asset_dir(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            yield tmpdir

    def test_upload_writes_file_and_returns_url(self, asset_dir):
        store = LocalAssetStore(asset_dir, "https://cdn.example.com/assets/")

        url = store.upload("banner.png", PNG_BYTES)

        assert url.startswith("https://cdn.example.com/assets/banners/")
        assert url.endswith("_banner.png")
        relative = url.removeprefix("https://cdn.example.com/assets/")
        assert (Path(asset_dir) / relative).read_bytes() == PNG_BYTES

    def test_rejects_unsupported_extension(self, asset_dir):
        with pytest.raises(AssetRejectedError, match="Unsupported"):
            LocalAssetStore(asset_dir, "/assets").upload("script.exe", b"MZ")

    def test_rejects_svg_with_script(self, asset_dir):
        svg = b'<svg xmlns="http://www.w3.org/2000/svg"><script>alert(document.cookie)</script></svg>'

        with pytest.raises(AssetRejectedError, match="Unsupported"):
            LocalAssetStore(asset_dir, "/assets").upload("banner.svg", svg)
        assert not (Path(asset_dir) / "banners").exists()

    @pytest.mark.parametrize("filename,content", [
        ("banner.png", b"<html><script>alert(1)</script></html>"),
        ("banner.jpg", PNG_BYTES),
        ("banner.gif", b"GIF90a" + b"\x00" * 8),
    ])
    def test_rejects_content_that_does_not_match_extension(self, asset_dir, filename, content):
        with pytest.raises(AssetRejectedError, match="not a"):
            LocalAssetStore(asset_dir, "/assets").upload(filename, content)
        assert not (Path(asset_dir) / "banners").exists()

    @pytest.mark.parametrize("filename,content", [
        ("photo.JPEG", b"\xff\xd8\xff\xe0" + b"\x00" * 8),
        ("anim.gif", b"GIF89a" + b"\x00" * 8),
        ("banner.webp", b"RIFF\x10\x00\x00\x00WEBPVP8 "),
    ])
    def test_accepts_known_image_formats(self, asset_dir, filename, content):
        url = LocalAssetStore(asset_dir, "/assets").upload(filename, content)
        assert url.endswith(f"_{filename}")

    def test_rejects_empty_file(self, asset_dir):
        with pytest.raises(AssetRejectedError, match="empty"):
            LocalAssetStore(asset_dir, "/assets").upload("banner.png", b"")

    def test_rejects_oversized_file(self, asset_dir):
        with pytest.raises(AssetRejectedError, match="too large"):
            LocalAssetStore(asset_dir, "/assets").upload("banner.png", b"0" * (MAX_ASSET_BYTES + 1))

    @pytest.mark.skipif(os.name != "posix" or os.geteuid() == 0, reason="needs a non-root POSIX user")
    def test_unwritable_directory_is_permission_error(self, asset_dir):
        os.chmod(asset_dir, stat.S_IRUSR | stat.S_IXUSR)
        try:
            with pytest.raises(StoragePermissionError):
                LocalAssetStore(asset_dir, "/assets").upload("banner.png", PNG_BYTES)
        finally:
            os.chmod(asset_dir, stat.S_IRWXU)

    def test_other_write_failure_is_storage_error(self, asset_dir):
        blocker = Path(asset_dir) / "banners"
        blocker.write_text("not a directory")

        with pytest.raises(StorageError) as exc_info:
            LocalAssetStore(asset_dir, "/assets").upload("banner.png", PNG_BYTES)
        assert not isinstance(exc_info.value, StoragePermissionError)
