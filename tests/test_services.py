"""Tests for the auth and storage services and the diagnostics report."""

import asyncio
import io
import re
from pathlib import Path
from unittest.mock import patch

import pytest
from fastapi import UploadFile
from pydantic import ValidationError

from src.imgbed.config import Settings
from src.imgbed.diagnostics import collect_diagnostics
from src.imgbed.exceptions import (
    FileTooLarge,
    InvalidCredentials,
    MalformedCredentials,
    MissingCredentials,
    UnsupportedFileType,
)
from src.imgbed.services.auth_service import verify_bearer
from src.imgbed.services.storage_service import (
    generate_filename,
    save_upload,
    validate_mime_type,
)

ALLOWED = {"image/jpeg", "image/png", "image/gif", "image/webp"}


def make_upload(content: bytes, filename: str = "a.png") -> UploadFile:
    return UploadFile(file=io.BytesIO(content), filename=filename)


# ──────────────────────────────────────────────
# verify_bearer
# ──────────────────────────────────────────────
def test_verify_bearer_accepts_matching_token() -> None:
    assert verify_bearer("Bearer k3y", "k3y") == "k3y"


@pytest.mark.parametrize("header", [None, ""])
def test_verify_bearer_missing(header: str | None) -> None:
    with pytest.raises(MissingCredentials):
        verify_bearer(header, "k3y")


@pytest.mark.parametrize("header", ["Basic k3y", "Bearer", "Bearer ", "Bearer k3y more", "k3y"])
def test_verify_bearer_malformed(header: str) -> None:
    with pytest.raises(MalformedCredentials):
        verify_bearer(header, "k3y")


@pytest.mark.parametrize(("header", "key"), [("Bearer wrong", "k3y"), ("Bearer k3y", None), ("Bearer K3Y", "k3y")])
def test_verify_bearer_invalid(header: str, key: str | None) -> None:
    with pytest.raises(InvalidCredentials):
        verify_bearer(header, key)


def test_auth_errors_share_status() -> None:
    assert MissingCredentials.status_code == MalformedCredentials.status_code == InvalidCredentials.status_code == 401
    assert len({MissingCredentials.message, MalformedCredentials.message, InvalidCredentials.message}) == 3


# ──────────────────────────────────────────────
# validate_mime_type
# ──────────────────────────────────────────────
@pytest.mark.parametrize("mime", sorted(ALLOWED))
def test_validate_mime_type_accepts_whitelist(mime: str) -> None:
    validate_mime_type(mime, ALLOWED)


@pytest.mark.parametrize("mime", [None, "", "image/tiff", "text/html"])
def test_validate_mime_type_rejects(mime: str | None) -> None:
    with pytest.raises(UnsupportedFileType):
        validate_mime_type(mime, ALLOWED)


# ──────────────────────────────────────────────
# generate_filename
# ──────────────────────────────────────────────
def test_generate_filename_layout() -> None:
    with patch("src.imgbed.services.storage_service.time.time_ns", return_value=1_700_000_000_123_456_789), \
         patch("src.imgbed.services.storage_service.random.random", return_value=0.5):
        assert generate_filename("cat.webp") == "1700000000123_500000000.webp"


@pytest.mark.parametrize(
    ("original", "ext"),
    [("x.png", ".png"), ("archive.tar.gz", ".gz"), ("noext", ""), (".hidden", ""), (None, ""), ("dir/pic.Jpeg", ".Jpeg")],
)
def test_generate_filename_extension(original: str | None, ext: str) -> None:
    name = generate_filename(original)
    assert re.fullmatch(rf"\d+_\d+{re.escape(ext)}", name)


def test_generate_filename_random_range() -> None:
    with patch("src.imgbed.services.storage_service.random.random", return_value=0.9999999999):
        suffix = int(generate_filename("a.png").split("_")[1].removesuffix(".png"))
    assert 0 <= suffix <= 1_000_000_000


# ──────────────────────────────────────────────
# save_upload
# ──────────────────────────────────────────────
def test_save_upload_writes_file(tmp_path: Path) -> None:
    name = asyncio.run(save_upload(make_upload(b"abc"), tmp_path, max_size=10))
    assert (tmp_path / name).read_bytes() == b"abc"
    assert name.endswith(".png")


def test_save_upload_too_large_leaves_nothing(tmp_path: Path) -> None:
    with pytest.raises(FileTooLarge) as exc_info:
        asyncio.run(save_upload(make_upload(b"x" * 11), tmp_path, max_size=10))
    assert list(tmp_path.iterdir()) == []
    assert exc_info.value.status_code == 400


def test_save_upload_redraws_name_on_collision(tmp_path: Path) -> None:
    (tmp_path / "1_1.png").write_bytes(b"old")
    names = iter(["1_1.png", "1_2.png"])
    with patch("src.imgbed.services.storage_service.generate_filename", side_effect=lambda _: next(names)):
        name = asyncio.run(save_upload(make_upload(b"new"), tmp_path, max_size=10))
    assert name == "1_2.png"
    assert (tmp_path / "1_1.png").read_bytes() == b"old"


# ──────────────────────────────────────────────
# Settings / diagnostics
# ──────────────────────────────────────────────
def test_settings_defaults() -> None:
    settings = Settings(_env_file=None, port=3000, base_url=None)
    assert settings.public_base_url == "http://localhost:3000"
    assert settings.max_upload_size == 5_242_880
    assert settings.allowed_mime_types_set == ALLOWED


def test_settings_strip_trailing_slash() -> None:
    assert Settings(_env_file=None, base_url="https://img.example.com/").public_base_url == "https://img.example.com"


def test_settings_frozen() -> None:
    settings = Settings(_env_file=None)
    with pytest.raises(ValidationError):
        settings.api_key = "changed"


def test_diagnostics_hide_api_key(tmp_path: Path) -> None:
    (tmp_path / ".env").write_text("API_KEY=super-secret\n", encoding="utf-8")
    settings = Settings(_env_file=None, api_key="super-secret", upload_dir=tmp_path / "public" / "uploads")
    report = "\n".join(collect_diagnostics(settings, tmp_path))

    assert "super-secret" not in report
    assert "API_KEY: set (length: 12)" in report
    assert ".env exists: True" in report
    assert "Upload directory exists: False" in report


def test_diagnostics_reports_existing_dir(tmp_path: Path) -> None:
    upload_dir = tmp_path / "uploads"
    upload_dir.mkdir()
    settings = Settings(_env_file=None, api_key=None, upload_dir=upload_dir)
    report = collect_diagnostics(settings, tmp_path)

    assert "  API_KEY: not set – uploads will be rejected" in report
    assert "Upload directory exists: True" in report
    assert any(line.startswith("Upload directory permissions: d") for line in report)


def test_diagnostics_port_from_env_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("PORT=4000\n", encoding="utf-8")
    report = collect_diagnostics(Settings(_env_file=env_file), tmp_path)

    assert "  PORT: 4000" in report


def test_diagnostics_port_default(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    report = collect_diagnostics(Settings(_env_file=None), tmp_path)

    assert "  PORT: 3000 (default)" in report
    assert "Max upload size: 5242880 bytes (5 MB)" in report


def test_validate_mime_type_is_case_sensitive() -> None:
    with pytest.raises(UnsupportedFileType):
        validate_mime_type("IMAGE/PNG", ALLOWED)
