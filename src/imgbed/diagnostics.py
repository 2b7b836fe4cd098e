"""Configuration self-check, run before deploying.

Prints what the service would start with: which variables are set, whether
a ``.env`` file is present, and the state of the upload directory.  The API
key itself and the ``.env`` contents are never printed.
"""

from __future__ import annotations

import os
import stat
from pathlib import Path

from src.imgbed.config import Settings


def collect_diagnostics(settings: Settings, cwd: Path) -> list[str]:
    """Return the report as a list of lines."""
    lines = [
        "=== imgbed diagnostics ===",
        f"Working directory: {cwd}",
        "Environment:",
        f"  PORT: {settings.port}" + ("" if "port" in settings.model_fields_set else " (default)"),
    ]

    if settings.api_key:
        lines.append(f"  API_KEY: set (length: {len(settings.api_key)})")
    else:
        lines.append("  API_KEY: not set – uploads will be rejected")

    if settings.base_url:
        lines.append(f"  BASE_URL: {settings.base_url}")
    else:
        lines.append(f"  BASE_URL: not set (default {settings.public_base_url})")

    lines.append(f"Max upload size: {settings.max_upload_size} bytes ({settings.max_upload_size_mb} MB)")

    env_path = cwd / ".env"
    lines.append(f".env path: {env_path}")
    lines.append(f".env exists: {env_path.exists()}")

    upload_dir = settings.upload_dir if settings.upload_dir.is_absolute() else cwd / settings.upload_dir
    lines.append(f"Upload directory: {upload_dir}")
    lines.append(f"Upload directory exists: {upload_dir.is_dir()}")
    if upload_dir.is_dir():
        mode = upload_dir.stat().st_mode
        lines.append(f"Upload directory permissions: {stat.filemode(mode)} ({oct(stat.S_IMODE(mode))})")
        lines.append(f"Upload directory writable: {os.access(upload_dir, os.W_OK)}")
    else:
        lines.append("Note: the upload directory is created on first start.")

    lines.append("=== end ===")
    return lines


def main() -> None:
    for line in collect_diagnostics(Settings(), Path.cwd()):
        print(line)


if __name__ == "__main__":
    main()
