from __future__ import annotations

import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename


@dataclass(frozen=True)
class StoredUpload:
    path: str
    url: str

    def discard(self) -> None:
        try:
            os.remove(self.path)
        except FileNotFoundError:
            pass


def save_upload(file: FileStorage, *, upload_dir: str, subdir: str, prefix: str) -> StoredUpload:
    """Store an uploaded image as ``<upload_dir>/<subdir>/<prefix>_<ts>_<rand><ext>``."""

    ext = Path(secure_filename(file.filename or "")).suffix.lower() or ".jpg"
    name = f"{prefix}_{int(time.time() * 1000)}_{secrets.randbelow(10**9)}{ext}"
    target_dir = Path(upload_dir) / subdir
    target_dir.mkdir(parents=True, exist_ok=True)
    target = target_dir / name
    file.save(str(target))
    return StoredUpload(path=str(target), url=f"/uploads/{subdir}/{name}")


def upload_url(path: Optional[str], upload_dir: str) -> Optional[str]:
    """Public URL for a stored file path, or None when it lives elsewhere."""

    if not path:
        return None
    try:
        rel = Path(path).resolve().relative_to(Path(upload_dir).resolve())
    except ValueError:
        return None
    return "/uploads/" + rel.as_posix()
