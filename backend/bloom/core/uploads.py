import logging
import os
import tempfile
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, List, Optional, Sequence

from fastapi import UploadFile

from bloom.core.errors import InputValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImageInput:
    """One buffered image, ready to be forwarded to the species identifier."""

    path: str
    filename: str
    content_type: str
    organ: str


def _guess_ext(upload: UploadFile) -> str:
    """
    Prefer the original filename extension, then the content type, then .jpg.
    """
    ext = ""
    if upload.filename:
        _, ext = os.path.splitext(upload.filename)
        ext = (ext or "").lower().strip()

    if ext in {".jpg", ".jpeg", ".png", ".webp", ".heic", ".heif"}:
        return ext

    ct = (upload.content_type or "").lower()
    if ct in {"image/jpeg", "image/jpg"}:
        return ".jpg"
    if ct == "image/png":
        return ".png"
    if ct == "image/webp":
        return ".webp"
    if ct in {"image/heic", "image/heif"}:
        return ".heic"

    return ".jpg"


def pair_organs(count: int, organs: Optional[Sequence[str]], default: str = "leaf") -> List[str]:
    """
    organs[i] tags image i; missing or blank entries fall back to the default organ.
    """
    organs = list(organs or [])
    out: List[str] = []
    for i in range(count):
        organ = organs[i].strip() if i < len(organs) and organs[i] else ""
        out.append(organ or default)
    return out


def _remove(paths: List[str]) -> None:
    for p in paths:
        try:
            os.unlink(p)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove temp upload %s: %s", p, e)


@asynccontextmanager
async def buffered_uploads(
    uploads: Optional[Sequence[UploadFile]],
    organs: Optional[Sequence[str]] = None,
    *,
    upload_dir: Optional[str] = None,
    max_images: int = 5,
    default_organ: str = "leaf",
) -> AsyncIterator[List[ImageInput]]:
    """
    Write each upload to a temp file and yield them as ImageInput records.
    Every temp file is removed on exit, whether the body succeeded or raised.
    """
    uploads = [u for u in (uploads or []) if u is not None]
    if not uploads:
        raise InputValidationError("No images uploaded")
    if len(uploads) > max_images:
        raise InputValidationError(f"Too many images: at most {max_images} allowed")

    tags = pair_organs(len(uploads), organs, default_organ)
    paths: List[str] = []
    images: List[ImageInput] = []

    try:
        if upload_dir:
            os.makedirs(upload_dir, exist_ok=True)

        for upload, organ in zip(uploads, tags):
            contents = await upload.read()
            if not contents:
                raise InputValidationError(f"Empty upload: {upload.filename or 'image'}")

            fd, path = tempfile.mkstemp(prefix="bloom_", suffix=_guess_ext(upload), dir=upload_dir)
            paths.append(path)
            with os.fdopen(fd, "wb") as f:
                f.write(contents)

            images.append(
                ImageInput(
                    path=path,
                    filename=upload.filename or os.path.basename(path),
                    content_type=upload.content_type or "image/jpeg",
                    organ=organ,
                )
            )

        yield images
    finally:
        _remove(paths)
