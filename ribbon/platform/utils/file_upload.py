import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

from fastapi import UploadFile
from starlette.staticfiles import StaticFiles

from ribbon.platform.exceptions import UploadError, ValidationError
from ribbon.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ImageUpload:
    filename: str
    content_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


async def read_upload(file: Optional[UploadFile]) -> Optional[ImageUpload]:
    """Turn an optional multipart file into an ImageUpload; empty inputs mean no image."""
    if file is None or not file.filename:
        return None
    contents = await file.read()
    if not contents:
        return None
    return ImageUpload(
        filename=file.filename,
        content_type=file.content_type or "",
        data=contents,
    )


def validate_image_file(image: ImageUpload, max_bytes: int) -> None:
    """
    Validate an uploaded image for media type and size.

    Raises:
        ValidationError: If validation fails
    """
    if not image.content_type.startswith("image/"):
        raise ValidationError("Please upload an image file")

    if image.size > max_bytes:
        raise ValidationError(f"Image must be smaller than {max_bytes // (1024 * 1024)}MB")


class IconStorage(Protocol):
    async def upload(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        cache_control: int,
        upsert: bool = False,
    ) -> str:
        """Store `data` under `key` and return its public URL."""
        ...


class LocalIconStorage:
    """
    Icon storage backed by a directory that the app serves as static files.

    Every icon is served with the mount's Cache-Control header, so the
    per-upload `cache_control` is only logged here.
    """

    def __init__(self, directory: str | Path, public_base_url: str):
        self.directory = Path(directory)
        self.public_base_url = public_base_url.rstrip("/")

    async def upload(
        self,
        key: str,
        data: bytes,
        *,
        content_type: str,
        cache_control: int,
        upsert: bool = False,
    ) -> str:
        if "/" in key or "\\" in key or key.startswith("."):
            raise UploadError(f"Upload failed: invalid key {key!r}")

        file_path = self.directory / key
        try:
            await asyncio.to_thread(self._write, file_path, data, upsert)
        except FileExistsError as exc:
            raise UploadError("Upload failed: The resource already exists") from exc
        except OSError as exc:
            logger.exception(f"Failed to store icon {key}", exc_info=exc)
            raise UploadError(f"Upload failed: {exc.strerror or exc}") from exc

        logger.info(f"Stored icon {key} ({len(data)} bytes, {content_type}, max-age={cache_control})")
        return f"{self.public_base_url}/{key}"

    def _write(self, file_path: Path, data: bytes, upsert: bool) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        # "xb" fails if the key is taken, which is how overwrite stays disabled
        with open(file_path, "wb" if upsert else "xb") as f:
            f.write(data)


class CachedStaticFiles(StaticFiles):
    """StaticFiles that adds a fixed Cache-Control header."""

    def __init__(self, *args, max_age: int = 3600, **kwargs):
        super().__init__(*args, **kwargs)
        self.max_age = max_age

    def file_response(self, *args, **kwargs):
        response = super().file_response(*args, **kwargs)
        response.headers["Cache-Control"] = f"public, max-age={self.max_age}"
        return response
