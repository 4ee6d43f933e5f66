"""Uploaded image storage for the Art Portfolio API.

Images are written into a single public directory that FastAPI serves at
``/uploads``.  The original upload name is never reused: every stored file
gets an opaque ``artwork-<epoch-ms>-<random><ext>`` name so two uploads of
``photo.jpg`` cannot clobber each other.

File lifetime is driven by the record lifecycle in
:mod:`artportfolio.api.main`, but removal here is always best effort.  A file
that is already gone, or that the OS refuses to delete, is logged and
reported as ``False`` so the record operation that triggered the cleanup can
still succeed.
"""

from __future__ import annotations

import logging
import random
import time
from pathlib import Path, PurePosixPath
from typing import BinaryIO
from urllib.parse import urlsplit

from artportfolio.api.errors import UploadError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES: frozenset[str] = frozenset(
    {"image/jpeg", "image/jpg", "image/png", "image/gif"}
)

CHUNK_SIZE = 64 * 1024

_MAX_NAME_ATTEMPTS = 10


class ImageAssetManager:
    """Store and remove artwork images in the public uploads directory.

    Args:
        uploads_dir: Directory holding the image files.  Created on first use.
        max_bytes: Maximum accepted upload size, or ``None`` for no limit.
        public_path: URL path the directory is mounted at.
    """

    def __init__(
        self,
        uploads_dir: Path,
        max_bytes: int | None = 5 * 1024 * 1024,
        public_path: str = "/uploads",
    ):
        self.uploads_dir = Path(uploads_dir)
        self.max_bytes = max_bytes
        self.public_path = "/" + public_path.strip("/")

    def ensure_directory(self) -> Path:
        """Create the uploads directory if it does not exist yet."""
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        return self.uploads_dir

    def path_for(self, filename: str) -> Path:
        """Return the on-disk path of a stored asset."""
        return self.uploads_dir / filename

    def url_for(self, filename: str, base_url: str) -> str:
        """Build the fully-qualified public URL of a stored asset.

        Args:
            filename: Server-generated asset filename.
            base_url: Scheme and host of the incoming request, e.g.
                ``"http://localhost:3000/"``.
        """
        return f"{base_url.rstrip('/')}{self.public_path}/{filename}"

    @staticmethod
    def _generate_filename(original_name: str | None) -> str:
        suffix = PurePosixPath(original_name or "").suffix
        unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"artwork-{unique_suffix}{suffix}"

    def store(self, stream: BinaryIO, original_name: str | None, content_type: str | None) -> str:
        """Write an uploaded image into the uploads directory.

        The payload is copied in chunks so an oversize upload is rejected as
        soon as it crosses ``max_bytes``; the partial file is removed before
        the error propagates.

        Args:
            stream: Readable binary file object positioned at the payload.
            original_name: Client-side filename, used only for its extension.
            content_type: MIME type declared by the client.

        Returns:
            The generated filename of the stored asset.

        Raises:
            UploadError: If the MIME type is not allowed or the file is too
                large.
        """
        if (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
            logger.warning(f"Rejected upload {original_name!r} with content type {content_type!r}")
            raise UploadError(
                "Only JPEG, PNG, and GIF images are allowed",
                error="Invalid file type",
            )

        self.ensure_directory()

        for _ in range(_MAX_NAME_ATTEMPTS):
            filename = self._generate_filename(original_name)
            filepath = self.path_for(filename)
            try:
                handle = open(filepath, "xb")
            except FileExistsError:
                continue
            break
        else:
            raise UploadError("Could not allocate a unique filename for the upload")

        written = 0
        try:
            with handle:
                while chunk := stream.read(CHUNK_SIZE):
                    written += len(chunk)
                    if self.max_bytes is not None and written > self.max_bytes:
                        raise UploadError(
                            f"Image exceeds the maximum size of {self.max_bytes} bytes",
                            error="File too large",
                        )
                    handle.write(chunk)
        except BaseException:
            filepath.unlink(missing_ok=True)
            raise

        logger.info(f"Stored upload {original_name!r} as {filename} ({written} bytes)")
        return filename

    def remove(self, url_or_path: str | None) -> bool:
        """Delete the asset referenced by a public URL, URL path or filename.

        Only the basename is used, so the target is always inside the uploads
        directory.

        Returns:
            ``True`` if a file was deleted, ``False`` otherwise.  Never raises.
        """
        if not url_or_path:
            return False

        filename = PurePosixPath(urlsplit(url_or_path).path).name
        if not filename:
            logger.warning(f"Cannot derive an asset filename from {url_or_path!r}")
            return False

        filepath = self.path_for(filename)
        try:
            filepath.unlink()
        except FileNotFoundError:
            logger.warning(f"Asset already missing, nothing to delete: {filepath}")
            return False
        except OSError as e:
            logger.warning(f"Failed to delete asset {filepath}: {e}")
            return False

        logger.info(f"Deleted asset {filename}")
        return True
