"""
Local Upload Storage

Stores uploaded files on local disk until a worker releases them.

Responsibility:
    - Save bytes under a unique name that keeps the original extension
    - Delete stored files (idempotent)

Business Rules:
    - File name: "{epoch_ms}-{random}{ext}", ext lower-cased from the original name
    - Upload directory created on first save
    - The stored path is what goes into the job payload, so API and workers
      must share the directory (same host or a shared volume)
"""

import logging
import secrets
import time
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)


class LocalUploadStorage:
    """
    Upload storage on a local directory.

    Examples:
        >>> storage = LocalUploadStorage("uploads")
        >>> path = storage.save(b"A,B\\n1,2\\n", "data.csv")
        >>> path.suffix
        '.csv'
        >>> storage.delete(path)
        True
    """

    def __init__(self, upload_dir: Union[str, Path]) -> None:
        self.upload_dir = Path(upload_dir)

    def _unique_name(self, original_name: str) -> str:
        extension = Path(original_name).suffix.lower()
        return f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"

    def save(self, file_data: bytes, original_name: str) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.upload_dir / self._unique_name(original_name)
        # exclusive create: never overwrite another upload
        with file_path.open("xb") as f:
            f.write(file_data)
        logger.info(f"Stored upload '{original_name}' at {file_path} ({len(file_data)} bytes)")
        return file_path

    def delete(self, file_path: Union[str, Path]) -> bool:
        path = Path(file_path)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.debug(f"Upload already removed: {path}")
            return False
        logger.info(f"Released upload {path}")
        return True
