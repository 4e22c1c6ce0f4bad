"""
Upload Storage Port

Stores uploaded bytes until a worker releases them.
Implemented by LocalUploadStorage.
"""

from pathlib import Path
from typing import Protocol, Union


class UploadStorageProtocol(Protocol):
    def save(self, file_data: bytes, original_name: str) -> Path:
        """Persist bytes under a unique name and return the stored path."""
        ...

    def delete(self, file_path: Union[str, Path]) -> bool:
        """Remove a stored file. Returns False if it was already gone."""
        ...
