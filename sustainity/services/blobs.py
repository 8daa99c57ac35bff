"""
In-memory store for uploaded CSV text.

Each upload is kept under a generated `blob:<uuid>` source id until it is
revoked. The workspace revokes a blob as soon as a newer source replaces it,
so repeated uploads do not accumulate.
"""
import uuid
from threading import Lock
from typing import Dict, Optional

from sustainity.config import BLOB_PREFIX


class BlobStore:
    def __init__(self):
        self._blobs: Dict[str, str] = {}
        self.lock = Lock()

    def create(self, text: str) -> str:
        """Store text and return the source id that reads it back."""
        blob_id = f"{BLOB_PREFIX}{uuid.uuid4()}"
        with self.lock:
            self._blobs[blob_id] = text
        return blob_id

    def get(self, blob_id: str) -> Optional[str]:
        with self.lock:
            return self._blobs.get(blob_id)

    def revoke(self, blob_id: Optional[str]) -> bool:
        """Release a blob. Unknown ids are ignored."""
        if not blob_id:
            return False
        with self.lock:
            return self._blobs.pop(blob_id, None) is not None

    def __contains__(self, blob_id: str) -> bool:
        with self.lock:
            return blob_id in self._blobs

    def __len__(self) -> int:
        with self.lock:
            return len(self._blobs)


def is_blob(source: Optional[str]) -> bool:
    return bool(source) and source.startswith(BLOB_PREFIX)
