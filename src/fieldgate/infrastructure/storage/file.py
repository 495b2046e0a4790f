"""JSON file credential store.

Tokens are kept in a single JSON object. Writes go to a temporary file in the
same directory which then replaces the original, so readers never observe a
half-written token set.
"""

import asyncio
import json
import os
import platform
import tempfile
from pathlib import Path
from typing import Dict, Optional, Sequence, Union

from structlog import get_logger

from fieldgate.core.exceptions import CredentialStoreError
from fieldgate.infrastructure.storage.base import KeyValueCredentialStore

logger = get_logger(__name__)


class FileCredentialStore(KeyValueCredentialStore):
    """Persists tokens to a JSON file readable only by the current user."""

    backend_name = "file"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    async def _get_item(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._read)
        value = data.get(key)
        return value if isinstance(value, str) else None

    async def _multi_set(self, items: Dict[str, str]) -> None:
        await asyncio.to_thread(self._update, items, ())

    async def _multi_remove(self, keys: Sequence[str]) -> None:
        await asyncio.to_thread(self._update, {}, keys)

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            loaded = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise CredentialStoreError(f"Could not read {self.path}: {e}") from e
        return loaded if isinstance(loaded, dict) else {}

    def _update(self, items: Dict[str, str], remove: Sequence[str]) -> None:
        data = self._read()
        data.update(items)
        for key in remove:
            data.pop(key, None)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".credentials-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(data, handle)
                _set_secure_permissions(Path(tmp_name))
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise CredentialStoreError(f"Could not write {self.path}: {e}") from e


def _set_secure_permissions(path: Path) -> None:
    """Set file permissions to 0600 on POSIX systems."""
    if platform.system() == "Windows":
        return
    try:
        os.chmod(path, 0o600)
    except OSError:
        logger.warning("Could not set secure permissions on credential file", path=str(path))
