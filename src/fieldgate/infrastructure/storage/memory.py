"""Process-local credential store."""

from typing import Dict, Optional, Sequence

from fieldgate.infrastructure.storage.base import KeyValueCredentialStore


class InMemoryCredentialStore(KeyValueCredentialStore):
    """Keeps tokens in a dictionary for the lifetime of the process.

    All access happens on one event loop and no primitive awaits, so each
    write is applied in a single step.
    """

    backend_name = "memory"

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    async def _get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def _multi_set(self, items: Dict[str, str]) -> None:
        self._items.update(items)

    async def _multi_remove(self, keys: Sequence[str]) -> None:
        for key in keys:
            self._items.pop(key, None)

    def snapshot(self) -> Dict[str, str]:
        return dict(self._items)
