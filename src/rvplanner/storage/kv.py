"""
Key-value persistence backends.

Every backend speaks the same tiny protocol:
- `get(key, default)` returns the stored JSON value (or `default`)
- `set(key, value)` stores a JSON-serializable value and returns True on success

Backends:
- `JsonFileStore`: one JSON file per key under a directory (atomic tmp + replace writes)
- `MemoryStore`: in-process dict, used by tests and throwaway sessions
- `RemoteDocumentStore`: one JSON document per user on a remote HTTP document service
- `MirroredStore`: local store mirrored to a remote one; falls back to local on any remote error

Writes are whole-value replaces. Two processes writing the same key race and the last
`set()` wins; nothing here detects or merges concurrent writes.
"""

from __future__ import annotations

import copy
import json
import logging
import re
from pathlib import Path
from typing import Any, Protocol

from rvplanner.config.settings import Settings
from rvplanner.core.env import resolve_project_path
from rvplanner.core.http import get_json, put_json
from rvplanner.core.time import utc_now
from rvplanner.domain.models import generate_id

logger = logging.getLogger(__name__)

_SAFE_KEY = re.compile(r"[^A-Za-z0-9_.-]+")


class KeyValueStore(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...

    def set(self, key: str, value: Any) -> bool: ...


class MemoryStore:
    """Dict-backed store; values are deep-copied in and out like a real serializer would."""

    def __init__(self, initial: dict[str, Any] | None = None):
        self._data: dict[str, Any] = copy.deepcopy(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        if key not in self._data:
            return default
        return copy.deepcopy(self._data[key])

    def set(self, key: str, value: Any) -> bool:
        self._data[key] = copy.deepcopy(value)
        return True


class JsonFileStore:
    """A filesystem-backed store: `<base_dir>/<key>.json`."""

    def __init__(self, base_dir: Path):
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    def _key_path(self, key: str) -> Path:
        name = _SAFE_KEY.sub("_", key).strip("._") or "_"
        return self._base_dir / f"{name}.json"

    def get(self, key: str, default: Any = None) -> Any:
        """Read a value; a missing or unreadable file returns `default`."""
        path = self._key_path(key)
        if not path.exists():
            return default
        try:
            return json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Error reading %s: %s", path, e)
            return default

    def set(self, key: str, value: Any) -> bool:
        """Write a value via a temporary file + atomic replace; returns False on failure."""
        path = self._key_path(key)
        try:
            text = json.dumps(value, ensure_ascii=False, indent=2)
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(text, encoding="utf-8")
            tmp.replace(path)
        except (OSError, TypeError, ValueError) as e:
            logger.error("Error writing %s: %s", path, e)
            return False
        return True


class RemoteDocumentStore:
    """Stores every key as a field of one per-user document: `{base_url}/users/{user_id}`.

    `set` reads the document, replaces one field, stamps `updatedAt` and writes it back.
    Errors propagate (`httpx.HTTPError`, `ValueError`); `MirroredStore` decides how to degrade.
    """

    def __init__(self, base_url: str, user_id: str, *, timeout_seconds: float = 10):
        self._url = f"{base_url.rstrip('/')}/users/{user_id}"
        self._timeout_seconds = timeout_seconds

    @property
    def url(self) -> str:
        return self._url

    def _document(self) -> dict[str, Any]:
        doc = get_json(self._url, timeout_seconds=self._timeout_seconds)
        return doc if isinstance(doc, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        doc = self._document()
        return doc[key] if key in doc else default

    def set(self, key: str, value: Any) -> bool:
        doc = self._document()
        doc[key] = value
        doc["updatedAt"] = utc_now().isoformat()
        put_json(self._url, payload=doc, timeout_seconds=self._timeout_seconds)
        return True


_MISSING = object()


class MirroredStore:
    """Local store mirrored to a remote document store.

    - reads prefer the remote copy and fall back to local when the remote errors or lacks the key
    - writes always go to local first; the remote mirror is best-effort
    - the result of `set` is the local result: a remote outage never reports a lost save
    """

    def __init__(self, local: KeyValueStore, remote: KeyValueStore):
        self._local = local
        self._remote = remote

    def get(self, key: str, default: Any = None) -> Any:
        try:
            value = self._remote.get(key, _MISSING)
        except Exception as e:
            logger.warning("Remote read of %r failed, using local copy: %s", key, e)
            return self._local.get(key, default)
        if value is _MISSING:
            return self._local.get(key, default)
        logger.debug("Loaded %r from remote", key)
        return value

    def set(self, key: str, value: Any) -> bool:
        ok = self._local.set(key, value)
        try:
            self._remote.set(key, value)
            logger.debug("Saved %r to remote", key)
        except Exception as e:
            logger.warning("Remote write of %r failed, kept local copy: %s", key, e)
        return ok


def get_or_create_user_id(local: KeyValueStore, key: str = "rv_user_id") -> str:
    """Return this installation's user id, generating and persisting one on first use."""
    user_id = local.get(key)
    if isinstance(user_id, str) and user_id.strip():
        return user_id
    user_id = f"user_{generate_id()}"
    local.set(key, user_id)
    return user_id


def build_store(settings: Settings) -> KeyValueStore:
    """Build the configured backend (local files, optionally mirrored to a remote service)."""
    local = JsonFileStore(resolve_project_path(settings.storage.dir))
    remote_settings = settings.storage.remote
    if settings.storage.backend != "mirrored":
        return local
    if not remote_settings.base_url:
        logger.warning("storage.backend=mirrored but storage.remote.base_url is empty; using local only")
        return local
    user_id = get_or_create_user_id(local, remote_settings.user_id_key)
    remote = RemoteDocumentStore(
        remote_settings.base_url, user_id, timeout_seconds=remote_settings.timeout_seconds
    )
    return MirroredStore(local, remote)
