"""
Preference stores: the injected key/value backend handlers read and write.

Keys are the symbolic names of option identifiers (e.g. "LEVEL"); values are
strings in the handler's stored representation. Typed conversion is the
handlers' business, not the store's.

- PreferenceStore: the protocol (get/put/remove/keys).
- MemoryStore: dict-backed, for tests and embedding hosts.
- JsonStore: one JSON object in a file; every write is flushed so the settings
  outlive the process.

Both stores reject keys or values holding NUL characters and values longer
than MAX_VALUE_LENGTH with ValueError.
"""
import json
import os
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from .logs import get_logger

logger = get_logger(__name__)

MAX_KEY_LENGTH = 80
MAX_VALUE_LENGTH = 8 * 1024


@runtime_checkable
class PreferenceStore(Protocol):
    def get(self, key: str, default: str | None = None, /) -> str | None: ...
    def put(self, key: str, value: str, /) -> None: ...
    def remove(self, key: str, /) -> None: ...
    def keys(self) -> list[str]: ...


def _check(key, value=None):
    if not isinstance(key, str) or not key:
        raise TypeError("preference keys must be non-empty strings")
    if len(key) > MAX_KEY_LENGTH:
        raise ValueError("preference key %r is longer than %d characters" % (key, MAX_KEY_LENGTH))
    if "\0" in key:
        raise ValueError("preference key %r contains a NUL character" % key)
    if value is None:
        return
    if not isinstance(value, str):
        raise TypeError("preference values must be strings")
    if len(value) > MAX_VALUE_LENGTH:
        raise ValueError("preference value for %r is longer than %d characters" % (key, MAX_VALUE_LENGTH))
    if "\0" in value:
        raise ValueError("preference value for %r contains a NUL character" % key)


class MemoryStore:
    """process-local preference store."""

    def __init__(self, initial=None, /):
        self._values = {}
        for key, value in dict(initial or {}).items():
            self.put(key, value)

    def get(self, key, default=None, /):
        _check(key)
        return self._values.get(key, default)

    def put(self, key, value, /):
        _check(key, value)
        self._values[key] = value

    def remove(self, key, /):
        _check(key)
        self._values.pop(key, None)

    def keys(self):
        return sorted(self._values)

    def __repr__(self):
        return "memory-store(%r)" % self._values


class JsonStore:
    """
    file-backed preference store.

    The file holds a single JSON object of string values. A missing file is an
    empty store; the parent directory is created on the first write. Writes go
    through a temporary file and an atomic replace; the in-memory values only
    change once the file has been replaced.
    """

    def __init__(self, path, /):
        self._path = Path(path).expanduser()
        self._values = self._load()

    @property
    def path(self):
        return self._path

    def _load(self):
        try:
            with self._path.open(encoding="utf-8") as stream:
                values = json.load(stream)
        except FileNotFoundError:
            return {}
        if not isinstance(values, dict) or not all(isinstance(value, str) for value in values.values()):
            raise ValueError("preference file %s must hold a JSON object of strings" % self._path)
        return values

    def _flush(self, values):
        self._path.parent.mkdir(parents=True, exist_ok=True)
        descriptor, temporary = tempfile.mkstemp(dir=self._path.parent, prefix=".preferences-", suffix=".json")
        try:
            with os.fdopen(descriptor, "w", encoding="utf-8") as stream:
                json.dump(values, stream, indent=2, sort_keys=True)
            os.replace(temporary, self._path)
        except BaseException:
            os.unlink(temporary)
            raise
        logger.debug("preferences_flushed", path=str(self._path), count=len(values))
        self._values = values

    def get(self, key, default=None, /):
        _check(key)
        return self._values.get(key, default)

    def put(self, key, value, /):
        _check(key, value)
        self._flush({**self._values, key: value})

    def remove(self, key, /):
        _check(key)
        if key in self._values:
            self._flush({name: value for name, value in self._values.items() if name != key})

    def keys(self):
        return sorted(self._values)

    def __repr__(self):
        return "json-store(%s)" % self._path


__all__ = (
    "PreferenceStore",
    "MemoryStore",
    "JsonStore",
    "MAX_KEY_LENGTH",
    "MAX_VALUE_LENGTH",
)
