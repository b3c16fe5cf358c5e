import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from shopscript.core.logging import get_logger

logger = get_logger(__name__)

ACCESS_TOKEN_KEY = "access_token"
REFRESH_TOKEN_KEY = "refresh_token"


class TokenStore(ABC):
    """
    Abstract durable key-value storage for session tokens.

    Implementations must survive process restarts and must not be readable
    by other users (platform secure-storage semantics).
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read a stored value.

        Returns:
            The stored string, or None when the key is absent
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove `key`. Deleting an absent key is a no-op."""
        pass


class TokenStoreError(Exception):
    """Exception raised when a token store cannot read or persist its data."""

    def __init__(self, message: str, path: Path = None, original_error: Exception = None):
        self.path = path
        self.original_error = original_error
        super().__init__(message)


class InMemoryTokenStore(TokenStore):
    """Process-local store. Used in tests and for ephemeral sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._values: Dict[str, str] = dict(initial or {})

    def read(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def write(self, key: str, value: str) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._values


class FileTokenStore(TokenStore):
    """
    JSON file store restricted to the owning user (mode 0600).

    Writes go to a temporary sibling file that is atomically renamed over
    the target, so a crash never leaves a half-written token file.
    """

    def __init__(self, path: Path):
        self.path = Path(path).expanduser()

    def read(self, key: str) -> Optional[str]:
        value = self._load().get(key)
        return value if isinstance(value, str) else None

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._save(data)

    def delete(self, key: str) -> None:
        data = self._load()
        if key in data:
            del data[key]
            self._save(data)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise TokenStoreError(
                f"Failed to read token file {self.path}: {e}",
                path=self.path,
                original_error=e
            ) from e
        if not isinstance(data, dict):
            logger.warning(f"Ignoring malformed token file {self.path}")
            return {}
        return data

    def _save(self, data: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd = os.open(tmp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise TokenStoreError(
                f"Failed to write token file {self.path}: {e}",
                path=self.path,
                original_error=e
            ) from e
