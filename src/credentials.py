"""Gemini API key handling.

Keys are kept as a plain ``list[str]`` everywhere in the application. Only the
persisted form overloads one field with two encodings, for compatibility with
existing stores: a bare string when exactly one key exists, a JSON array
string when there are several.
"""

import json
import logging
import random
from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_KEY = "GEMINI_API_KEY"

MISSING_KEY_MESSAGE = (
    "Chưa có API Key! Vui lòng nhấn vào nút Cài đặt (⚙️) để nhập "
    "Google Gemini API Key."
)


class MissingCredentialError(Exception):
    """Raised before any network call when no usable API key exists."""

    def __init__(self, message: str = MISSING_KEY_MESSAGE):
        super().__init__(message)


def parse_credentials(raw: str | None) -> list[str]:
    """Decode a stored credential value into a list of non-blank keys.

    Args:
        raw: Bare key, JSON array string, or empty.

    Returns:
        Stripped keys in stored order. Blank entries are dropped.
    """
    if not raw or not raw.strip():
        return []

    text = raw.strip()
    if text.startswith("[") and text.endswith("]"):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Stored API key looks like a JSON array but is not valid JSON")
        else:
            if isinstance(parsed, list):
                return [k.strip() for k in parsed if isinstance(k, str) and k.strip()]

    return [text]


def serialize_credentials(keys: list[str]) -> str:
    """Encode keys for persistence (inverse of ``parse_credentials``)."""
    valid_keys = [k.strip() for k in keys if k and k.strip()]
    if not valid_keys:
        return ""
    if len(valid_keys) == 1:
        return valid_keys[0]
    return json.dumps(valid_keys)


def pick_credential(keys: list[str], rng: random.Random | None = None) -> str:
    """Pick one key uniformly at random.

    Args:
        keys: Candidate keys. Blank entries are ignored.
        rng: Optional random source (for tests).

    Returns:
        The chosen key.

    Raises:
        MissingCredentialError: If no usable key exists.
    """
    valid_keys = [k.strip() for k in keys if k and k.strip()]
    if not valid_keys:
        raise MissingCredentialError()
    return (rng or random).choice(valid_keys)


class CredentialStore:
    """File-backed key-value store holding the saved API key entry."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read credential store {self.path}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def load(self) -> list[str]:
        """Load saved keys (empty list when nothing is stored)."""
        return parse_credentials(self._read().get(STORAGE_KEY))

    def save(self, keys: list[str]) -> list[str]:
        """Persist keys and return the cleaned list actually stored."""
        data = self._read()
        data[STORAGE_KEY] = serialize_credentials(keys)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, ensure_ascii=False), encoding="utf-8")
        logger.info(f"Saved {len(parse_credentials(data[STORAGE_KEY]))} API key(s)")
        return parse_credentials(data[STORAGE_KEY])
