"""
credentials.py — Per-visitor API key slot
-----------------------------------------

Holds the single API key under a fixed settings key inside a key-value
mapping owned by one visitor (on the page: `st.session_state`). Higher layers
read it once and pass the value explicitly to the identification client;
nothing reads it implicitly at request time.

An operator may configure a seed key, either in the JSON settings file at
SETTINGS_PATH or through OPENAI_API_KEY. The seed only fills an empty slot;
keys entered by visitors are never written back to shared storage.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import MutableMapping, Optional

from config.settings import CREDENTIAL_KEY, OPENAI_API_KEY, SETTINGS_PATH

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, slot: MutableMapping, key: str = CREDENTIAL_KEY):
        self.slot = slot
        self.key = key

    def get(self) -> Optional[str]:
        return self.slot.get(self.key) or None

    def set(self, value: str) -> None:
        """Create or overwrite the stored key. Blank values are rejected."""
        value = (value or "").strip()
        if not value:
            raise ValueError("API key must not be blank")
        self.slot[self.key] = value

    def clear(self) -> None:
        self.slot.pop(self.key, None)

    def has_credential(self) -> bool:
        return self.get() is not None


def load_operator_seed(path: Path = SETTINGS_PATH, key: str = CREDENTIAL_KEY) -> Optional[str]:
    """Seed key from the operator's settings file, else OPENAI_API_KEY, else None."""
    path = Path(path)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError:
            logger.warning("Settings file %s is not valid JSON; ignoring it", path)
            data = {}
        if isinstance(data, dict) and data.get(key):
            return str(data[key]).strip() or None
    return OPENAI_API_KEY or None


def visitor_store(slot: MutableMapping, seed: Optional[str] = None) -> CredentialStore:
    """Store over one visitor's mapping, filled from `seed` when still empty."""
    store = CredentialStore(slot)
    if seed and not store.has_credential():
        store.set(seed)
    return store
