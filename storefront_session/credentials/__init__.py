"""Credential ownership and persistence."""

from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from .store import CredentialPair, CredentialStore, SessionView

__all__ = [
    "CredentialPair",
    "CredentialStore",
    "JsonFileStorage",
    "KeyValueStorage",
    "MemoryStorage",
    "SessionView",
]
