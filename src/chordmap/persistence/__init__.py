"""Profile persistence: record codec and the JSON profile store."""

from .codec import PersistenceCodec, parse_records
from .profiles import (
    DEFAULT_PROFILE,
    STORE_ENV,
    ProfileStore,
    default_store_path,
)

__all__ = [
    "PersistenceCodec",
    "parse_records",
    "DEFAULT_PROFILE",
    "STORE_ENV",
    "ProfileStore",
    "default_store_path",
]
