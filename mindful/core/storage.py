#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mindful Moments v1.0 - Local Storage
Key-value blob store and the persistence gateway for catalog, statistics
and preferences

Version: 1.0.0
"""

import json
import shutil
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Any, Callable, TypeVar
from dataclasses import dataclass
import logging

from mindful.core.models import (
    MeditationEntry, UserPreferences, UserStatistics, ValidationError, default_catalog
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ===== EXCEPTIONS =====

class StorageError(Exception):
    """Base storage error"""
    pass

class StorageCorruptionError(StorageError):
    """A stored blob could not be decoded"""
    pass

# ===== HELPER CLASSES =====

@dataclass
class StorageStats:
    """Storage counters"""
    save_count: int = 0
    load_count: int = 0
    fallback_count: int = 0
    error_count: int = 0
    last_save: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'save_count': self.save_count,
            'load_count': self.load_count,
            'fallback_count': self.fallback_count,
            'error_count': self.error_count,
            'last_save': self.last_save
        }

class KeyValueStore:
    """One JSON file per key inside a data directory"""

    def __init__(self, data_dir: Path, keep_corrupted: bool = True):
        self.data_dir = Path(data_dir)
        self.keep_corrupted = keep_corrupted
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def read(self, key: str) -> Optional[Any]:
        """Decoded JSON for a key, None if absent"""
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise StorageCorruptionError(f"Blob '{key}' is corrupted: {e}")
        except OSError as e:
            raise StorageError(f"Failed to read blob '{key}': {e}")

    def write(self, key: str, value: Any) -> None:
        """Atomic write through a temp file"""
        path = self.path_for(key)
        temp_file = path.with_suffix('.tmp')

        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(value, f, ensure_ascii=False, indent=2)

            temp_file.replace(path)

        except (OSError, TypeError, ValueError) as e:
            if temp_file.exists():
                temp_file.unlink()
            raise StorageError(f"Failed to write blob '{key}': {e}")

    def delete(self, key: str) -> bool:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def quarantine(self, key: str) -> Optional[Path]:
        """Move a corrupted blob aside (or drop it)"""
        path = self.path_for(key)
        if not path.exists():
            return None

        if not self.keep_corrupted:
            path.unlink()
            return None

        backup_name = f"{key}.corrupted-{datetime.now().strftime('%Y%m%d_%H%M%S_%f')}.json"
        backup_path = self.data_dir / backup_name
        shutil.move(str(path), str(backup_path))
        logger.warning(f"🔄 Corrupted blob moved to {backup_path}")
        return backup_path

# ===== MIGRATIONS =====

class BlobEnvelope:
    """Versioned wrapper around every stored blob"""

    VERSION_KEY = "__version__"
    DATA_KEY = "data"
    CURRENT_VERSION = 1

    @classmethod
    def wrap(cls, data: Any) -> Dict[str, Any]:
        return {cls.VERSION_KEY: cls.CURRENT_VERSION, cls.DATA_KEY: data}

    @classmethod
    def unwrap(cls, blob: Any) -> Any:
        if not isinstance(blob, dict) or cls.DATA_KEY not in blob:
            raise StorageCorruptionError("Blob has no data envelope")

        version = blob.get(cls.VERSION_KEY)
        if version != cls.CURRENT_VERSION:
            raise StorageCorruptionError(f"Unsupported blob version: {version}")

        return blob[cls.DATA_KEY]

# ===== PERSISTENCE GATEWAY =====

class PersistenceGateway:
    """
    Serialises the three stores to independent blobs.

    A missing or undecodable blob falls back to that store's default
    (seed catalog, fresh statistics, default preferences) without
    affecting the other two.
    """

    def __init__(self, store: KeyValueStore, catalog_key: str = "catalog",
                 statistics_key: str = "statistics", preferences_key: str = "preferences"):
        self.store = store
        self.catalog_key = catalog_key
        self.statistics_key = statistics_key
        self.preferences_key = preferences_key
        self.stats = StorageStats()

    # ===== CATALOG =====

    def save_catalog(self, entries: List[MeditationEntry]) -> None:
        self._save(self.catalog_key, [entry.to_dict() for entry in entries])

    def load_catalog(self) -> List[MeditationEntry]:
        return self._load(
            self.catalog_key,
            lambda data: [MeditationEntry.from_dict(item) for item in data],
            default_catalog
        )

    # ===== STATISTICS =====

    def save_statistics(self, statistics: UserStatistics) -> None:
        self._save(self.statistics_key, statistics.to_dict())

    def load_statistics(self) -> UserStatistics:
        return self._load(self.statistics_key, UserStatistics.from_dict, UserStatistics)

    # ===== PREFERENCES =====

    def save_preferences(self, preferences: UserPreferences) -> None:
        self._save(self.preferences_key, preferences.to_dict())

    def load_preferences(self) -> UserPreferences:
        return self._load(self.preferences_key, UserPreferences.from_dict, UserPreferences)

    # ===== BULK =====

    def save_all(self, entries: List[MeditationEntry], statistics: UserStatistics,
                 preferences: UserPreferences) -> None:
        self.save_catalog(entries)
        self.save_statistics(statistics)
        self.save_preferences(preferences)
        logger.debug("💾 All stores saved")

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.to_dict()

    # ===== INTERNALS =====

    def _save(self, key: str, data: Any) -> None:
        try:
            self.store.write(key, BlobEnvelope.wrap(data))
        except StorageError as e:
            self.stats.error_count += 1
            logger.error(f"❌ Failed to save '{key}': {e}")
            raise

        self.stats.save_count += 1
        self.stats.last_save = datetime.now().isoformat()

    def _load(self, key: str, decode: Callable[[Any], T], default: Callable[[], T]) -> T:
        self.stats.load_count += 1

        try:
            blob = self.store.read(key)
        except StorageCorruptionError as e:
            logger.error(f"❌ {e}")
            return self._fallback(key, default, corrupted=True)
        except StorageError as e:
            logger.error(f"❌ {e}")
            return self._fallback(key, default)

        if blob is None:
            logger.info(f"📂 No stored '{key}', using defaults")
            return self._fallback(key, default)

        try:
            return decode(BlobEnvelope.unwrap(blob))
        except (StorageCorruptionError, ValidationError, KeyError, TypeError, ValueError, AttributeError) as e:
            logger.error(f"❌ Failed to decode '{key}': {e}")
            return self._fallback(key, default, corrupted=True)

    def _fallback(self, key: str, default: Callable[[], T], corrupted: bool = False) -> T:
        self.stats.fallback_count += 1
        if corrupted:
            self.stats.error_count += 1
            try:
                self.store.quarantine(key)
            except OSError as e:
                logger.error(f"❌ Could not move corrupted '{key}' aside: {e}")
        return default()

__all__ = [
    'StorageError',
    'StorageCorruptionError',
    'StorageStats',
    'KeyValueStore',
    'BlobEnvelope',
    'PersistenceGateway'
]
