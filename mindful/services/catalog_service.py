"""
Meditation catalog: the user-visible list of entries
"""

import logging
from datetime import datetime
from typing import List, Optional

from mindful.core.models import MeditationEntry, MeditationCategory
from mindful.core.storage import PersistenceGateway

logger = logging.getLogger(__name__)


class CatalogStore:
    """Meditation entries keyed by id. Every mutation is persisted."""

    def __init__(self, gateway: PersistenceGateway, entries: Optional[List[MeditationEntry]] = None):
        self.gateway = gateway
        self._entries: List[MeditationEntry] = list(entries) if entries is not None else []

    @classmethod
    def load(cls, gateway: PersistenceGateway) -> "CatalogStore":
        entries = gateway.load_catalog()
        logger.info(f"📚 Catalog loaded: {len(entries)} entries")
        return cls(gateway, entries)

    @property
    def entries(self) -> List[MeditationEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, entry_id: str) -> Optional[MeditationEntry]:
        for entry in self._entries:
            if entry.entry_id == entry_id:
                return entry
        return None

    # ===== MUTATIONS =====

    def add(self, entry: MeditationEntry) -> MeditationEntry:
        if self.get(entry.entry_id) is not None:
            raise ValueError(f"Entry {entry.entry_id} already exists")

        entry.created_at = datetime.now().isoformat()
        self._entries.append(entry)
        self.save()
        logger.info(f"➕ Added meditation: {entry.title}")
        return entry

    def update(self, entry: MeditationEntry) -> bool:
        """Replace an entry by id; False if unknown"""
        for index, existing in enumerate(self._entries):
            if existing.entry_id == entry.entry_id:
                self._entries[index] = entry
                self.save()
                return True
        return False

    def delete(self, entry_id: str) -> bool:
        """Explicit delete; session records keep their entry_id"""
        initial_count = len(self._entries)
        self._entries = [e for e in self._entries if e.entry_id != entry_id]

        if len(self._entries) < initial_count:
            self.save()
            logger.info(f"🗑️ Deleted meditation {entry_id}")
            return True
        return False

    def toggle_favorite(self, entry_id: str) -> Optional[bool]:
        entry = self.get(entry_id)
        if entry is None:
            return None
        entry.is_favorite = not entry.is_favorite
        self.save()
        return entry.is_favorite

    def record_completion(self, entry_id: str, duration: float, when: Optional[datetime] = None) -> bool:
        entry = self.get(entry_id)
        if entry is None:
            logger.warning(f"⚠️ Completed session for unknown entry {entry_id}")
            return False
        entry.record_completion(duration, when)
        self.save()
        return True

    # ===== QUERIES =====

    def by_category(self, category: MeditationCategory) -> List[MeditationEntry]:
        return [e for e in self._entries if e.category == category.value]

    def favorites(self) -> List[MeditationEntry]:
        return [e for e in self._entries if e.is_favorite]

    def search(self, text: str) -> List[MeditationEntry]:
        query = text.strip().lower()
        if not query:
            return self.entries
        return [
            e for e in self._entries
            if query in e.title.lower() or query in e.description.lower()
        ]

    def recently_used(self, limit: int = 5) -> List[MeditationEntry]:
        used = [e for e in self._entries if e.last_used_at]
        used.sort(key=lambda e: e.last_used_at, reverse=True)
        return used[:limit]

    def save(self) -> None:
        self.gateway.save_catalog(self._entries)
