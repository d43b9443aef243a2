#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mindful Moments v1.0 - Core Package
Data models, achievements and local storage

Version: 1.0.0
"""

from .models import (
    MeditationCategory,
    AmbientSound,
    MusicTrack,
    AppTheme,
    ValidationError,
    MeditationEntry,
    UserPreferences,
    SessionRecord,
    Achievement,
    UserStatistics,
    default_catalog
)

from .achievements import (
    AchievementRegistry,
    AchievementManager
)

from .storage import (
    StorageError,
    StorageCorruptionError,
    KeyValueStore,
    PersistenceGateway
)

__all__ = [
    'MeditationCategory',
    'AmbientSound',
    'MusicTrack',
    'AppTheme',
    'ValidationError',
    'MeditationEntry',
    'UserPreferences',
    'SessionRecord',
    'Achievement',
    'UserStatistics',
    'default_catalog',
    'AchievementRegistry',
    'AchievementManager',
    'StorageError',
    'StorageCorruptionError',
    'KeyValueStore',
    'PersistenceGateway'
]
