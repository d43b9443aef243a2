#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Mindful Moments v1.0 - Core Data Models
Data models with validation and serialisation

Version: 1.0.0
"""

import uuid
from datetime import datetime, date, timedelta
from typing import Dict, List, Optional, Any, Tuple
from dataclasses import dataclass, field, asdict, replace
from enum import Enum
import logging

from mindful.utils.datetime_utils import parse_time_of_day

logger = logging.getLogger(__name__)

# ===== ENUMS =====

class MeditationCategory(Enum):
    """Meditation categories"""
    FOCUS = "focus"
    SLEEP = "sleep"
    ANXIETY = "anxiety"
    MORNING = "morning"
    CUSTOM = "custom"

    @property
    def icon(self) -> str:
        return {
            MeditationCategory.FOCUS: "brain.head.profile",
            MeditationCategory.SLEEP: "moon.zzz.fill",
            MeditationCategory.ANXIETY: "heart.circle",
            MeditationCategory.MORNING: "sunrise.fill",
            MeditationCategory.CUSTOM: "plus.circle",
        }[self]

class AmbientSound(Enum):
    """Short looping environmental sounds tied to a session"""
    NONE = "none"
    RAIN = "rain"
    WAVES = "waves"
    FOREST = "forest"
    WHITE_NOISE = "white_noise"

    @property
    def file_name(self) -> Optional[str]:
        if self == AmbientSound.NONE:
            return None
        return f"{self.value}.mp3"

class MusicTrack(Enum):
    """Background music tracks"""
    PEACEFUL_PIANO = "peaceful_piano"
    AMBIENT_GUITAR = "ambient_guitar"
    SINGING_BOWL = "singing_bowl"

    @property
    def file_name(self) -> str:
        return f"{self.value}.mp3"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ").title()

class AppTheme(Enum):
    """Colour themes"""
    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Invalid model data"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 1000, field_name: str = "text") -> str:
    """Validate a text field"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must be at least {min_length} characters")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")

    return text

def validate_enum_value(value: str, enum_class: type, field_name: str = "value") -> str:
    """Validate an enum value stored by its string"""
    if isinstance(value, Enum):
        value = value.value
    try:
        enum_class(value)
        return value
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} must be one of: {valid_values}")

def _now_iso() -> str:
    return datetime.now().isoformat()

# ===== CATALOG =====

@dataclass
class MeditationEntry:
    """A user-facing meditation definition"""
    entry_id: str
    title: str
    duration: float  # seconds
    description: str = ""
    category: str = MeditationCategory.CUSTOM.value
    ambient_sound: str = AmbientSound.NONE.value
    is_favorite: bool = False
    created_at: str = field(default_factory=_now_iso)
    last_used_at: Optional[str] = None

    # Progress tracking
    completed_sessions: int = 0
    total_time_spent: float = 0.0  # seconds

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=1, max_length=100, field_name="title")
        self.description = validate_text(self.description or "", min_length=0, max_length=1000,
                                         field_name="description")
        self.category = validate_enum_value(self.category, MeditationCategory, "category")
        self.ambient_sound = validate_enum_value(self.ambient_sound, AmbientSound, "ambient_sound")

        if not isinstance(self.duration, (int, float)) or isinstance(self.duration, bool) or self.duration <= 0:
            raise ValidationError("duration must be a positive number of seconds")

        self.completed_sessions = max(0, int(self.completed_sessions))
        self.total_time_spent = max(0.0, float(self.total_time_spent))

    @property
    def ambient_sound_enum(self) -> AmbientSound:
        return AmbientSound(self.ambient_sound)

    @property
    def has_ambient_sound(self) -> bool:
        return self.ambient_sound != AmbientSound.NONE.value

    def record_completion(self, duration: float, when: Optional[datetime] = None) -> None:
        """Update progress counters after a completed session"""
        self.completed_sessions += 1
        self.total_time_spent += max(0.0, float(duration))
        self.last_used_at = (when or datetime.now()).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MeditationEntry":
        try:
            return cls(
                entry_id=data["entry_id"],
                title=data["title"],
                duration=data["duration"],
                description=data.get("description", ""),
                category=data.get("category", MeditationCategory.CUSTOM.value),
                ambient_sound=data.get("ambient_sound", AmbientSound.NONE.value),
                is_favorite=data.get("is_favorite", False),
                created_at=data.get("created_at", _now_iso()),
                last_used_at=data.get("last_used_at"),
                completed_sessions=data.get("completed_sessions", 0),
                total_time_spent=data.get("total_time_spent", 0.0)
            )
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Could not load meditation entry: {e}")

    @classmethod
    def create(cls, title: str, duration: float, description: str = "",
               category: str = MeditationCategory.CUSTOM.value,
               ambient_sound: str = AmbientSound.NONE.value,
               is_favorite: bool = False) -> "MeditationEntry":
        """Create a new entry with a fresh id"""
        return cls(
            entry_id=str(uuid.uuid4()),
            title=title,
            duration=duration,
            description=description,
            category=category,
            ambient_sound=ambient_sound,
            is_favorite=is_favorite
        )

# ===== PREFERENCES =====

@dataclass(frozen=True)
class UserPreferences:
    """User settings. Immutable: every change produces a new instance."""
    notifications_enabled: bool = True
    daily_reminder_time: str = "08:00"
    theme: str = AppTheme.SYSTEM.value
    haptic_feedback: bool = True
    ambient_sounds_enabled: bool = True
    default_ambient_sound: str = AmbientSound.NONE.value
    default_session_duration: float = 300.0  # 5 minutes
    auto_start_breathing: bool = False

    # Background music
    background_music_enabled: bool = True
    selected_track: str = MusicTrack.PEACEFUL_PIANO.value
    background_music_volume: float = 0.5

    def __post_init__(self):
        # Soft corrections, like any other settings screen would apply
        try:
            AppTheme(self.theme)
        except ValueError:
            object.__setattr__(self, "theme", AppTheme.SYSTEM.value)

        try:
            parse_time_of_day(self.daily_reminder_time)
        except (ValueError, AttributeError):
            object.__setattr__(self, "daily_reminder_time", "08:00")

        try:
            AmbientSound(self.default_ambient_sound)
        except ValueError:
            object.__setattr__(self, "default_ambient_sound", AmbientSound.NONE.value)

        try:
            MusicTrack(self.selected_track)
        except ValueError:
            object.__setattr__(self, "selected_track", MusicTrack.PEACEFUL_PIANO.value)

        if not isinstance(self.default_session_duration, (int, float)) or self.default_session_duration <= 0:
            object.__setattr__(self, "default_session_duration", 300.0)

        volume = float(self.background_music_volume)
        object.__setattr__(self, "background_music_volume", max(0.0, min(1.0, volume)))

    def reminder_hour_minute(self) -> Tuple[int, int]:
        return parse_time_of_day(self.daily_reminder_time)

    def with_changes(self, **changes: Any) -> "UserPreferences":
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserPreferences":
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

# ===== STATISTICS =====

@dataclass
class SessionRecord:
    """One logged meditation session. Append-only."""
    record_id: str
    entry_id: str
    started_at: str
    duration: float
    completed: bool = True

    @property
    def started_datetime(self) -> datetime:
        return datetime.fromisoformat(self.started_at)

    @property
    def session_date(self) -> date:
        return self.started_datetime.date()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SessionRecord":
        return cls(**data)

    @classmethod
    def create(cls, entry_id: str, duration: float, ended_at: Optional[datetime] = None,
               completed: bool = True) -> "SessionRecord":
        """Create a record for a session that ended at `ended_at`"""
        ended_at = ended_at or datetime.now()
        return cls(
            record_id=str(uuid.uuid4()),
            entry_id=entry_id,
            started_at=(ended_at - timedelta(seconds=duration)).isoformat(),
            duration=duration,
            completed=completed
        )

@dataclass
class Achievement:
    """An unlocked achievement"""
    achievement_id: str
    title: str
    description: str
    icon: str
    unlocked: bool = False
    unlocked_at: Optional[str] = None

    def unlock(self, when: Optional[datetime] = None) -> None:
        if self.unlocked:
            return
        self.unlocked = True
        self.unlocked_at = (when or datetime.now()).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Achievement":
        return cls(**data)

@dataclass
class UserStatistics:
    """Session log, streaks, mindful time and achievements"""
    session_history: List[SessionRecord] = field(default_factory=list)
    achievements: List[Achievement] = field(default_factory=list)
    daily_goal_seconds: float = 600.0  # 10 minutes
    current_streak: int = 0
    longest_streak: int = 0
    total_mindful_seconds: float = 0.0
    last_session_date: Optional[str] = None  # YYYY-MM-DD
    entry_session_counts: Dict[str, int] = field(default_factory=dict)

    def __post_init__(self):
        self.current_streak = max(0, self.current_streak)
        self.longest_streak = max(self.longest_streak, self.current_streak)
        self.total_mindful_seconds = max(0.0, float(self.total_mindful_seconds))
        if self.daily_goal_seconds <= 0:
            self.daily_goal_seconds = 600.0

    # ===== PROPERTIES =====

    @property
    def total_sessions(self) -> int:
        return len(self.session_history)

    @property
    def last_session_day(self) -> Optional[date]:
        return date.fromisoformat(self.last_session_date) if self.last_session_date else None

    # ===== METHODS =====

    def has_achievement(self, achievement_id: str) -> bool:
        return any(a.achievement_id == achievement_id for a in self.achievements)

    def seconds_on(self, day: date) -> float:
        """Mindful seconds logged on a given calendar day"""
        return sum(r.duration for r in self.session_history if r.completed and r.session_date == day)

    def daily_goal_progress(self, day: date) -> float:
        return min(1.0, self.seconds_on(day) / self.daily_goal_seconds)

    def weekly_seconds(self, today: date) -> List[float]:
        """Seconds per day for the last 7 days, oldest first"""
        return [self.seconds_on(today - timedelta(days=offset)) for offset in range(6, -1, -1)]

    def sessions_for_entry(self, entry_id: str) -> List[SessionRecord]:
        return [r for r in self.session_history if r.entry_id == entry_id]

    # ===== SERIALIZATION =====

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_history": [r.to_dict() for r in self.session_history],
            "achievements": [a.to_dict() for a in self.achievements],
            "daily_goal_seconds": self.daily_goal_seconds,
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "total_mindful_seconds": self.total_mindful_seconds,
            "last_session_date": self.last_session_date,
            "entry_session_counts": dict(self.entry_session_counts)
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserStatistics":
        try:
            return cls(
                session_history=[SessionRecord.from_dict(r) for r in data.get("session_history", [])],
                achievements=[Achievement.from_dict(a) for a in data.get("achievements", [])],
                daily_goal_seconds=data.get("daily_goal_seconds", 600.0),
                current_streak=data.get("current_streak", 0),
                longest_streak=data.get("longest_streak", 0),
                total_mindful_seconds=data.get("total_mindful_seconds", 0.0),
                last_session_date=data.get("last_session_date"),
                entry_session_counts={str(k): int(v) for k, v in data.get("entry_session_counts", {}).items()}
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ValidationError(f"Could not load statistics: {e}")

# ===== SEED CATALOG =====

_SEED = [
    ("Morning Freshness", 300, "Start the day clear and full of energy.", "morning", "forest"),
    ("Stress Relief Express", 180, "Find quick relaxation in stressful moments.", "anxiety", "rain"),
    ("Deep Sleep", 900, "Glide gently into a restful night.", "sleep", "waves"),
    ("Focus & Concentration", 600, "Sharpen your mind for the tasks ahead.", "focus", "none"),
    ("Moment of Gratitude", 240, "Cultivate gratitude for more joy in life.", "custom", "forest"),
    ("Finding Inner Calm", 480, "A short break to return to your centre.", "anxiety", "rain"),
    ("Creativity Boost", 720, "Open your mind to new ideas and inspiration.", "custom", "waves"),
    ("Learning to Let Go", 540, "Free yourself from heavy thoughts and feelings.", "custom", "none"),
    ("Recharge", 360, "Refill your batteries with positive energy.", "focus", "forest"),
    ("Evening Unwind", 600, "Let the day fade out and prepare for the night.", "sleep", "rain"),
    ("Quiet Morning", 300, "Start the day relaxed.", "morning", "none"),
    ("Deep Relaxation", 600, "Leave the stress of the day behind.", "sleep", "rain"),
    ("Improve Focus", 480, "Strengthen your ability to concentrate.", "focus", "none"),
    ("Sunrise Meditation", 420, "Begin the day with new energy and clarity.", "morning", "forest"),
    ("Calm Through the Day", 600, "Find inner peace for stressful situations.", "anxiety", "rain"),
    ("Breath Focus", 300, "Arrive in the moment through conscious breathing.", "focus", "waves"),
    ("Self-Compassion", 540, "Meet yourself with kindness.", "custom", "none"),
    ("Evening Gratitude", 360, "Reflect on what you are grateful for today.", "custom", "forest"),
    ("Mental Clarity", 480, "Sort your thoughts for more focus.", "focus", "rain"),
    ("Short Pause", 180, "Relax in just a few minutes.", "anxiety", "none"),
    ("Body Journey", 900, "Feel and relax your whole body.", "sleep", "waves"),
    ("Positive Affirmations", 300, "Build self-confidence with positive thoughts.", "custom", "forest"),
    ("Letting Go at Night", 600, "Release the day and find rest.", "sleep", "rain"),
    ("Creative Pause", 420, "Encourage creativity through relaxation.", "custom", "waves"),
    ("Build Self-Confidence", 480, "Feel strong and self-assured.", "custom", "none"),
    ("Calm in Nature", 600, "Relax with soothing nature sounds.", "morning", "forest"),
    ("Mindful Eating", 300, "Enjoy your food consciously and attentively.", "custom", "none"),
    ("Ocean Breath", 420, "Let the rhythm of the waves carry your breath.", "anxiety", "waves"),
]

def default_catalog() -> List[MeditationEntry]:
    """Seed catalog used when nothing is stored yet"""
    return [
        MeditationEntry.create(
            title=title,
            duration=duration,
            description=description,
            category=category,
            ambient_sound=sound
        )
        for title, duration, description, category, sound in _SEED
    ]

__all__ = [
    'MeditationCategory',
    'AmbientSound',
    'MusicTrack',
    'AppTheme',
    'ValidationError',
    'validate_text',
    'validate_enum_value',
    'MeditationEntry',
    'UserPreferences',
    'SessionRecord',
    'Achievement',
    'UserStatistics',
    'default_catalog'
]
