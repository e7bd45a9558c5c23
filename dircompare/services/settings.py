"""
Application settings management.
"""

from __future__ import annotations

import codecs
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from dircompare.core.diff.text_diff import DiffAlgorithm, LineDiffer
from dircompare.core.models import RecentFolder


@dataclass
class ScanSettings:
    """Settings for tree building."""
    max_workers: int = 1


@dataclass
class TextSettings:
    """Settings for file content diffs."""
    algorithm: DiffAlgorithm = DiffAlgorithm.MYERS
    # Above this many line edits MYERS falls back to SequenceMatcher
    max_edit_distance: int = LineDiffer.DEFAULT_MAX_EDIT_DISTANCE
    max_text_size: int = 50 * 1024 * 1024  # 50 MB
    binary_check_size: int = 8192
    default_encoding: str = 'utf-8'


@dataclass
class ApplicationSettings:
    """Main application settings container."""
    scan: ScanSettings = field(default_factory=ScanSettings)
    text: TextSettings = field(default_factory=TextSettings)
    log_level: str = "INFO"
    recent_folders: list[RecentFolder] = field(default_factory=list)
    recent_folders_limit: int = 10


class SettingsManager:
    """Manager for loading/saving application settings."""

    def __init__(self, settings_path: Optional[Path] = None):
        self.settings_path = Path(settings_path) if settings_path else self._get_default_path()
        self._settings: Optional[ApplicationSettings] = None

    @staticmethod
    def _get_default_path() -> Path:
        """Get the default settings file path."""
        if os.name == 'nt':
            # Windows
            app_data = os.environ.get('APPDATA', os.path.expanduser('~'))
            return Path(app_data) / 'dircompare' / 'settings.json'
        else:
            # Linux/Mac
            config_home = os.environ.get('XDG_CONFIG_HOME',
                                         os.path.expanduser('~/.config'))
            return Path(config_home) / 'dircompare' / 'settings.json'

    @property
    def settings(self) -> ApplicationSettings:
        """Get current settings, loading from disk if needed."""
        if self._settings is None:
            self._settings = self.load()
        return self._settings

    def load(self) -> ApplicationSettings:
        """Load settings from disk, falling back to defaults."""
        if not self.settings_path.exists():
            return ApplicationSettings()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return self._from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logging.warning(f"SettingsManager - Could not load {self.settings_path}: {e}")
            return ApplicationSettings()

    def save(self, settings: Optional[ApplicationSettings] = None) -> bool:
        """Save settings to disk."""
        settings = settings or self._settings
        if settings is None:
            return False

        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(self._to_dict(settings), f, indent=2)

            self._settings = settings
            return True

        except OSError as e:
            logging.error(f"SettingsManager - Could not save {self.settings_path}: {e}")
            return False

    def add_recent_folder(self, path: str, when: Optional[datetime] = None) -> RecentFolder:
        """Record a folder as most recently used and persist the list."""
        settings = self.settings
        folder = RecentFolder(
            path=path,
            name=Path(path).name or path,
            last_used=when or datetime.now(),
        )

        recent = [f for f in settings.recent_folders if f.path != path]
        recent.insert(0, folder)
        settings.recent_folders = recent[:settings.recent_folders_limit]

        self.save()
        return folder

    def _to_dict(self, settings: ApplicationSettings) -> dict:
        """Convert settings to dictionary for JSON serialization."""
        return {
            'scan': {
                'max_workers': settings.scan.max_workers,
            },
            'text': {
                'algorithm': settings.text.algorithm.name,
                'max_edit_distance': settings.text.max_edit_distance,
                'max_text_size': settings.text.max_text_size,
                'binary_check_size': settings.text.binary_check_size,
                'default_encoding': settings.text.default_encoding,
            },
            'log_level': settings.log_level,
            'recent_folders': [f.to_dict() for f in settings.recent_folders],
            'recent_folders_limit': settings.recent_folders_limit,
        }

    def _from_dict(self, data: dict) -> ApplicationSettings:
        """Convert dictionary back to settings objects."""
        def get_enum(enum_class: type, value: Any, default):
            if isinstance(value, str):
                try:
                    return enum_class[value]
                except KeyError:
                    return default
            return default

        def get_int(section: dict, key: str, default: int) -> int:
            value = section.get(key, default)
            return value if isinstance(value, int) and value > 0 else default

        def get_str(section: dict, key: str, default: str) -> str:
            value = section.get(key, default)
            return value if isinstance(value, str) and value else default

        def get_encoding(section: dict, key: str, default: str) -> str:
            value = get_str(section, key, default)
            try:
                codecs.lookup(value)
            except LookupError:
                logging.warning(f"SettingsManager - Unknown encoding {value!r}, using {default}")
                return default
            return value

        defaults = TextSettings()
        scan_data = data.get('scan', {})
        text_data = data.get('text', {})

        scan = ScanSettings(
            max_workers=get_int(scan_data, 'max_workers', ScanSettings().max_workers),
        )

        text = TextSettings(
            algorithm=get_enum(DiffAlgorithm, text_data.get('algorithm'), defaults.algorithm),
            max_edit_distance=get_int(text_data, 'max_edit_distance', defaults.max_edit_distance),
            max_text_size=get_int(text_data, 'max_text_size', defaults.max_text_size),
            binary_check_size=get_int(text_data, 'binary_check_size', defaults.binary_check_size),
            default_encoding=get_encoding(text_data, 'default_encoding', defaults.default_encoding),
        )

        recent = []
        for item in data.get('recent_folders', []):
            try:
                recent.append(RecentFolder.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logging.debug(f"SettingsManager - Dropping malformed recent folder {item!r}: {e}")

        return ApplicationSettings(
            scan=scan,
            text=text,
            log_level=get_str(data, 'log_level', 'INFO'),
            recent_folders=recent,
            recent_folders_limit=get_int(data, 'recent_folders_limit', 10),
        )
