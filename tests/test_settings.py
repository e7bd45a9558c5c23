"""Tests for settings persistence."""

import json
from datetime import datetime, timedelta

import pytest

from dircompare.core.diff.text_diff import DiffAlgorithm
from dircompare.services.comparison import ComparisonService
from dircompare.services.settings import ApplicationSettings, SettingsManager


def test_defaults_when_missing(tmp_path):
    manager = SettingsManager(tmp_path / 'settings.json')

    settings = manager.settings

    assert settings.scan.max_workers == 1
    assert settings.text.algorithm == DiffAlgorithm.MYERS
    assert settings.recent_folders == []


def test_round_trip(tmp_path):
    path = tmp_path / 'conf' / 'settings.json'
    manager = SettingsManager(path)
    settings = ApplicationSettings()
    settings.scan.max_workers = 4
    settings.text.algorithm = DiffAlgorithm.SEQUENCE_MATCHER
    settings.text.max_text_size = 1024
    settings.log_level = "DEBUG"

    assert manager.save(settings)

    loaded = SettingsManager(path).settings
    assert loaded.scan.max_workers == 4
    assert loaded.text.algorithm == DiffAlgorithm.SEQUENCE_MATCHER
    assert loaded.text.max_text_size == 1024
    assert loaded.log_level == "DEBUG"


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text('{not json', encoding='utf-8')

    settings = SettingsManager(path).settings

    assert settings == ApplicationSettings()


def test_invalid_values_use_defaults(tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({
        'scan': {'max_workers': -3},
        'text': {'algorithm': 'QUANTUM', 'max_text_size': 'huge'},
        'recent_folders': [{'path': '/x'}, {'path': '/y', 'last_used': '2024-05-01T10:00:00'}],
    }), encoding='utf-8')

    settings = SettingsManager(path).settings

    assert settings.scan.max_workers == 1
    assert settings.text.algorithm == DiffAlgorithm.MYERS
    assert settings.text.max_text_size == 50 * 1024 * 1024
    assert [f.path for f in settings.recent_folders] == ['/y']
    assert settings.recent_folders[0].name == 'y'


def test_recent_folders_are_capped_and_deduplicated(tmp_path):
    path = tmp_path / 'settings.json'
    manager = SettingsManager(path)
    start = datetime(2024, 1, 1)

    for i in range(12):
        manager.add_recent_folder(f'/work/p{i}', when=start + timedelta(minutes=i))
    manager.add_recent_folder('/work/p5', when=start + timedelta(hours=1))

    recent = SettingsManager(path).settings.recent_folders
    assert len(recent) == 10
    assert recent[0].path == '/work/p5'
    assert recent[0].last_used == start + timedelta(hours=1)
    assert [f.path for f in recent].count('/work/p5') == 1
    assert '/work/p0' not in [f.path for f in recent]


@pytest.mark.parametrize("encoding", [42, None, ['utf-8'], '', 'no-such-codec'])
def test_bad_default_encoding_uses_default(tmp_path, encoding):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({'text': {'default_encoding': encoding}, 'log_level': 7}), encoding='utf-8')

    settings = SettingsManager(path).settings

    assert settings.text.default_encoding == 'utf-8'
    assert settings.log_level == 'INFO'


def test_loaded_encoding_reaches_file_reader(tmp_path):
    path = tmp_path / 'settings.json'
    path.write_text(json.dumps({'text': {'default_encoding': 7, 'max_edit_distance': 50}}), encoding='utf-8')
    text_file = tmp_path / 'legacy.txt'
    text_file.write_bytes(b'caf\xe9 cr\xe8me\n')

    service = ComparisonService.from_settings(SettingsManager(path).settings)

    assert service.line_differ.max_edit_distance == 50
    assert service.diff_files(text_file, text_file) is not None
