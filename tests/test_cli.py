"""Tests for the Typer command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from segmerge import __version__
from segmerge.cli.app import app
from segmerge.storage.config_manager import ConfigManager

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    """Config file isolated from the user's real configuration."""
    return tmp_path / 'conf' / 'config.ini'


def test_version():
    result = runner.invoke(app, ['--version'])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_split_then_merge(config_file, make_source, tmp_path):
    """Test splitting a file and merging it back by part count."""
    source = make_source(10_001, name='movie.mp4')

    result = runner.invoke(app, ['--config', str(config_file), 'split', source, '-n', '4'])

    assert result.exit_code == 0, result.output
    assert (tmp_path / 'movie.mp4.3.part').stat().st_size == 2501

    for i in range(4):
        (tmp_path / f'movie.mp4.{i}.part').rename(tmp_path / f'copy.bin.{i}.part')
    target = tmp_path / 'copy.bin'
    result = runner.invoke(
        app, ['--config', str(config_file), 'merge', str(target), '--count', '4']
    )

    assert result.exit_code == 0, result.output
    with open(source, 'rb') as f:
        assert target.read_bytes() == f.read()


def test_merge_explicit_parts(config_file, tmp_path):
    a = tmp_path / 'a.part'
    a.write_bytes(b'hello ')
    b = tmp_path / 'b.part'
    b.write_bytes(b'world')
    target = tmp_path / 'out.txt'

    result = runner.invoke(
        app, ['--config', str(config_file), 'merge', str(target), str(a), str(b), '--atomic']
    )

    assert result.exit_code == 0, result.output
    assert target.read_bytes() == b'hello world'


def test_merge_missing_part(config_file, tmp_path):
    """Test that a missing part exits non-zero and leaves no target."""
    target = tmp_path / 'out.bin'

    result = runner.invoke(
        app, ['--config', str(config_file), 'merge', str(target), str(tmp_path / 'x.part')]
    )

    assert result.exit_code == 1
    assert 'PartMissing' in result.output
    assert not target.exists()


def test_merge_without_parts(config_file, tmp_path):
    result = runner.invoke(app, ['--config', str(config_file), 'merge', str(tmp_path / 'out')])

    assert result.exit_code == 1


def test_split_missing_source(config_file, tmp_path):
    result = runner.invoke(
        app, ['--config', str(config_file), 'split', str(tmp_path / 'absent.bin')]
    )

    assert result.exit_code == 1
    assert 'IOFailure' in result.output


def test_split_too_many_parts(config_file, make_source):
    source = make_source(2)

    result = runner.invoke(app, ['--config', str(config_file), 'split', source, '-n', '5'])

    assert result.exit_code == 1


def test_volumes_lists_configured_paths(config_file, tmp_path):
    volume = tmp_path / 'usb'
    volume.mkdir()
    ConfigManager(config_file).save_new_config({'volume_paths': [str(volume)]})

    result = runner.invoke(app, ['--config', str(config_file), 'volumes'])

    assert result.exit_code == 0, result.output
    assert 'Writable Storage' in result.output


def test_volumes_none_available(config_file, tmp_path, monkeypatch):
    """Test that an empty discovery is reported, not raised."""
    missing = str(tmp_path / 'missing')
    ConfigManager(config_file).save_new_config(
        {
            'default_external_path': missing,
            'fallback_external_path': missing,
            'mount_table_path': missing,
            'vold_config_paths': [missing],
        }
    )
    monkeypatch.delenv('EXTERNAL_STORAGE', raising=False)
    monkeypatch.delenv('SECONDARY_STORAGE', raising=False)
    monkeypatch.delenv('EMULATED_STORAGE_TARGET', raising=False)

    result = runner.invoke(app, ['--config', str(config_file), 'volumes'])

    assert result.exit_code == 1
    assert 'No writable storage available' in result.output


def test_init_and_validate(config_file):
    result = runner.invoke(app, ['--config', str(config_file), 'init'])

    assert result.exit_code == 0, result.output
    assert config_file.is_file()

    result = runner.invoke(app, ['--config', str(config_file), 'validate'])

    assert result.exit_code == 0, result.output
    assert 'valid' in result.output


def test_init_refuses_overwrite_without_confirmation(config_file):
    ConfigManager(config_file).save_new_config({'buffer_size': 1024})

    result = runner.invoke(app, ['--config', str(config_file), 'init'], input='n\n')

    assert result.exit_code != 0
    assert ConfigManager(config_file).load_config().buffer_size == 1024


def test_validate_reports_invalid_config(config_file):
    config_file.parent.mkdir(parents=True)
    config_file.write_text('[DEFAULT]\nbuffer_size = 1\n')

    result = runner.invoke(app, ['--config', str(config_file), 'validate'])

    assert result.exit_code == 1


def test_log_dir_writes_events(config_file, make_source, tmp_path):
    """Test that --log-dir records structured events as JSON lines."""
    source = make_source(100)
    log_dir = tmp_path / 'logs'

    result = runner.invoke(
        app,
        ['--config', str(config_file), '--log-dir', str(log_dir), 'split', source, '-n', '2'],
    )

    assert result.exit_code == 0, result.output
    (log_file,) = log_dir.glob('segmerge_*.jsonl')
    events = [json.loads(line)['event'] for line in log_file.read_text().splitlines()]
    assert 'split_completed' in events
