"""Tests for the structured JSON-lines logger."""

import json
import logging

from segmerge.utils.structured_logger import StructuredLogger, create_structured_logger


def test_json_entries_carry_session_context(tmp_path):
    with StructuredLogger('segmerge.test', log_dir=tmp_path) as logger:
        logger.set_session_context(host='device-1')
        logger.info('split_completed', source='a.bin', part_count=2)
        logger.warning('volume_rejected', path='/mnt/x', reason='not writable')

    lines = logger.json_log_path.read_text(encoding='utf-8').splitlines()
    entries = [json.loads(line) for line in lines]
    assert [e['level'] for e in entries] == ['INFO', 'WARNING']
    assert entries[0]['event'] == 'split_completed'
    assert entries[0]['part_count'] == 2
    assert entries[1]['host'] == 'device-1'
    assert 'session_id' in entries[0]


def test_console_only_without_log_dir(caplog):
    """Test that without a log dir events still reach the standard logger."""
    base, assembly, _ = create_structured_logger()

    with caplog.at_level(logging.INFO, logger='segmerge'):
        assembly.merge_completed('/tmp/out.bin', 3, 2048, 0.5)

    assert base.json_log_path is None
    assert '[merge_completed]' in caplog.text
    assert 'size_bytes=2048' in caplog.text
