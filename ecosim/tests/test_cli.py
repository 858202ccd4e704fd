"""
Test the headless command-line runner.
"""

import json
import pytest

from ecosim.cli import main, parse_add
from ecosim.data_types import Kind


def json_payload(output: str) -> dict:
    """Final stats JSON printed after the log lines"""
    return json.loads(output[output.index('{'):])


def test_run_prints_json_stats(capsys):
    code = main(['--seconds', '1', '--seed', '3', '--empty', '--add', 'plant=5', '--json'])

    assert code == 0
    stats = json_payload(capsys.readouterr().out)
    assert stats['cycle_count'] == 30
    assert stats['plant_count'] >= 5


def test_lockstep_mode(capsys):
    code = main(['--seconds', '0.5', '--fps', '64', '--mode', 'lockstep', '--seed', '1', '--json'])

    assert code == 0
    assert json_payload(capsys.readouterr().out)['cycle_count'] == 32


def test_summary_lines(capsys):
    code = main(['--seconds', '0.5', '--fps', '64', '--mode', 'lockstep', '--seed', '2', '--summary-every', '10'])

    output = capsys.readouterr().out
    assert code == 0
    assert output.count('[Population]') == 3
    assert '[OK] Ran 32 ticks (lockstep)' in output


def test_capped_add_warns(tmp_path, capsys):
    config = tmp_path / "tiny.yaml"
    config.write_text("population:\n  caps:\n    carnivore: 2\n  initial: {}\n")

    code = main(['--config', str(config), '--seconds', '0', '--add', 'carnivore=5'])

    assert code == 0
    assert "created 2" in capsys.readouterr().out


def test_missing_config_fails(tmp_path, capsys):
    code = main(['--config', str(tmp_path / 'missing.yaml')])

    assert code == 2
    assert '[FAIL]' in capsys.readouterr().err


@pytest.mark.parametrize("value", ['fungus=3', 'plant', 'plant=many'])
def test_bad_add_rejected(value):
    with pytest.raises(SystemExit):
        main(['--add', value])


def test_parse_add():
    assert parse_add('Herbivore=4') == (Kind.HERBIVORE, 4)
