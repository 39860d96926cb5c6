import glob
import json
import os

import pytest

from lipo_battery.cli import main


def test_voltage_command(capsys):
    assert main(['voltage', '--current', '1.8', '--soc', '1.0', '--temperature', '-20']) == 0
    assert "2.9940 V" in capsys.readouterr().out


def test_params_command(capsys):
    assert main(['params', '--soc', '1.0', '--temperature', '-20']) == 0
    out = capsys.readouterr().out
    assert "Em = 4.200000 V" in out
    assert "R0 = 0.670000 ohm" in out


def test_simulate_prints_each_step(capsys):
    assert main(['simulate', '--duration', '120']) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert len(lines) == 10
    assert lines[0].startswith("0.00 minutes:")
    assert "deg C" in lines[-1]


def test_simulate_exports(tmp_path, capsys):
    output = str(tmp_path / "out")
    assert main(['simulate', '--quiet', '--csv', '--json', '--plot', '--output', output,
                 '--duration', '600', '--cells', '2']) == 0
    assert capsys.readouterr().out == ''

    run_dirs = glob.glob(os.path.join(output, '*'))
    assert len(run_dirs) == 1
    for name in ('trajectory.csv', 'statistics.csv', 'simulation.json', 'trajectory.png'):
        assert os.path.exists(os.path.join(run_dirs[0], name))

    with open(os.path.join(run_dirs[0], 'simulation.json'), encoding='utf-8') as f:
        data = json.load(f)
    assert data['config']['cells_in_series'] == 2
    assert len(data['trajectory']) == 50


def test_simulate_with_config_file(tmp_path, capsys):
    path = tmp_path / "sim.json"
    path.write_text(json.dumps({'duration': 60.0, 'dt': 6.0}), encoding='utf-8')
    assert main(['simulate', '--config', str(path)]) == 0
    assert len(capsys.readouterr().out.strip().splitlines()) == 10


def test_missing_config_file_fails(tmp_path):
    assert main(['simulate', '--config', str(tmp_path / 'missing.json')]) == 1


def test_invalid_capacity_fails():
    assert main(['voltage', '--current', '1.0', '--capacity', '0']) == 1


def test_no_command_fails(capsys):
    assert main([]) == 1


@pytest.mark.parametrize("duration", ['inf', 'nan'])
def test_non_finite_duration_fails(duration):
    assert main(['simulate', '--quiet', '--duration', duration]) == 1


def test_nan_current_fails():
    assert main(['voltage', '--current', 'nan']) == 1
