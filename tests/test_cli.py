"""
Tests for the command-line runner in scripts/run_simulation.py.
"""
import importlib.util
from pathlib import Path

import pytest

SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "run_simulation.py"


@pytest.fixture(scope="module")
def cli():
    spec = importlib.util.spec_from_file_location("run_simulation", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_prints_report(cli, capsys):
    assert cli.main(["--trials", "30", "--seed", "1"]) == 0
    out = capsys.readouterr().out
    assert "== Overview ==" in out
    assert "== Tiers ==" in out
    assert "550-600" in out
    assert "legendary" in out


def test_rejects_invalid_trial_count(cli, capsys):
    assert cli.main(["--trials", "0"]) == 2
    assert "Trial count" in capsys.readouterr().err
