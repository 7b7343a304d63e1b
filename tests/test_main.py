"""Tests for the command line driver."""

import sys

import pytest

import main
from amrfleet.simulation.engine import SimulationEngine

from conftest import make_scenario


def test_missing_scenario_file_exits_with_error(tmp_path, monkeypatch, capsys):
    missing = tmp_path / "nowhere.yaml"
    monkeypatch.setattr(sys, "argv", ["main.py", "run", str(missing), "-v"])

    with pytest.raises(SystemExit) as excinfo:
        main.main()

    assert excinfo.value.code == 1
    assert "Cannot read scenario" in capsys.readouterr().out


def test_invalid_scenario_file(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("robots:\n  - {id: r, speed: 0}\n")

    assert not main.run_file(str(path), 1.0, 50.0)
    assert "Invalid scenario" in capsys.readouterr().out


def test_rejected_scenario(capsys):
    assert not main.simulate(make_scenario(missions=[]), 1.0, 50.0)
    assert "Scenario has no missions" in capsys.readouterr().out


def test_tick_fault_is_reported(monkeypatch, capsys):
    def broken(self, delta_ms):
        raise RuntimeError("battery model")

    monkeypatch.setattr(SimulationEngine, "_update_battery", broken)

    assert not main.simulate(make_scenario(), 1.0, 100.0)
    assert "Simulation stopped at 0.1s: RuntimeError: battery model" in capsys.readouterr().out
