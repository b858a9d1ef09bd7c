import logging

import numpy as np
import pytest

from bdem3d import DiagnosticsChannel, DiagnosticError, ConfigurationError, Severity
from bdem3d.diagnostics import EXCESSIVE_ANGULAR_STEP, VELOCITY_STEP_TOO_LARGE, ROTREF_DRIFT


def test_warn_policy_logs_and_records(caplog):
    channel = DiagnosticsChannel("warn")
    with caplog.at_level(logging.WARNING, logger="bdem3d.diagnostics"):
        diagnostic = channel.report("ROTATION_NOT_CONVERGED", Severity.WARNING, 3, "stalled", residual=2e-15)
    assert channel.codes() == ["ROTATION_NOT_CONVERGED"]
    assert str(diagnostic) == "[ROTATION_NOT_CONVERGED] particle 3: stalled (residual=2e-15)"
    assert "ROTATION_NOT_CONVERGED" in caplog.text
    channel.clear()
    assert len(channel) == 0


def test_abort_policy_raises():
    channel = DiagnosticsChannel("abort")
    channel.report("NOTE", Severity.INFO, message="informative only")
    with pytest.raises(DiagnosticError) as info:
        channel.report("ROTREF_DRIFT", Severity.WARNING, 0, "drift")
    assert info.value.diagnostic.code == "ROTREF_DRIFT"
    assert len(channel) == 2


def test_unknown_policy():
    with pytest.raises(ConfigurationError):
        DiagnosticsChannel("silent")


def test_kernel_flags_are_decoded():
    channel = DiagnosticsChannel()
    flags = np.array([0, EXCESSIVE_ANGULAR_STEP | ROTREF_DRIFT, VELOCITY_STEP_TOO_LARGE], dtype=np.int32)
    count = channel.report_kernel_flags(flags, "solve_position", dt=0.1)
    assert count == 3
    assert sorted(channel.codes()) == ["EXCESSIVE_ANGULAR_STEP", "ROTREF_DRIFT", "VELOCITY_STEP_TOO_LARGE"]
    assert [d.particle for d in channel.records] == [1, 1, 2]
    assert channel.records[-1].severity == Severity.ERROR
    assert channel.records[-1].values == {"dt": 0.1}


def test_large_angular_step_is_reported(make_solid):
    solid = make_solid([(0, 0, 0)], omegas={0: (30.0, 0.0, 0.0)})
    solid.solve_position(0.01)
    assert "EXCESSIVE_ANGULAR_STEP" in solid.diagnostics.codes()


def test_large_angular_step_aborts(make_solid, config):
    strict = config.set_solver_options(diagnostics="abort")
    solid = make_solid([(0, 0, 0)], config=strict, omegas={0: (30.0, 0.0, 0.0)})
    with pytest.raises(DiagnosticError):
        solid.solve_position(0.01)


def test_quiet_run_has_no_diagnostics(make_solid):
    solid = make_solid([(0, 0, 0), (1, 0, 0)], omegas={1: (0.0, 0.0, 0.1)})
    for _ in range(5):
        solid.solve_position(0.01)
        solid.solve_vitesse(0.01)
        solid.internal_forces()
    errors = [d for d in solid.diagnostics.records if d.severity >= Severity.ERROR]
    assert errors == []
