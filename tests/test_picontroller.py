from pcsctl.fixedpoint import from_int
from pcsctl.picontroller import PiController


def make(kp, ki, low=-1000, high=1000, frequency=1):
    ctrl = PiController()
    ctrl.set_gains(kp, ki)
    ctrl.set_min_max(low, high)
    ctrl.frequency = frequency
    return ctrl


def test_default_limits_clamp_to_zero():
    ctrl = PiController()
    ctrl.set_gains(5, 5)
    ctrl.ref = from_int(10)
    assert ctrl.run(0) == 0


def test_proportional_response():
    ctrl = make(1, 0)
    ctrl.ref = from_int(10)
    assert ctrl.run(0) == 10


def test_output_clamped_to_limits():
    ctrl = make(100, 0, low=-5, high=5)
    ctrl.ref = from_int(10)
    assert ctrl.run(0) == 5
    assert ctrl.run(from_int(20)) == -5


def test_integrator_accumulates_when_unsaturated():
    ctrl = make(0, 1)
    ctrl.ref = from_int(10)
    first = ctrl.run(0)
    second = ctrl.run(0)
    assert first == 10
    assert second == 2 * first


def test_anti_windup_stops_integration_when_saturated():
    ctrl = make(0, 1, low=-5, high=5)
    ctrl.ref = from_int(10)
    assert ctrl.run(0) == 5
    assert ctrl.run(0) == 5
    ctrl.set_min_max(-1000, 1000)
    assert ctrl.run(0) == 10


def test_reset_integrator():
    ctrl = make(0, 1)
    ctrl.ref = from_int(10)
    ctrl.run(0)
    ctrl.reset_integrator()
    assert ctrl.esum == 0
    assert ctrl.run(0) == 10


def test_preload_integrator_yields_output():
    ctrl = make(0, 2, frequency=10)
    ctrl.preload_integrator(50)
    ctrl.ref = 0
    assert ctrl.run(0) == 50


def test_preload_with_zero_ki_clears_integrator():
    ctrl = make(0, 0)
    ctrl.esum = 1234
    ctrl.preload_integrator(50)
    assert ctrl.esum == 0


def test_proportional_only_leaves_integrator_alone():
    ctrl = make(1, 1)
    ctrl.ref = from_int(3)
    assert ctrl.run_proportional_only(0) == 3
    assert ctrl.esum == 0


def test_proportional_only_clamps():
    ctrl = make(50, 0, low=-7, high=7)
    ctrl.ref = from_int(-10)
    assert ctrl.run_proportional_only(0) == -7