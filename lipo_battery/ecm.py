"""
Equivalent circuit of the cell:
    ideal voltage source Em
    parallel short-term resistance R1 and capacitance C1
    series output resistor R0

Positive current is discharge, negative current is charge.
"""

from .battery import validate_finite, validate_timestep
from .parameters import DEFAULT_CALIBRATION, resolve_parameters


class EquivalentCircuitModel:
    def __init__(self, calibration=DEFAULT_CALIBRATION):
        # tables are read-only, one model can serve any number of batteries
        self.calibration = calibration

    def get_parameters(self, battery):
        return resolve_parameters(battery, self.calibration)

    def calculate_terminal_voltage(self, battery, current):
        """
        Estimate the voltage at the output terminals for this draw current.
        Does not change the battery state.
        :param battery: BatteryState
        :param current: draw current (A)
        :return: terminal voltage (V)
        """
        current = validate_finite('current', current)
        params = self.get_parameters(battery)

        # voltage drop across R0
        r0_voltage = params.series_resistance * current
        # voltage across R1, equal to the voltage across C1
        r1_voltage = battery.capacitor_charge / params.parallel_capacitance

        return params.open_circuit_voltage - r1_voltage - r0_voltage

    def update(self, battery, current, dt):
        """
        Advance the electrical state by one forward-Euler step.

        soc and capacitor_charge are updated in place and are not clamped.
        :param battery: BatteryState
        :param current: draw current (A)
        :param dt: timestep (s), positive and finite
        :return: heat dissipated in R0 and R1 over the step (J)
        """
        dt = validate_timestep(dt)
        current = validate_finite('current', current)
        params = self.get_parameters(battery)

        r0_current = current
        r0_voltage = params.series_resistance * r0_current

        c1_voltage = battery.capacitor_charge / params.parallel_capacitance
        r1_voltage = c1_voltage
        r1_current = r1_voltage / params.parallel_resistance
        c1_current = current - r1_current  # current flowing out of C1

        battery.capacitor_charge += c1_current * dt
        # SOC counts the full terminal current, after C1
        battery.soc -= current * dt / battery.capacity

        power = r0_voltage * r0_current + r1_voltage * r1_current
        return power * dt


_default_model = EquivalentCircuitModel()


def estimate_voltage(battery, current):
    """Terminal voltage (V) the battery supplies at this draw current (A)."""
    return _default_model.calculate_terminal_voltage(battery, current)


def step_electrical(battery, current, dt):
    """Advance SOC and capacitor charge by ``dt`` seconds; returns the heat produced (J)."""
    return _default_model.update(battery, current, dt)
