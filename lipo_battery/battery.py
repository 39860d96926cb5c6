import math
import numbers


class InvalidConfigurationError(ValueError):
    """Raised when a model is built or stepped with physically meaningless inputs."""


def validate_timestep(dt):
    # dt must be a positive, finite number of seconds
    if not isinstance(dt, numbers.Real) or not math.isfinite(dt) or dt <= 0:
        raise InvalidConfigurationError(f"dt must be positive and finite, got {dt!r}")
    return float(dt)


def validate_finite(name, value):
    # any sign is fine, NaN and infinity are not
    if not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise InvalidConfigurationError(f"{name} must be a finite number, got {value!r}")
    return float(value)


class BatteryState:
    """
    Electrical and thermal state of one rechargeable lithium-ion cell.

    The model does not clamp soc or capacitor_charge: a draw profile that keeps
    discharging past empty (or charging past full) drives soc below 0.0 (or above
    1.0) without complaint. Callers are responsible for physically bounded currents.
    """

    def __init__(self, capacity_ah, soc=1.0, temperature_c=25.0):
        """
        :param capacity_ah: fully charged capacity (Ah)
        :param soc: initial state of charge, 0.0 (empty) to 1.0 (full)
        :param temperature_c: initial interior cell temperature (deg C)
        """
        if not isinstance(capacity_ah, numbers.Real) or not math.isfinite(capacity_ah) or capacity_ah <= 0:
            raise InvalidConfigurationError(f"capacity must be positive, got {capacity_ah!r} Ah")

        self.capacity = capacity_ah * 3600.0  # fully charged capacity (A*s)
        self.soc = validate_finite('soc', soc)  # state of charge (0-1)
        self.capacitor_charge = 0.0           # coulombs borrowed from C1, starts at equilibrium
        self.cell_temperature = validate_finite('temperature', temperature_c)  # interior temperature (deg C)

    @property
    def capacity_ah(self):
        return self.capacity / 3600.0

    def get_state(self):
        # Snapshot of the state variables
        return {
            'capacity_ah': self.capacity_ah,
            'soc': self.soc,
            'capacitor_charge': self.capacitor_charge,
            'temperature': self.cell_temperature,
        }

    def __repr__(self):
        return (f"BatteryState(capacity_ah={self.capacity_ah:g}, soc={self.soc:.4f}, "
                f"capacitor_charge={self.capacitor_charge:.3f}, "
                f"cell_temperature={self.cell_temperature:.2f})")
