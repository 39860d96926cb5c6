"""Equivalent-circuit electrical and thermal simulator for lithium-ion (LiPo) cells."""

from .battery import BatteryState, InvalidConfigurationError
from .ecm import EquivalentCircuitModel, estimate_voltage, step_electrical
from .parameters import CalibrationSet, CircuitParameters, DEFAULT_CALIBRATION, resolve_parameters
from .tables import CalibrationTable, interpolate
from .thermal import ThermalModel, ThermalParameters, step_thermal

__version__ = "0.1.0"
