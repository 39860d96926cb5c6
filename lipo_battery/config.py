import json
import logging
import math
import os
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, List, Optional

from .battery import InvalidConfigurationError
from .thermal import ThermalParameters

logger = logging.getLogger(__name__)


def _is_finite_number(value) -> bool:
    # json.load turns Infinity and NaN into floats, reject them along with bools and strings
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


@dataclass
class SimulationConfig:
    """Settings for one simulated discharge run. Defaults reproduce the -20 deg C self-heating demo."""
    # Cell
    capacity_ah: float = 1.8
    initial_soc: float = 1.0
    initial_temperature: Optional[float] = None  # None: start at ambient
    cells_in_series: int = 1

    # Timing (s)
    dt: float = 12.0
    duration: float = 30.0 * 60.0

    # Load profile
    discharge_current: float = 1.8    # A while the load is on
    rest_current: float = 0.0         # A between loads, negative to charge
    cycle_period: float = 17.0 * 60.0 # s between load starts
    load_duration: float = 5.0 * 60.0 # s of load per cycle
    load_delay: float = 10.0          # s into each cycle before the load starts

    # Compartment
    ambient_temperature: float = -20.0
    specific_heat: float = 0.9  # aluminum J/(g * deg C)
    mass: float = 150.0         # g
    r_value: float = 0.1        # air film
    area: float = 0.1 * 0.1     # m^2

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {unknown}")
        config = cls(**data)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def validate(self) -> None:
        positive = ['capacity_ah', 'dt', 'duration', 'cycle_period', 'specific_heat', 'mass', 'r_value', 'area']
        for name in positive:
            value = getattr(self, name)
            if not _is_finite_number(value) or value <= 0:
                raise InvalidConfigurationError(f"Config value {name} must be a positive number, got {value!r}")

        finite = ['initial_soc', 'ambient_temperature', 'discharge_current', 'rest_current',
                  'load_duration', 'load_delay']
        if self.initial_temperature is not None:
            finite.append('initial_temperature')
        for name in finite:
            value = getattr(self, name)
            if not _is_finite_number(value):
                raise InvalidConfigurationError(f"Config value {name} must be a finite number, got {value!r}")

        if not isinstance(self.cells_in_series, int) or isinstance(self.cells_in_series, bool) \
                or self.cells_in_series < 1:
            raise InvalidConfigurationError(
                f"cells_in_series must be an integer >= 1, got {self.cells_in_series!r}")
        if self.load_duration < 0 or self.load_delay < 0:
            raise InvalidConfigurationError("load_duration and load_delay must not be negative")

    @property
    def start_temperature(self) -> float:
        if self.initial_temperature is None:
            return self.ambient_temperature
        return self.initial_temperature

    def thermal_parameters(self) -> ThermalParameters:
        return ThermalParameters(
            specific_heat=self.specific_heat,
            mass=self.mass,
            ambient_temperature=self.ambient_temperature,
            r_value=self.r_value,
            area=self.area,
        )


def validate_json_file(filepath: str, required_fields: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Load and check a JSON file
    :param filepath: path to the JSON file
    :param required_fields: keys that must be present
    :return: the loaded dictionary
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"File not found: {filepath}")
    if not os.access(filepath, os.R_OK):
        raise PermissionError(f"No read permission: {filepath}")
    try:
        with open(filepath, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Malformed JSON file {filepath}: {e}") from e
    if not isinstance(data, dict):
        raise ValueError(f"JSON file {filepath} must contain an object")
    if required_fields:
        missing_fields = [field for field in required_fields if field not in data]
        if missing_fields:
            raise ValueError(f"Missing required fields: {missing_fields}")
    return data


def load_config(filepath: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> SimulationConfig:
    """
    Build a SimulationConfig from defaults, an optional JSON file and explicit overrides.
    Overrides whose value is None are ignored.
    """
    data: Dict[str, Any] = {}
    if filepath:
        data.update(validate_json_file(filepath))
        logger.info(f"Loaded simulation config: {filepath}")
    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    config = SimulationConfig.from_dict(data)
    logger.debug(f"Simulation config: {config.to_dict()}")
    return config
