import math
from dataclasses import dataclass

import numpy as np

from .tables import (
    OPEN_CIRCUIT_VOLTAGE,
    SERIES_RESISTANCE,
    PARALLEL_RESISTANCE,
    PARALLEL_CAPACITANCE,
)


@dataclass(frozen=True)
class CircuitParameters:
    """Circuit values for one battery state, recomputed on every lookup"""
    open_circuit_voltage: float  # Em (V)
    series_resistance: float     # R0 (Ω)
    parallel_resistance: float   # R1 (Ω)
    parallel_capacitance: float  # C1 (F)

    @property
    def time_constant(self):
        # Relaxation time constant of the R1 || C1 branch (s)
        return self.parallel_resistance * self.parallel_capacitance


@dataclass(frozen=True)
class CalibrationSet:
    """The four tables the resolver reads, sharing one temperature axis and SOC grid"""
    open_circuit_voltage: object
    series_resistance: object
    parallel_resistance: object
    parallel_capacitance: object

    def __post_init__(self):
        tables = self.tables()
        first = tables[0]
        for table in tables[1:]:
            if table.values.shape != first.values.shape:
                raise ValueError(
                    f"Table {table.name} shape {table.values.shape} does not match "
                    f"{first.name} shape {first.values.shape}")
            if not np.array_equal(table.temperatures, first.temperatures):
                raise ValueError(f"Table {table.name} uses a different temperature axis")

    def tables(self):
        return (self.open_circuit_voltage, self.series_resistance,
                self.parallel_resistance, self.parallel_capacitance)

    @property
    def temperatures(self):
        return self.open_circuit_voltage.temperatures

    @property
    def soc_points(self):
        return self.open_circuit_voltage.soc_count


DEFAULT_CALIBRATION = CalibrationSet(
    open_circuit_voltage=OPEN_CIRCUIT_VOLTAGE,
    series_resistance=SERIES_RESISTANCE,
    parallel_resistance=PARALLEL_RESISTANCE,
    parallel_capacitance=PARALLEL_CAPACITANCE,
)


def soc_coordinates(soc, soc_points):
    """
    Map a state of charge onto the uniform SOC grid.
    :param soc: state of charge, nominally 0.0 to 1.0, always finite (BatteryState and
        the electrical step reject NaN and infinite inputs)
    :param soc_points: number of SOC grid points
    :return: (fractional coordinate, floor index), both clamped to the grid
    """
    last = soc_points - 1
    soc_number = min(max(soc * last, 0.0), float(last))
    return soc_number, int(math.floor(soc_number))


def temperature_coordinates(temperature, temperatures):
    """
    Map a cell temperature onto the (non-uniform) temperature axis.

    Outside the calibrated range the coordinate sticks to the edge row with
    a zero weight, so parameters are held flat rather than extrapolated.
    :param temperature: cell temperature (deg C)
    :param temperatures: ascending temperature axis
    :return: (fractional coordinate, floor index)
    """
    # largest row whose temperature is <= the cell temperature
    t_index = 0
    while t_index + 1 < len(temperatures) and temperatures[t_index + 1] <= temperature:
        t_index += 1

    if t_index + 1 >= len(temperatures) or temperature < temperatures[0]:
        return float(t_index), t_index

    last = temperatures[t_index]
    nxt = temperatures[t_index + 1]
    return t_index + float((temperature - last) / (nxt - last)), t_index


def resolve_parameters(battery, calibration=DEFAULT_CALIBRATION):
    """Look up the circuit parameters that apply at the battery's SOC and temperature."""
    soc_number, soc_index = soc_coordinates(battery.soc, calibration.soc_points)
    t_number, t_index = temperature_coordinates(battery.cell_temperature, calibration.temperatures)

    em, r0, r1, c1 = (table.interpolate(t_number, t_index, soc_number, soc_index)
                      for table in calibration.tables())
    return CircuitParameters(
        open_circuit_voltage=em,
        series_resistance=r0,
        parallel_resistance=r1,
        parallel_capacitance=c1,
    )
