"""
Calibration tables for the LiPo equivalent circuit model.

Each table holds one circuit parameter sampled on a grid of
cell temperature (rows) by state of charge (columns). Values come from
Isaac Thompson's 2018 MS thesis measurements and are fixed at import time.
"""

import numpy as np

# Number of entries by state of charge: 0.0 0.1 ... 1.0
SOC_POINTS = 11

# Temperature rows (deg C), ascending but not uniformly spaced
TEMPERATURES = np.array([-20.0, -10.0, -5.0, 2.0])
TEMPERATURES.setflags(write=False)


class CalibrationTable:
    """One circuit parameter tabulated by temperature and state of charge."""

    def __init__(self, name, unit, values, temperatures=TEMPERATURES):
        """
        :param name: parameter symbol, e.g. 'Em' or 'R0'
        :param unit: physical unit of the stored values
        :param values: nested rows, one per temperature, each with one value per SOC point
        :param temperatures: ascending temperature axis (deg C) shared by the rows
        """
        values = np.array(values, dtype=float)
        temperatures = np.array(temperatures, dtype=float)
        if values.ndim != 2:
            raise ValueError(f"Table {name} must be two dimensional, got {values.ndim} dimensions")
        if values.shape[0] != len(temperatures):
            raise ValueError(
                f"Table {name} has {values.shape[0]} rows but {len(temperatures)} temperatures")
        if values.shape[1] < 2:
            raise ValueError(f"Table {name} needs at least two SOC points")
        if np.any(np.diff(temperatures) <= 0):
            raise ValueError(f"Temperatures for table {name} must be strictly ascending")

        values.setflags(write=False)
        temperatures.setflags(write=False)
        self.name = name
        self.unit = unit
        self.values = values
        self.temperatures = temperatures

    @property
    def temperature_count(self):
        return self.values.shape[0]

    @property
    def soc_count(self):
        return self.values.shape[1]

    def value_at(self, t_index, soc_index):
        # Stored grid value, no interpolation
        return float(self.values[t_index, soc_index])

    def interpolate(self, t_number, t_index, soc_number, soc_index):
        """
        Bilinear interpolation between the four grid points around a coordinate.

        t_number / soc_number are fractional grid coordinates and t_index /
        soc_index their integer floors. The fractional parts are the blend weights.

        Both "next" indices saturate at the last row/column, so a coordinate on
        the last temperature row reads that row twice and any temperature
        weight there has no effect.
        """
        soc_next = min(soc_index + 1, self.soc_count - 1)
        t_next = min(t_index + 1, self.temperature_count - 1)

        ii = self.values[t_index, soc_index]
        i_n = self.values[t_index, soc_next]
        ti = self.values[t_next, soc_index]
        tn = self.values[t_next, soc_next]

        soc_weight = soc_number - soc_index
        low = ii + (i_n - ii) * soc_weight   # along SOC at the floor temperature
        high = ti + (tn - ti) * soc_weight   # along SOC at the next temperature
        return float(low + (high - low) * (t_number - t_index))

    def __repr__(self):
        return f"CalibrationTable({self.name!r}, {self.unit!r}, shape={self.values.shape})"


def interpolate(table, t_number, t_index, soc_number, soc_index):
    """Bilinear lookup of one parameter from ``table``."""
    return table.interpolate(t_number, t_index, soc_number, soc_index)


# Open circuit voltage Em (volts)
OPEN_CIRCUIT_VOLTAGE = CalibrationTable('Em', 'V', [
    [3.5, 3.65, 3.7, 3.75, 3.78, 3.8, 3.85, 3.9, 3.95, 4.1, 4.2],  # -20 deg C
    [3.5, 3.65, 3.7, 3.746368, 3.794009, 3.824597, 3.870755, 3.921037, 3.984153, 4.1, 4.2],  # -10 deg C
    [3.5, 3.717802, 3.751656, 3.779548, 3.805342, 3.837747, 3.886275, 3.92452, 4.019383, 4.131402, 4.2],  # -5 deg C
    [3.5, 3.723299, 3.754516, 3.788628, 3.812054, 3.840599, 3.888213, 3.933897, 4.024288, 4.130746, 4.182739],  # 2 deg C
])

# Series output resistance R0 (ohms)
SERIES_RESISTANCE = CalibrationTable('R0', 'ohm', [
    [0.26, 0.26, 0.26, 0.13, 0.13, 0.13, 0.13, 0.13, 0.25, 0.2, 0.67],
    [0.3, 0.050589, 0.144401, 0.085073, 0.091675, 0.085872, 0.08382, 0.084737, 0.075961, 0.15, 0.25],
    [0.2, 0.029142, 0.029737, 0.031219, 0.031587, 0.030885, 0.031477, 0.030845, 0.030875, 0.025, 0.016],
    [0.032564, 0.022225, 0.019854, 0.024638, 0.022878, 0.021342, 0.022003, 0.02195, 0.021421, 0.023454, 0.014168],
])

# Short term deep draw resistance R1 (ohms)
PARALLEL_RESISTANCE = CalibrationTable('R1', 'ohm', [
    [2, 0.75, 0.21, 0.190953, 0.147748, 0.127334, 0.143009, 0.180778, 0.1, 0.261743, 0.85],
    [0.003815, 0.007988, 0.020238, 0.015108, 0.01404, 0.014878, 0.014838, 0.014781, 0.015083, 0.15, 0.3],
    [0.011421, 0.003253, 0.012514, 0.00939, 0.010378, 0.009284, 0.008821, 0.008391, 0.010644, 0.008414, 0.007233],
    [0.025991, 0.003294, 0.013872, 0.013772, 0.013957, 0.011306, 0.01088, 0.01135, 0.015937, 0.012274, 0.007585],
])

# Short term capacitance C1 (farads)
PARALLEL_CAPACITANCE = CalibrationTable('C1', 'F', [
    [400, 500, 600, 846, 846, 846, 846, 846, 600, 846, 596],
    [14.34898, 28719.38, 1818.858, 5832.355, 8962.667, 8772.705, 8750.688, 8565.881, 7004.807, 11188.4, 7370.326],
    [0.881527, 33414.97, 2179.029, 11289.18, 7234.158, 6226.428, 5750.18, 9030.291, 3869.932, 11851, 7122.03],
    [0.262732, 50759.86, 3022.06, 15720.72, 8308.124, 7180.572, 6619.685, 13150.94, 4201.662, 15103.12, 6852.036],
])
