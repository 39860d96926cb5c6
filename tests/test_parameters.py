import numpy as np
import pytest

from lipo_battery.battery import BatteryState
from lipo_battery.parameters import (
    CalibrationSet,
    CircuitParameters,
    DEFAULT_CALIBRATION,
    resolve_parameters,
    soc_coordinates,
    temperature_coordinates,
)
from lipo_battery.tables import (
    CalibrationTable,
    OPEN_CIRCUIT_VOLTAGE,
    PARALLEL_CAPACITANCE,
    PARALLEL_RESISTANCE,
    SERIES_RESISTANCE,
    SOC_POINTS,
    TEMPERATURES,
)


def edge_parameters(t_index, soc_index):
    return CircuitParameters(
        open_circuit_voltage=OPEN_CIRCUIT_VOLTAGE.value_at(t_index, soc_index),
        series_resistance=SERIES_RESISTANCE.value_at(t_index, soc_index),
        parallel_resistance=PARALLEL_RESISTANCE.value_at(t_index, soc_index),
        parallel_capacitance=PARALLEL_CAPACITANCE.value_at(t_index, soc_index),
    )


def test_soc_coordinates_stay_inside_grid():
    for soc in np.linspace(0.0, 1.0, 101)[:-1]:
        soc_number, soc_index = soc_coordinates(soc, SOC_POINTS)
        assert 0 <= soc_index <= SOC_POINTS - 2
        assert 0.0 <= soc_number - soc_index < 1.0


def test_full_charge_maps_to_last_column():
    assert soc_coordinates(1.0, SOC_POINTS) == (10.0, 10)


@pytest.mark.parametrize("soc, expected", [(-0.5, (0.0, 0)), (-1e-9, (0.0, 0)), (1.7, (10.0, 10))])
def test_soc_outside_range_is_clamped(soc, expected):
    assert soc_coordinates(soc, SOC_POINTS) == expected


@pytest.mark.parametrize("temperature, expected", [
    (-20.0, (0.0, 0)),
    (-15.0, (0.5, 0)),
    (-10.0, (1.0, 1)),
    (-7.5, (1.5, 1)),
    (-5.0, (2.0, 2)),
    (2.0, (3.0, 3)),
])
def test_temperature_coordinates_inside_range(temperature, expected):
    t_number, t_index = temperature_coordinates(temperature, TEMPERATURES)
    assert t_index == expected[1]
    assert t_number == pytest.approx(expected[0])


def test_temperature_between_uneven_rows():
    # -5 to +2 is a 7 degree row spacing
    t_number, t_index = temperature_coordinates(0.0, TEMPERATURES)
    assert t_index == 2
    assert t_number == pytest.approx(2.0 + 5.0 / 7.0)


@pytest.mark.parametrize("temperature, expected", [(-40.0, (0.0, 0)), (-20.0001, (0.0, 0)), (45.0, (3.0, 3))])
def test_temperature_outside_range_holds_edge_row(temperature, expected):
    assert temperature_coordinates(temperature, TEMPERATURES) == expected


def test_cold_cell_uses_lowest_row_exactly():
    battery = BatteryState(1.8, 0.5, -60.0)
    assert resolve_parameters(battery) == edge_parameters(0, 5)


def test_warm_cell_uses_highest_row_exactly():
    battery = BatteryState(1.8, 0.5, 30.0)
    assert resolve_parameters(battery) == edge_parameters(3, 5)


def test_full_cold_cell_parameters(cold_battery):
    params = resolve_parameters(cold_battery)
    assert params.open_circuit_voltage == 4.2
    assert params.series_resistance == 0.67
    assert params.parallel_resistance == 0.85
    assert params.parallel_capacitance == 596.0


def test_resolver_blends_both_axes():
    # halfway between -20 and -10 deg C, halfway between SOC 0.9 and 1.0
    battery = BatteryState(1.8, 0.95, -15.0)
    params = resolve_parameters(battery)
    expected_r0 = 0.5 * (0.5 * (0.2 + 0.67) + 0.5 * (0.15 + 0.25))
    assert params.series_resistance == pytest.approx(expected_r0)


def test_resolver_does_not_modify_state(cold_battery):
    before = cold_battery.get_state()
    resolve_parameters(cold_battery)
    assert cold_battery.get_state() == before


def test_time_constant(cold_battery):
    params = resolve_parameters(cold_battery)
    assert params.time_constant == pytest.approx(0.85 * 596.0)


def constant_table(name, value, temperatures=(0.0, 10.0)):
    return CalibrationTable(name, '-', [[value] * 3 for _ in temperatures], temperatures=temperatures)


def test_custom_calibration_set():
    calibration = CalibrationSet(
        open_circuit_voltage=constant_table('Em', 3.7),
        series_resistance=constant_table('R0', 0.05),
        parallel_resistance=constant_table('R1', 0.02),
        parallel_capacitance=constant_table('C1', 1000.0),
    )
    assert calibration.soc_points == 3
    params = resolve_parameters(BatteryState(2.0, 0.3, 5.0), calibration)
    assert params.open_circuit_voltage == pytest.approx(3.7)
    assert params.parallel_capacitance == pytest.approx(1000.0)


def test_calibration_set_rejects_mismatched_axes():
    with pytest.raises(ValueError, match="temperature axis"):
        CalibrationSet(
            open_circuit_voltage=constant_table('Em', 3.7),
            series_resistance=constant_table('R0', 0.05, temperatures=(0.0, 20.0)),
            parallel_resistance=constant_table('R1', 0.02),
            parallel_capacitance=constant_table('C1', 1000.0),
        )


def test_default_calibration_axis():
    assert np.array_equal(DEFAULT_CALIBRATION.temperatures, TEMPERATURES)
    assert DEFAULT_CALIBRATION.soc_points == SOC_POINTS
