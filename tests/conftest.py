import matplotlib

matplotlib.use("Agg")

import pytest

from lipo_battery.battery import BatteryState


@pytest.fixture
def cold_battery():
    # 1.8 Ah cell, fully charged, at the coldest calibrated temperature
    return BatteryState(1.8, 1.0, -20.0)
