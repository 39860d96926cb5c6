import logging
import math
import numbers

from .battery import BatteryState, InvalidConfigurationError, validate_finite, validate_timestep
from .ecm import EquivalentCircuitModel
from .thermal import ThermalModel

logger = logging.getLogger(__name__)


class PulsedLoadProfile:
    def __init__(self, discharge_current, rest_current=0.0, cycle_period=17.0 * 60.0,
                 load_duration=5.0 * 60.0, load_delay=10.0):
        """
        Periodic load: within every cycle the discharge current is drawn from
        load_delay to load_delay + load_duration seconds, rest_current otherwise.
        discharge_current: load current (A), positive = discharge
        rest_current: current between loads (A), negative = charge
        cycle_period: length of one cycle (s)
        """
        if cycle_period <= 0:
            raise ValueError(f"cycle_period must be positive, got {cycle_period!r}")
        self.discharge_current = discharge_current
        self.rest_current = rest_current
        self.cycle_period = cycle_period
        self.load_duration = load_duration
        self.load_delay = load_delay

    def is_loaded(self, time):
        time_cycle = time % self.cycle_period
        return self.load_delay <= time_cycle <= self.load_delay + self.load_duration

    def current_at(self, time):
        # draw current (A) at this simulation time (s)
        return self.discharge_current if self.is_loaded(time) else self.rest_current


class Simulator:
    def __init__(self, battery, profile, thermal, dt=12.0, cells_in_series=1, model=None):
        """
        Drive one battery through a load profile at a fixed timestep.
        battery: BatteryState, stepped in place
        profile: object with current_at(time) -> amps
        thermal: ThermalModel for the battery compartment
        dt: timestep (s)
        cells_in_series: identical cells stacked in series, scales voltage and heat
        """
        self.battery = battery
        self.profile = profile
        self.thermal = thermal
        self.dt = validate_timestep(dt)
        if not isinstance(cells_in_series, numbers.Integral) or isinstance(cells_in_series, bool) \
                or cells_in_series < 1:
            raise InvalidConfigurationError(f"cells_in_series must be an integer >= 1, got {cells_in_series!r}")
        self.cells_in_series = int(cells_in_series)
        self.model = model if model is not None else EquivalentCircuitModel()
        self.current_time = 0.0
        self.trajectory = []
        self._soc_warned = False

    @classmethod
    def from_config(cls, config):
        battery = BatteryState(config.capacity_ah, config.initial_soc, config.start_temperature)
        profile = PulsedLoadProfile(
            discharge_current=config.discharge_current,
            rest_current=config.rest_current,
            cycle_period=config.cycle_period,
            load_duration=config.load_duration,
            load_delay=config.load_delay,
        )
        return cls(battery, profile, ThermalModel(config.thermal_parameters()),
                   dt=config.dt, cells_in_series=config.cells_in_series)

    def step(self, current):
        """
        One timestep: electrical update, terminal voltage, then thermal update
        with the heat the electrical update produced.
        :return: record of the step
        """
        heat = self.cells_in_series * self.model.update(self.battery, current, self.dt)
        volts = self.cells_in_series * self.model.calculate_terminal_voltage(self.battery, current)
        self.thermal.update_temperature(self.battery, heat, self.dt)

        if not self._soc_warned and not 0.0 <= self.battery.soc <= 1.0:
            logger.warning(f"SOC left [0, 1] at t={self.current_time:.0f}s: {self.battery.soc:.4f}; "
                           "the model does not clamp it, check the load profile")
            self._soc_warned = True

        record = {
            'time': self.current_time,
            'current': current,
            'voltage': volts,
            'soc': self.battery.soc,
            'temperature': self.battery.cell_temperature,
            'capacitor_charge': self.battery.capacitor_charge,
            'heat': heat,
        }
        logger.debug(format_step(record))
        return record

    def run(self, duration):
        """
        Step the battery until ``duration`` seconds of simulated time have elapsed.
        A trailing partial step is run in full.
        :param duration: simulated time (s), finite and not negative
        :return: list of step records
        """
        duration = validate_finite('duration', duration)
        if duration < 0:
            raise InvalidConfigurationError(f"duration must not be negative, got {duration!r}")

        # round off float noise in duration / dt before taking the ceiling
        steps = math.ceil(round(duration / self.dt, 9))
        logger.info(f"Simulating {duration:.0f}s at dt={self.dt:g}s ({steps} steps), "
                    f"{self.cells_in_series} cell(s) in series")

        self.trajectory = []
        start_time = self.current_time
        for k in range(steps):
            self.current_time = start_time + k * self.dt
            current = self.profile.current_at(self.current_time)
            self.trajectory.append(self.step(current))
        self.current_time = start_time + steps * self.dt

        if self.trajectory:
            last = self.trajectory[-1]
            logger.info(f"Simulation finished: {last['voltage']:.2f} V, "
                        f"{last['temperature']:.2f} deg C, SOC {last['soc']:.3f}")
        return self.trajectory


def format_step(record):
    return ("%.2f minutes: %.2f V @ %.2f A ( %.2f deg C, %.2f SOC, %.0f C1Q)"
            % (record['time'] / 60.0, record['voltage'], record['current'],
               record['temperature'], record['soc'], record['capacitor_charge']))
