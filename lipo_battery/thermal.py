from dataclasses import dataclass

from .battery import InvalidConfigurationError, validate_timestep


@dataclass(frozen=True)
class ThermalParameters:
    """Thermal mass of the cell and insulation of its compartment"""
    specific_heat: float        # J/(deg C * g)
    mass: float                 # g
    ambient_temperature: float  # deg C
    r_value: float              # insulation R-value (m^2 * deg C / W)
    area: float                 # area exposed to ambient (m^2)

    @property
    def heat_capacity(self):
        # J/deg C
        return self.specific_heat * self.mass


def calculate_heat_dissipation(cell_temperature, ambient_temperature, r_value, area, dt):
    # Newtonian cooling through the compartment insulation (J over dt)
    return (cell_temperature - ambient_temperature) * area / r_value * dt


def step_thermal(battery, heat_joules, specific_heat, mass, ambient_temperature, r_value, area, dt):
    """
    Update the cell temperature for one timestep.
    :param battery: BatteryState, cell_temperature is changed in place
    :param heat_joules: electrical heat input for the step, from step_electrical (J)
    :param specific_heat: specific heat capacity of the cell (J/(deg C * g))
    :param mass: cell mass (g)
    :param ambient_temperature: ambient temperature (deg C)
    :param r_value: compartment insulation R-value (m^2 * deg C / W)
    :param area: compartment area exposed to ambient (m^2)
    :param dt: timestep (s)
    :return: the new cell temperature (deg C)
    """
    dt = validate_timestep(dt)
    heat_capacity = specific_heat * mass
    if heat_capacity <= 0:
        raise InvalidConfigurationError(f"specific_heat * mass must be positive, got {heat_capacity!r}")
    if r_value <= 0:
        raise InvalidConfigurationError(f"r_value must be positive, got {r_value!r}")

    cool_joules = calculate_heat_dissipation(battery.cell_temperature, ambient_temperature, r_value, area, dt)
    battery.cell_temperature += (heat_joules - cool_joules) / heat_capacity
    return battery.cell_temperature


class ThermalModel:
    def __init__(self, params):
        # one battery compartment: mass, insulation and ambient
        self.params = params

    def update_temperature(self, battery, heat_joules, dt):
        p = self.params
        return step_thermal(battery, heat_joules, p.specific_heat, p.mass,
                            p.ambient_temperature, p.r_value, p.area, dt)
