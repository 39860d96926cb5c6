import argparse
import logging
import os
import sys
from datetime import datetime
from typing import List, Optional

from .battery import BatteryState
from .config import load_config
from .ecm import estimate_voltage
from .exporter import DataExporter, summarize
from .parameters import resolve_parameters
from .simulator import Simulator, format_step

# Logging setup
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def ensure_output_directory(output_dir: str) -> str:
    """
    Make sure the output directory exists and is writable
    :param output_dir: output directory path
    :return: timestamped sub-directory for this run
    """
    try:
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)
        if not os.access(output_dir, os.W_OK):
            raise PermissionError(f"No write permission: {output_dir}")

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        result_dir = os.path.join(output_dir, timestamp)
        os.makedirs(result_dir, exist_ok=True)
        return result_dir

    except OSError as e:
        raise RuntimeError(f"Failed to create output directory: {str(e)}") from e


def run_simulate(args: argparse.Namespace) -> int:
    config = load_config(args.config, overrides={
        'capacity_ah': args.capacity,
        'initial_soc': args.soc,
        'initial_temperature': args.temperature,
        'ambient_temperature': args.ambient,
        'cells_in_series': args.cells,
        'dt': args.dt,
        'duration': args.duration,
        'discharge_current': args.discharge_current,
        'rest_current': args.rest_current,
    })

    simulator = Simulator.from_config(config)
    trajectory = simulator.run(config.duration)

    if not args.quiet:
        for record in trajectory:
            print(format_step(record))

    if args.csv or args.json or args.plot:
        result_dir = ensure_output_directory(args.output)
        exporter = DataExporter(result_dir)
        if args.csv:
            logger.info(f"Trajectory written to: {exporter.export_trajectory_to_csv(trajectory, 'trajectory.csv')}")
            exporter.export_statistics(trajectory, 'statistics.csv')
        if args.json:
            path = exporter.export_to_json({
                'config': config.to_dict(),
                'summary': summarize(trajectory),
                'trajectory': trajectory,
            }, 'simulation.json')
            logger.info(f"Results written to: {path}")
        if args.plot:
            from .plotting import plot_trajectory
            plot_trajectory(trajectory, result_dir)

    return 0


def run_voltage(args: argparse.Namespace) -> int:
    battery = BatteryState(args.capacity, args.soc, args.temperature)
    volts = estimate_voltage(battery, args.current)
    print(f"{volts:.4f} V @ {args.current:.2f} A ({args.temperature:.2f} deg C, {args.soc:.2f} SOC)")
    return 0


def run_params(args: argparse.Namespace) -> int:
    # capacity does not affect the lookup
    battery = BatteryState(1.0, args.soc, args.temperature)
    params = resolve_parameters(battery)
    print(f"Em = {params.open_circuit_voltage:.6f} V")
    print(f"R0 = {params.series_resistance:.6f} ohm")
    print(f"R1 = {params.parallel_resistance:.6f} ohm")
    print(f"C1 = {params.parallel_capacitance:.6f} F")
    print(f"tau = {params.time_constant:.3f} s")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog='lipo-sim', description='LiPo battery electrical and thermal simulator')
    parser.add_argument('-v', '--verbose', action='store_true', help='debug logging')

    subparsers = parser.add_subparsers(dest='command', help='available commands')

    simulate_parser = subparsers.add_parser('simulate',
        help='run a pulsed discharge cycle and print the voltage/temperature/SOC trajectory')
    simulate_parser.add_argument('--config', help='JSON simulation config file')
    simulate_parser.add_argument('--output', default='output', help='output directory for exported files')
    simulate_parser.add_argument('--csv', action='store_true', help='export trajectory and statistics as CSV')
    simulate_parser.add_argument('--json', action='store_true', help='export config, summary and trajectory as JSON')
    simulate_parser.add_argument('--plot', action='store_true', help='save a PNG plot of the run')
    simulate_parser.add_argument('--quiet', action='store_true', help='do not print each step')
    simulate_parser.add_argument('--capacity', type=float, help='cell capacity (Ah)')
    simulate_parser.add_argument('--soc', type=float, help='initial state of charge (0-1)')
    simulate_parser.add_argument('--temperature', type=float, help='initial cell temperature (deg C)')
    simulate_parser.add_argument('--ambient', type=float, help='ambient temperature (deg C)')
    simulate_parser.add_argument('--cells', type=int, help='cells stacked in series')
    simulate_parser.add_argument('--dt', type=float, help='timestep (s)')
    simulate_parser.add_argument('--duration', type=float, help='simulated time (s)')
    simulate_parser.add_argument('--discharge-current', type=float, help='load current (A)')
    simulate_parser.add_argument('--rest-current', type=float, help='current between loads (A), negative charges')

    voltage_parser = subparsers.add_parser('voltage', help='estimate terminal voltage for one draw current')
    voltage_parser.add_argument('--current', type=float, required=True, help='draw current (A), positive discharges')
    voltage_parser.add_argument('--capacity', type=float, default=1.8, help='cell capacity (Ah)')
    voltage_parser.add_argument('--soc', type=float, default=1.0, help='state of charge (0-1)')
    voltage_parser.add_argument('--temperature', type=float, default=25.0, help='cell temperature (deg C)')

    params_parser = subparsers.add_parser('params', help='show circuit parameters at a state of charge and temperature')
    params_parser.add_argument('--soc', type=float, default=1.0, help='state of charge (0-1)')
    params_parser.add_argument('--temperature', type=float, default=25.0, help='cell temperature (deg C)')

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    commands = {
        'simulate': run_simulate,
        'voltage': run_voltage,
        'params': run_params,
    }

    try:
        if args.command not in commands:
            parser.print_help()
            logger.error("Error: unknown command")
            return 1
        return commands[args.command](args)
    except FileNotFoundError as e:
        logger.error(f"File error: {str(e)}")
        return 1
    except PermissionError as e:
        logger.error(f"Permission error: {str(e)}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {str(e)}")
        return 1
    except RuntimeError as e:
        logger.error(f"Runtime error: {str(e)}")
        return 1
    except Exception as e:
        logger.error(f"Unexpected error: {str(e)}", exc_info=True)
        return 1


if __name__ == '__main__':
    sys.exit(main())
