import csv
import json
import os
import numpy as np
from datetime import datetime


class DataExporter:
    def __init__(self, output_dir="output"):
        """
        output_dir: directory the report files are written to
        """
        self.output_dir = output_dir
        if not os.path.exists(output_dir):
            os.makedirs(output_dir)

    def _filepath(self, filename, prefix, extension):
        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"{prefix}_{timestamp}.{extension}"
        return os.path.join(self.output_dir, filename)

    def export_trajectory_to_csv(self, trajectory, filename=None):
        """
        Write one row per simulation step
        trajectory: list of step records from Simulator.run
        filename: output file name, timestamped when None
        """
        filepath = self._filepath(filename, "trajectory", "csv")

        headers = [
            'time_s', 'current_a', 'voltage_v', 'soc_pct',
            'temperature_c', 'capacitor_charge_c', 'heat_j', 'power_w'
        ]

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(headers)

            for record in trajectory:
                row = [
                    record['time'],
                    record['current'],
                    record['voltage'],
                    record['soc'] * 100,  # percent
                    record['temperature'],
                    record['capacitor_charge'],
                    record['heat'],
                    record['voltage'] * record['current'],  # power delivered at the terminals
                ]
                writer.writerow(row)

        return filepath

    def export_to_json(self, data, filename=None):
        """
        Write arbitrary results (config, summaries, trajectories) as JSON
        """
        filepath = self._filepath(filename, "data", "json")

        # numpy arrays and scalars are not JSON serializable
        def numpy_to_list(obj):
            if isinstance(obj, np.ndarray):
                return obj.tolist()
            elif isinstance(obj, np.generic):
                return obj.item()
            elif isinstance(obj, dict):
                return {k: numpy_to_list(v) for k, v in obj.items()}
            elif isinstance(obj, (list, tuple)):
                return [numpy_to_list(item) for item in obj]
            return obj

        with open(filepath, 'w', encoding='utf-8') as f:
            json.dump(numpy_to_list(data), f, indent=4, ensure_ascii=False)

        return filepath

    def export_statistics(self, trajectory, filename=None):
        """
        Write summary statistics of a run as metric/value rows
        """
        filepath = self._filepath(filename, "statistics", "csv")
        stats = summarize(trajectory)

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(['metric', 'value'])
            for key, value in stats.items():
                writer.writerow([key, value])

        return filepath


def summarize(trajectory):
    """Summary of a simulated run, formatted for reports"""
    if not trajectory:
        raise ValueError("Cannot summarize an empty trajectory")

    times = np.array([r['time'] for r in trajectory])
    voltages = np.array([r['voltage'] for r in trajectory])
    currents = np.array([r['current'] for r in trajectory])
    temperatures = np.array([r['temperature'] for r in trajectory])
    socs = np.array([r['soc'] for r in trajectory]) * 100
    heats = np.array([r['heat'] for r in trajectory])
    powers = voltages * currents
    dt = times[1] - times[0] if len(times) > 1 else 0.0

    return {
        'steps': len(trajectory),
        'duration_s': f"{times[-1] - times[0] + dt:.2f}",
        'voltage_range_v': f"{voltages.min():.3f} - {voltages.max():.3f}",
        'current_range_a': f"{currents.min():.2f} - {currents.max():.2f}",
        'temperature_range_c': f"{temperatures.min():.2f} - {temperatures.max():.2f}",
        'soc_range_pct': f"{socs.min():.2f} - {socs.max():.2f}",
        'total_heat_j': f"{heats.sum():.2f}",
        'delivered_energy_j': f"{np.sum(powers) * dt:.2f}",
        'mean_power_w': f"{powers.mean():.3f}",
    }
