import logging
import os
from typing import Any, Dict, List

import matplotlib.pyplot as plt
import numpy as np

logger = logging.getLogger(__name__)


def plot_trajectory(trajectory: List[Dict[str, Any]], output_dir: str, filename_suffix: str = '') -> str:
    """
    Plot voltage, current, temperature and SOC of a simulated run over time
    :param trajectory: step records from Simulator.run
    :param output_dir: directory for the PNG file
    :param filename_suffix: appended to the file name
    :return: path of the saved figure
    """
    if not trajectory:
        raise ValueError("Trajectory is empty, nothing to plot")

    minutes = np.array([r['time'] for r in trajectory]) / 60.0
    voltage = [r['voltage'] for r in trajectory]
    current = [r['current'] for r in trajectory]
    temperature = [r['temperature'] for r in trajectory]
    soc = [r['soc'] for r in trajectory]

    fig, axes = plt.subplots(4, 1, figsize=(10, 12), sharex=True)

    axes[0].plot(minutes, voltage, label='Terminal Voltage (V)')
    axes[0].set_ylabel('Voltage (V)')

    axes[1].plot(minutes, current, label='Draw Current (A)', color='red')
    axes[1].set_ylabel('Current (A)')

    axes[2].plot(minutes, temperature, label='Cell Temperature (deg C)', color='purple')
    axes[2].set_ylabel('Temperature (deg C)')

    axes[3].plot(minutes, soc, label='State of Charge', color='green')
    axes[3].set_ylabel('SOC')
    axes[3].set_xlabel('Time (min)')

    for ax in axes:
        ax.legend()
        ax.grid(True)

    plt.suptitle('Simulated Cell Response', y=0.95)
    plt.tight_layout(rect=[0, 0.03, 1, 0.92])
    plot_path = os.path.join(output_dir, f"trajectory{filename_suffix}.png")
    plt.savefig(plot_path, dpi=150, bbox_inches='tight')
    plt.close(fig)

    logger.info(f"Plot saved to: {plot_path}")
    return plot_path
