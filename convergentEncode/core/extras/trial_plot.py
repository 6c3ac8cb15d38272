import os
from typing import List

import numpy as np
from matplotlib import pyplot as plt

from convergentEncode.encoder.stats import Phase, TrialRecord

PHASE_COLORS = {
    Phase.RATE_ESTIMATE: "steelblue",
    Phase.SPEED_SEARCH: "darkorange",
    Phase.RATE_REFINE: "green",
}


def plot_trials(
    records: List[TrialRecord], target: float, output_folder: str
) -> str | None:
    """
    Quality against control value for every trial, coloured by phase,
    with net cpu time on a second axis. Returns the svg path.
    """
    if len(records) == 0:
        return None
    print("Plotting trials...")

    plt.figure(figsize=(10, 8), dpi=100)
    ax1 = plt.gca()
    ax2 = ax1.twinx()

    for phase, color in PHASE_COLORS.items():
        phase_records = [r for r in records if r.phase == phase]
        if len(phase_records) == 0:
            continue
        values = np.array([r.control_value for r in phase_records])
        qualities = np.array([r.quality for r in phase_records])
        cpu_times = np.array([r.net_cpu_time for r in phase_records])
        ax1.scatter(values, qualities, color=color, label=f"{phase} quality")
        ax2.scatter(
            values, cpu_times, color=color, marker="x", alpha=0.5, label=f"{phase} cpu time"
        )

    ax1.axhline(target, color="g", linestyle="--", label="Target")
    ax1.set_xlabel(records[0].control_mode.column_name())
    ax1.set_ylabel("Quality")
    ax1.set_ylim(0, 100)
    ax2.set_ylabel("Net CPU time (s)")

    qualities = np.array([r.quality for r in records])
    plt.text(
        0.02,
        0.10,
        f"Trials: {len(records)}\nMean quality: {np.mean(qualities):.2f}\n"
        f"Closest: {qualities[np.argmin(np.abs(qualities - target))]:.2f}\nTarget: {target}",
        transform=ax1.transAxes,
        fontsize=9,
        verticalalignment="top",
        bbox=dict(boxstyle="round", facecolor="wheat", alpha=0.5),
    )

    plt.title("Quality against control value per phase")
    lines1, labels1 = ax1.get_legend_handles_labels()
    lines2, labels2 = ax2.get_legend_handles_labels()
    ax2.legend(lines1 + lines2, labels1 + labels2, loc="lower right")

    path = os.path.join(output_folder, "trial_plot.svg")
    plt.savefig(path)
    plt.close()
    return path
