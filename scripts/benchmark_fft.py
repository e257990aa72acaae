#!/usr/bin/env python3
"""
FFT accuracy and speed check against scipy.

Usage:
    python scripts/benchmark_fft.py
    python scripts/benchmark_fft.py --sizes 1024 4096 --iterations 200
"""

import argparse
import time

import numpy as np
from rich.console import Console
from rich.table import Table
from scipy.fft import fft as scipy_fft

from guitar_tuner.dsp_core import fft
from guitar_tuner.pitch import detect_pitch

console = Console()


def time_call(func, x, n_iter: int) -> float:
    """Mean wall time of func(x) in milliseconds."""
    start = time.perf_counter()
    for _ in range(n_iter):
        func(x)
    return (time.perf_counter() - start) / n_iter * 1000


def main():
    parser = argparse.ArgumentParser(description="Benchmark the tuner FFT")
    parser.add_argument('--sizes', type=int, nargs='+', default=[256, 1024, 2048, 4096, 8192])
    parser.add_argument('--iterations', type=int, default=100)
    parser.add_argument('--sample-rate', type=int, default=44100)
    args = parser.parse_args()

    rng = np.random.default_rng(0)

    console.print("[bold]Warming up JIT...[/bold]")
    fft(rng.standard_normal(args.sizes[0]))

    table = Table(title="FFT vs scipy")
    table.add_column("N", justify="right")
    table.add_column("Max error", justify="right")
    table.add_column("Ours (ms)", justify="right")
    table.add_column("Scipy (ms)", justify="right")
    table.add_column("Frame (ms)", justify="right")
    table.add_column("Ratio", justify="right")

    for n in args.sizes:
        x = rng.standard_normal(n)
        error = np.abs(fft(x) - scipy_fft(x)).max()
        status = "[green]✓[/green]" if error < 1e-9 else "[red]✗[/red]"

        time_ours = time_call(fft, x, args.iterations)
        time_scipy = time_call(scipy_fft, x, args.iterations)
        time_frame = time_call(lambda f: detect_pitch(f, args.sample_rate), x, args.iterations)
        table.add_row(
            str(n),
            f"{error:.2e} {status}",
            f"{time_ours:.4f}",
            f"{time_scipy:.4f}",
            f"{time_frame:.4f}",
            f"{time_ours / time_scipy:.2f}x",
        )

    console.print(table)
    frame_budget = 1000 * args.sizes[-1] / args.sample_rate
    console.print(f"Audio duration of a {args.sizes[-1]}-sample frame: {frame_budget:.1f} ms")


if __name__ == "__main__":
    main()
