"""
Guitar tuner command line.

Usage:
    guitar-tuner listen [--device DEVICE]
    guitar-tuner analyze recording.wav [--max-frames N]
    guitar-tuner tone 110
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from rich import box
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .capture.synthetic import sine_frame
from .config import DEFAULT_FRAME_SIZE, TunerConfig, load_config
from .errors import ConfigError, DeviceInitFailed, ReadFailure
from .pitch.resolver import detect_pitch
from .tuner.controller import TunerController
from .tuner.display import TunerDisplay
from .tuner.pipeline import run_pipeline
from .types import DetectionResult
from .utils.logging import setup_logging

console = Console()
logger = logging.getLogger(__name__)


def render_display(display: TunerDisplay, listening: bool) -> Panel:
    """Panel showing the current note and frequency."""
    status = display.status.value
    style = "bold green" if status.startswith("Note:") else "yellow"
    body = Text.assemble(
        (status, style),
        "\n",
        (f"{display.frequency.value:.2f} Hz", "cyan"),
    )
    title = "[bold]Guitar Tuner[/bold] (listening)" if listening else "[bold]Guitar Tuner[/bold]"
    return Panel(body, title=title, subtitle="Ctrl+C to stop", border_style="blue", padding=(1, 4))


def _format_cents(result: DetectionResult) -> str:
    if result.cents is None:
        return "-"
    return f"{result.cents:+.1f}"


def results_table(results: List[DetectionResult], sample_rate: int, frame_size: int) -> Table:
    table = Table(title="Detected pitches", box=box.ROUNDED)
    table.add_column("Frame", justify="right")
    table.add_column("Time (s)", justify="right")
    table.add_column("Frequency (Hz)", justify="right", style="cyan")
    table.add_column("Note", style="green")
    table.add_column("Cents", justify="right")

    for i, result in enumerate(results):
        table.add_row(
            str(i),
            f"{i * frame_size / sample_rate:.2f}",
            f"{result.frequency_hz:.2f}",
            result.matched_label or "-",
            _format_cents(result),
        )
    return table


def _microphone_available(device) -> bool:
    import sounddevice as sd

    try:
        sd.query_devices(device, kind='input')
    except (sd.PortAudioError, ValueError) as e:
        logger.error("No usable input device: %s", e)
        return False
    return True


def cmd_listen(args, config: TunerConfig) -> int:
    from .capture.microphone import SoundDeviceSource, recommended_frame_size

    if config.frame_size is None:
        try:
            config = config.with_frame_size(recommended_frame_size(config.sample_rate, args.device))
        except DeviceInitFailed as e:
            console.print(f"[bold red]Audio initialization failed:[/bold red] {e}")
            return 1

    display = TunerDisplay()
    controller = TunerController(
        lambda: SoundDeviceSource(config.sample_rate, config.frame_size, device=args.device),
        display=display,
        config=config,
    )

    if not controller.start(lambda: _microphone_available(args.device)):
        console.print(f"[bold red]{display.status.value}[/bold red]")
        return 1

    try:
        with Live(render_display(display, True), console=console, refresh_per_second=10) as live:
            while controller.is_listening:
                live.update(render_display(display, True))
                time.sleep(0.1)
            live.update(render_display(display, False))
    except KeyboardInterrupt:
        pass
    finally:
        controller.stop()

    console.print(f"[dim]Stopped. Last status: {display.status.value}[/dim]")
    return 0


def cmd_analyze(args, config: TunerConfig) -> int:
    from .capture.file import WavFileSource

    try:
        source = WavFileSource(args.file)
    except DeviceInitFailed as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        return 1

    if config.frame_size is None:
        config = config.with_frame_size(DEFAULT_FRAME_SIZE)

    results: List[DetectionResult] = []

    with source:
        try:
            run_pipeline(source, results.append, config, max_frames=args.max_frames)
        except ReadFailure:
            # End of file
            pass

    console.print(results_table(results, source.sample_rate, config.frame_size))
    matched = [r.matched_label for r in results if r.matched]
    if matched:
        most_common = max(set(matched), key=matched.count)
        console.print(f"[green]✓[/green] Most frequent note: [bold]{most_common}[/bold] "
                      f"({matched.count(most_common)}/{len(results)} frames)")
    else:
        console.print("[yellow]No guitar note detected[/yellow]")
    return 0


def cmd_tone(args, config: TunerConfig) -> int:
    frame_size = config.frame_size or DEFAULT_FRAME_SIZE
    frame = sine_frame(args.frequency, config.sample_rate, frame_size, amplitude=args.amplitude)
    result = detect_pitch(
        frame,
        config.sample_rate,
        reference_pitches=config.reference_pitches,
        tolerance_hz=config.tolerance_hz,
        full_spectrum=config.full_spectrum,
    )
    console.print(Panel.fit(
        f"Input tone: {args.frequency:.2f} Hz\n"
        f"Estimate:   {result.frequency_hz:.2f} Hz (bin {result.peak_index}, "
        f"width {config.sample_rate / frame_size:.2f} Hz)\n"
        f"{result.status_text}  cents: {_format_cents(result)}",
        title="[bold]Tone detection[/bold]",
        border_style="blue",
    ))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="guitar-tuner", description="FFT guitar tuner")
    parser.add_argument('--config', type=str, default=None, help="YAML config file")
    parser.add_argument('--log-file', type=str, default=None, help="Write detailed logs here")
    parser.add_argument('--verbose', '-v', action='store_true', help="Log debug messages")

    subparsers = parser.add_subparsers(dest='command', required=True)

    listen = subparsers.add_parser('listen', help="Tune from the microphone")
    listen.add_argument('--device', default=None, help="Input device id or name")

    analyze = subparsers.add_parser('analyze', help="Detect pitches in an audio file")
    analyze.add_argument('file', type=str)
    analyze.add_argument('--max-frames', type=int, default=None)

    tone = subparsers.add_parser('tone', help="Run detection on a synthetic sine")
    tone.add_argument('frequency', type=float)
    tone.add_argument('--amplitude', type=float, default=10000.0)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigError as e:
        console.print(f"[bold red]Config error:[/bold red] {e}")
        return 2

    level = logging.DEBUG if args.verbose else config.log_level_value
    setup_logging(log_file=args.log_file or config.log_file, level=level, name='guitar_tuner')

    device = getattr(args, "device", None)
    if device is not None and device.isdigit():
        args.device = int(device)

    commands = {
        'listen': cmd_listen,
        'analyze': cmd_analyze,
        'tone': cmd_tone,
    }
    return commands[args.command](args, config)


if __name__ == "__main__":
    sys.exit(main())
