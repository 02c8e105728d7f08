"""
Command-line interface for the remote agent.
"""

from __future__ import annotations
import logging
import time
from pathlib import Path
from typing import Optional, Tuple

import click

from remote_agent import __version__
from remote_agent.config import AgentConfig
from remote_agent.playback.dispatcher import Dispatcher
from remote_agent.playback.gestures import ScriptedGestures
from remote_agent.playback.injection import InputInjector, RecordingInjector
from remote_agent.playback.replay import RecordedLog, ReplaySummary, SessionReplayDriver


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config: Optional[Path]) -> AgentConfig:
    return AgentConfig.from_file(config) if config else AgentConfig()


def _build_dispatcher(agent_config: AgentConfig, dry_run: bool) -> Dispatcher:
    """Wire the injector and gesture backend selected by the configuration."""
    injector: InputInjector
    if dry_run:
        injector = RecordingInjector()
    else:
        from remote_agent.playback.os_controller import OSController
        injector = OSController(fail_safe=agent_config.fail_safe)

    gestures = None
    if agent_config.dispatcher.gesture_backend == "applescript" and not dry_run:
        gestures = ScriptedGestures()
    return Dispatcher(injector, gestures=gestures, config=agent_config.dispatcher)


def _report(summary: ReplaySummary) -> None:
    click.echo(f"\n✅ Session finished")
    click.echo(f"   - {summary.executed} commands executed")
    click.echo(f"   - {summary.failed} failed")
    if summary.ended_by_sentinel:
        click.echo("   - Ended by the server")
    if summary.stopped:
        click.echo("   - Stopped")


@click.group()
@click.version_option(version=__version__)
def main():
    """Remote Agent - Execute backend instructions as real keyboard and mouse input."""
    pass


@main.command()
@click.option(
    "--prompt", "-p",
    type=str,
    required=True,
    help="Task description sent to the backend"
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file"
)
@click.option(
    "--backend-url", "-b",
    type=str,
    default=None,
    help="Backend base URL (overrides the configuration file)"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
def run(prompt: str, config: Optional[Path], backend_url: Optional[str], verbose: bool):
    """
    Start a live session and execute the backend's instructions.

    This will actually move your mouse cursor and type on your keyboard.

    WARNING: Move mouse to any corner to abort (fail-safe).
    """
    from remote_agent.session import BackendClient, BackendError, LiveInstructionSource

    agent_config = _load_config(config)
    _setup_logging(verbose or agent_config.verbose)
    url = backend_url or agent_config.session.backend_url

    click.echo(f"🌐 Connecting to backend: {url}")
    dispatcher = _build_dispatcher(agent_config, dry_run=False)
    driver = SessionReplayDriver(dispatcher, config=agent_config.replay)

    with BackendClient(url, timeout=agent_config.session.timeout) as backend:
        source = LiveInstructionSource(
            backend,
            prompt,
            state=driver.state,
            interval=agent_config.session.screenshot_interval,
            stop_event=driver.stop_event,
        )
        try:
            summary = driver.run(source)
        except BackendError as e:
            click.echo(f"❌ Could not start session: {e}", err=True)
            raise SystemExit(1)
        except KeyboardInterrupt:
            driver.stop()
            click.echo("\n⏹️  Session interrupted")
            return

    _report(summary)


@main.command()
@click.option(
    "--log", "-l",
    type=click.Path(exists=True, path_type=Path),
    required=True,
    help="Recorded command log (Timestamp,Command CSV or one command per line)"
)
@click.option(
    "--interval", "-n",
    type=float,
    default=None,
    help="Minimum seconds between commands (overrides the configuration file)"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print input events without executing them"
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Enable verbose output"
)
def replay(log: Path, interval: Optional[float], dry_run: bool, config: Optional[Path], verbose: bool):
    """Replay a recorded command log."""
    agent_config = _load_config(config)
    _setup_logging(verbose or agent_config.verbose)
    if interval is not None:
        agent_config.replay.min_interval = interval

    recorded = RecordedLog.from_file(log)
    click.echo(f"🎮 Loaded {len(recorded)} commands from: {log}")

    dispatcher = _build_dispatcher(agent_config, dry_run=dry_run)
    driver = SessionReplayDriver(dispatcher, config=agent_config.replay)
    if dry_run:
        click.echo("\n📋 Dry run - events are recorded, not posted")

    def show(result):
        mark = "✓" if result.ok else "✗"
        click.echo(f"   {mark} {result.describe()}")

    driver.on_result = show
    try:
        summary = driver.run(recorded)
    except KeyboardInterrupt:
        driver.stop()
        click.echo("\n⏹️  Replay interrupted")
        return

    _report(summary)
    if dry_run:
        click.echo(f"   - {len(dispatcher.injector.events)} input events")


@main.command(name="exec")
@click.argument("commands", nargs=-1, required=True)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Print input events without executing them"
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file"
)
def exec_commands(commands: Tuple[str, ...], dry_run: bool, config: Optional[Path]):
    """Execute one or more commands, e.g. 'shortcut:command+c'."""
    agent_config = _load_config(config)
    dispatcher = _build_dispatcher(agent_config, dry_run=dry_run)

    failed = 0
    for command in commands:
        result = dispatcher.run(command)
        if result.ok:
            click.echo(f"✅ {result.describe()}")
        else:
            failed += 1
            click.echo(f"❌ {result.describe()}", err=True)

    if dry_run:
        click.echo(f"\n📋 Dry run - {len(dispatcher.injector.events)} input events:")
        for i, event in enumerate(dispatcher.injector.events):
            click.echo(f"   {i+1}. {event}")

    if failed:
        raise SystemExit(1)


@main.command()
@click.option(
    "--output", "-o",
    type=click.Path(path_type=Path),
    required=True,
    help="Where to write the recorded log (.csv, or .jsonl for raw events)"
)
@click.option(
    "--seconds", "-s",
    type=float,
    default=10.0,
    help="How long to record"
)
@click.option(
    "--config", "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file"
)
def record(output: Path, seconds: float, config: Optional[Path]):
    """Record keyboard and mouse input as a replayable command log."""
    from remote_agent.telemetry import InputListener, TelemetryRecorder

    agent_config = _load_config(config)
    recorder = TelemetryRecorder(queue_size=agent_config.telemetry.queue_size)

    click.echo(f"🔴 Recording input for {seconds:g}s...")
    with InputListener(recorder):
        try:
            time.sleep(seconds)
        except KeyboardInterrupt:
            click.echo("\n⏹️  Recording interrupted")

    events = recorder.drain()
    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix == ".jsonl":
        recorder.write_jsonl(events, output)
        click.echo(f"✅ {len(events)} events written to: {output}")
    else:
        recorded = recorder.to_log(events)
        recorded.to_file(output)
        click.echo(f"✅ {len(recorded)} commands written to: {output}")
    if recorder.dropped:
        click.echo(f"⚠️  {recorder.dropped} events dropped (queue full)")


@main.command()
def check():
    """Check input control and gesture backend availability."""
    click.echo("🔍 Checking input backends...\n")

    try:
        import pyautogui
        width, height = pyautogui.size()
        click.echo(f"  ✅ pyautogui available (screen {width}x{height})")
    except ImportError:
        click.echo("  ⚠️  pyautogui not installed")

    try:
        import pynput  # noqa: F401
        click.echo("  ✅ pynput available")
    except ImportError:
        click.echo("  ⚠️  pynput not installed")

    if ScriptedGestures.is_available():
        click.echo("  ✅ osascript available (applescript gestures)")
    else:
        click.echo("  ⚠️  osascript not found, use gesture_backend: chord")


if __name__ == "__main__":
    main()
