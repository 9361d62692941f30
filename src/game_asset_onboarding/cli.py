"""Command-line interface for game asset onboarding.

This module provides the ``game-onboarding`` entry point: a console
rendition of the onboarding wizard plus small status and device queries.
Human-facing messages go to stderr; JSON goes to stdout.
"""

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Callable, TextIO

from .config import OnboardingConfig, parse_network_mount
from .controller import OnboardingController, WizardStep
from .core.errors import NoDevicesFound, OnboardingError
from .engine import FilesystemExtractionEngine
from .help import TOPICS
from .ledger import CompletionLedger, JsonFileStore
from .logging_utils import configure_logging
from .platforms.local import FileBrowser
from .resolver import SourceResolver
from .sources.base import SourceKind, UsbDevice
from .supervisor import ExtractionSupervisor

logger = logging.getLogger(__name__)

Prompt = Callable[[str], str]

WELCOME_TEXT = """\
Welcome! This will copy the game data files from your own copy of the game.
You need the folder containing the .mpq archives (d2data.mpq, d2exp.mpq, ...).
"""


def build_ledger(config: OnboardingConfig) -> CompletionLedger:
    return CompletionLedger(JsonFileStore(config.ledger_path))


def build_controller(
    config: OnboardingConfig,
    on_complete: Callable[[Path], None] | None = None,
) -> OnboardingController:
    """Wire the default engine, resolver, supervisor and ledger together.

    Args:
        config: Paths and tunables
        on_complete: Host hook called once onboarding finishes

    Returns:
        Controller in its initial step
    """
    engine = FilesystemExtractionEngine(
        network_mounts=config.network_mounts,
        network_timeout=config.network_timeout,
    )
    supervisor = ExtractionSupervisor(engine, poll_interval=config.poll_interval)

    resolver = SourceResolver(
        engine,
        file_filter=config.file_filter,
        browse_root=config.browse_root,
        private_dir=config.data_dir,
    )
    return OnboardingController(
        build_ledger(config),
        resolver,
        supervisor,
        config.asset_dir,
        on_complete=on_complete,
    )


# ----------------------------------------------------------------------
# Interactive prompts
# ----------------------------------------------------------------------


def browse_for_archive(browser: FileBrowser, prompt: Prompt, out: TextIO) -> Path | None:
    """Let the user walk the filesystem and pick an archive.

    Returns:
        The chosen file or directory, or None if the user cancelled
    """
    while True:
        entries = browser.entries()
        print(f"\n{browser.current_directory}", file=out)
        for index, entry in enumerate(entries, start=1):
            suffix = "/" if entry.is_dir else ""
            print(f"  {index:3d}. {entry.name}{suffix}", file=out)
        print("  [number] open/select  [..] up  [.] use this folder  [q] cancel", file=out)

        answer = prompt("> ").strip()
        if answer == "q":
            return None
        if answer == ".":
            return browser.current_directory
        if answer == "..":
            if not browser.up():
                print("Already at the top.", file=out)
            continue
        if not answer.isdigit() or not 1 <= int(answer) <= len(entries):
            print("Invalid choice.", file=out)
            continue

        entry = entries[int(answer) - 1]
        if entry.is_dir:
            browser.enter(entry.name)
        else:
            return browser.select(entry.name)


def choose_usb_device(devices: list[UsbDevice], prompt: Prompt, out: TextIO) -> UsbDevice | None:
    for index, device in enumerate(devices, start=1):
        free_mb = device.free_space // (1024 * 1024)
        print(f"  {index}. {device.label} ({device.path}, {free_mb} MB free)", file=out)
    answer = prompt("Device number (empty to cancel): ").strip()
    if answer.isdigit() and 1 <= int(answer) <= len(devices):
        return devices[int(answer) - 1]
    return None


def _prompt_source(
    controller: OnboardingController, prompt: Prompt, out: TextIO
) -> tuple[SourceKind, dict] | None:
    """Ask for a source kind and its parameters. None means quit."""
    while True:
        print("\nWhere are the game files?", file=out)
        print("  1. This device\n  2. USB storage\n  3. Network location", file=out)
        print("  h. Help\n  q. Quit", file=out)
        answer = prompt("> ").strip().lower()

        if answer == "q":
            return None
        if answer == "h":
            topic = controller.open_help()
            print(f"\n{topic.title}\n{topic.content}", file=out)
            continue
        if answer == "1":
            selection = browse_for_archive(controller.resolver.browser(), prompt, out)
            if selection is None:
                continue
            return SourceKind.LOCAL, {"selection": selection}
        if answer == "2":
            devices = controller.usb_devices()
            if not devices:
                print(f"{controller.resolution_error}", file=out)
                continue
            return SourceKind.USB, {"chooser": lambda ds: choose_usb_device(ds, prompt, out)}
        if answer == "3":
            params = {
                "protocol": prompt("Protocol [SMB/FTP/HTTP] (SMB): ").strip() or "SMB",
                "host": prompt("Host: ").strip(),
                "share": prompt("Share or path: ").strip(),
                "username": prompt("Username (empty for guest): ").strip(),
            }
            params["password"] = prompt("Password: ") if params["username"] else ""
            return SourceKind.NETWORK, params

        print("Invalid choice.", file=out)


def _source_from_args(args: argparse.Namespace) -> tuple[SourceKind, dict] | None:
    if args.local:
        return SourceKind.LOCAL, {"selection": args.local}
    if args.usb:
        return SourceKind.USB, {"device": args.usb}
    if args.network:
        protocol, host, share = args.network
        return SourceKind.NETWORK, {
            "protocol": protocol,
            "host": host,
            "share": share,
            "username": args.username or "",
            "password": args.password or "",
        }
    return None


class ProgressPrinter:
    """Controller listener that renders extraction progress on one line."""

    def __init__(self, out: TextIO):
        self.out = out
        self._last_percent = -1

    def __call__(self, controller: OnboardingController) -> None:
        if controller.step is not WizardStep.EXTRACTING:
            return
        percent = int(controller.progress * 100)
        if percent == self._last_percent:
            return
        self._last_percent = percent
        name = controller.current_file or "..."
        print(f"\rExtracting {percent:3d}% {name:<32}", end="", file=self.out, flush=True)

    def reset(self) -> None:
        self._last_percent = -1


def run_wizard(
    controller: OnboardingController,
    preset: tuple[SourceKind, dict] | None = None,
    prompt: Prompt = input,
    out: TextIO | None = None,
) -> int:
    """Drive the controller from the console until it completes or the user quits.

    Args:
        controller: Controller to drive
        preset: Source chosen on the command line; skips all prompts
        prompt: Reads a line of user input
        out: Stream for human-facing output, stderr by default

    Returns:
        Process exit code (0 when onboarding is complete)
    """
    out = out or sys.stderr
    if controller.is_complete:
        print(f"Onboarding already complete: {controller.ledger.get_asset_path()}", file=out)
        return 0

    printer = ProgressPrinter(out)
    controller.add_listener(printer)

    if preset is None:
        print(WELCOME_TEXT, file=out)
    controller.confirm_welcome()

    while True:
        choice = preset if preset is not None else _prompt_source(controller, prompt, out)
        if choice is None:
            print("Onboarding cancelled.", file=out)
            return 1

        kind, params = choice
        printer.reset()
        if not controller.choose_source(kind, **params):
            print(f"Error: {controller.resolution_error}", file=out)
            if preset is not None:
                return 1
            continue

        controller.supervisor.wait()
        print(file=out)

        if controller.is_complete:
            print(f"Onboarding complete. Assets are in {controller.destination}", file=out)
            return 0

        print("Error: extraction failed.", file=out)
        for line in controller.error_lines():
            print(line, file=out)
        topic = controller.open_help()
        print(f"\n{topic.title}: {topic.content}", file=out)

        if preset is not None:
            return 1
        if prompt("Try again? [y/N] ").strip().lower() != "y":
            return 1
        controller.retry()


# ----------------------------------------------------------------------
# Entry point
# ----------------------------------------------------------------------


def _command_status(config: OnboardingConfig) -> int:
    ledger = build_ledger(config)
    status = {
        "first_run": ledger.is_first_run(),
        "asset_path": ledger.get_asset_path(),
        "has_valid_assets": ledger.has_valid_assets(),
    }
    json.dump(status, sys.stdout, indent=2)
    print()
    return 0


def _command_devices(config: OnboardingConfig) -> int:
    controller = build_controller(config)
    try:
        devices = controller.resolver.list_usb_devices()
    except NoDevicesFound as e:
        print(f"{e}", file=sys.stderr)
        devices = []
    json.dump([asdict(device) for device in devices], sys.stdout, indent=2)
    print()
    return 0


def _command_run(config: OnboardingConfig, args: argparse.Namespace) -> int:
    controller = build_controller(config)
    return run_wizard(controller, preset=_source_from_args(args))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="game-onboarding",
        description="Copy game data archives into the application's asset directory",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Interactive wizard
  game-onboarding run

  # Non-interactive, from a folder or one of its archives
  game-onboarding run --local "/media/usb/Diablo II/d2data.mpq"

  # From an SMB share mounted locally at /mnt/games
  game-onboarding run --network SMB nas games --username me --password secret \\
      --mount '\\\\nas\\games=/mnt/games'

  # Show whether onboarding is done
  game-onboarding status
        """,
    )
    parser.add_argument("--data-dir", type=Path, help="Application data directory")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, help="Also write logs to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("status", help="Print onboarding status as JSON")
    subparsers.add_parser("devices", help="List removable storage devices as JSON")
    subparsers.add_parser("topics", help="List help topics")

    run = subparsers.add_parser("run", help="Run the onboarding wizard")
    source = run.add_mutually_exclusive_group()
    source.add_argument("--local", metavar="PATH", help="Archive file or folder on this device")
    source.add_argument("--usb", metavar="DEVICE_PATH", help="Mount path of a USB device")
    source.add_argument(
        "--network",
        nargs=3,
        metavar=("PROTOCOL", "HOST", "SHARE"),
        help="Network location (protocol is SMB, FTP or HTTP)",
    )
    run.add_argument("--username", help="Network username (omit for guest access)")
    run.add_argument("--password", help="Network password")
    run.add_argument("--browse-root", type=Path, help="Folder the file browser starts in")
    run.add_argument(
        "--mount",
        action="append",
        dest="mounts",
        metavar="UNC=PATH",
        help="Local mount point of a network share, e.g. '\\\\nas\\games=/mnt/games' (repeatable)",
    )

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the onboarding tool."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(logging.DEBUG if args.verbose else logging.WARNING, args.log_file)

    try:
        config = OnboardingConfig.from_env(
            data_dir=args.data_dir,
            browse_root=getattr(args, "browse_root", None),
            network_mounts=dict(
                parse_network_mount(value) for value in getattr(args, "mounts", None) or []
            ),
        )
        if args.command == "status":
            code = _command_status(config)
        elif args.command == "devices":
            code = _command_devices(config)
        elif args.command == "topics":
            for topic in TOPICS.values():
                print(f"{topic.id}: {topic.title}")
            code = 0
        else:
            code = _command_run(config, args)
    except OnboardingError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(130)

    sys.exit(code)


if __name__ == "__main__":
    main()
