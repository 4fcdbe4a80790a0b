"""
Command-line interface for vaultctl.

This module handles argument parsing and runs the requested vault transition.
"""
import argparse
import logging
import os
import sys
from typing import List, Optional

from vaultctl import __version__
from vaultctl.utils.logging import setup_logging
from vaultctl.utils.command import CommandRunner, SimulationMode
from vaultctl.utils.format import TermColors, colorize
from vaultctl.utils.validation import check_prerequisites
from vaultctl.core.encryption import CryptsetupVolumeManager
from vaultctl.core.filesystem import MkfsBuilder
from vaultctl.core.naming import derive_vault_name
from vaultctl.core.mount import SystemMountCoordinator
from vaultctl.core.vault import VaultOrchestrator
from vaultctl.core.exceptions import VaultError

logger = logging.getLogger('vaultctl')


def _add_device_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-d", "--device",
        required=True,
        help="Device partition holding the vault (e.g., /dev/sdb1)"
    )


def _add_mountpoint_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-m", "--mountpoint",
        required=True,
        help="Directory where the vault is mounted; its last component names the vault"
    )


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Args:
        argv: Arguments to parse, defaults to sys.argv[1:]

    Returns:
        Namespace containing parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog="vaultctl",
        description="Create, mount and unmount LUKS-encrypted vaults"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose log output"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging, including every command run"
    )

    parser.add_argument(
        "-s", "--simulate",
        action="store_true",
        help="Simulate operations without making any changes to the system"
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output"
    )

    parser.add_argument(
        "--rollback",
        action="store_true",
        help="Undo completed steps (unmount, remove created directory, close volume) if a step fails"
    )

    parser.add_argument(
        "--skip-checks",
        action="store_true",
        help="Skip the root privilege and required tools checks"
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    create_parser = subparsers.add_parser(
        "create",
        help="Create a new vault on a partition (WARNING: erases ALL data on the device)"
    )
    _add_device_argument(create_parser)
    _add_mountpoint_argument(create_parser)

    mount_parser = subparsers.add_parser(
        "mount",
        help="Mount an existing vault in the filesystem"
    )
    _add_device_argument(mount_parser)
    _add_mountpoint_argument(mount_parser)

    umount_parser = subparsers.add_parser(
        "umount",
        help="Unmount a vault from the filesystem and close the LUKS volume"
    )
    _add_mountpoint_argument(umount_parser)

    return parser.parse_args(argv)


def build_orchestrator(args: argparse.Namespace, cmd_runner: CommandRunner) -> VaultOrchestrator:
    """
    Wire the command-backed services into an orchestrator.

    Args:
        args: Command line arguments
        cmd_runner: CommandRunner instance shared by all services

    Returns:
        Orchestrator ready to run a transition
    """
    return VaultOrchestrator(
        CryptsetupVolumeManager(cmd_runner),
        MkfsBuilder(cmd_runner),
        SystemMountCoordinator(cmd_runner),
        rollback=args.rollback,
        logger=logger,
    )


def display_simulation_summary(cmd_runner: CommandRunner) -> None:
    """
    Display a summary of the simulation.

    Args:
        cmd_runner: CommandRunner instance for executing commands
    """
    if not cmd_runner.simulating:
        return

    report = cmd_runner.get_simulation_report()

    try:
        terminal_width = os.get_terminal_size().columns
    except (AttributeError, OSError):
        terminal_width = 80

    stars = "*" * terminal_width
    color = cmd_runner.colored_output

    print(f"\n{colorize(stars, TermColors.SIM, color)}")
    print(colorize("SIMULATION COMPLETE - NO CHANGES WERE MADE", TermColors.SIM + TermColors.BOLD, color))
    print(f"{colorize(stars, TermColors.SIM, color)}\n")

    print(colorize("The following operations would have been performed:", TermColors.SUCCESS, color))
    print(report)

    print(f"\n{colorize('To execute these operations for real, run without the --simulate flag.', TermColors.SIM, color)}")


def run_command(args: argparse.Namespace, orchestrator: VaultOrchestrator) -> str:
    """
    Run the transition named on the command line.

    Args:
        args: Command line arguments
        orchestrator: Orchestrator to run it with

    Returns:
        Confirmation message for the operator

    Raises:
        VaultError: If a step of the transition fails
    """
    if args.command == "create":
        vault = orchestrator.create(args.device, args.mountpoint)
        return f"{vault['device']} now mounted at {vault['mountpoint']}"
    elif args.command == "mount":
        vault = orchestrator.mount(args.device, args.mountpoint)
        return f"{vault['device']} now mounted at {vault['mountpoint']}"
    else:
        vault = orchestrator.umount(args.mountpoint)
        return f"{vault['mountpoint']} now unmounted"


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main function.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    args = None
    try:
        args = parse_arguments(argv)

        setup_logging(args.verbose, args.debug)

        cmd_runner = CommandRunner(
            SimulationMode.SIMULATE if args.simulate else SimulationMode.DISABLED,
            not args.no_color
        )

        if args.simulate:
            logger.info("Running in simulation mode - NO CHANGES WILL BE MADE")

        # Reject an unusable mountpoint before anything touches the system
        derive_vault_name(args.mountpoint)

        if args.skip_checks:
            logger.warning("Skipping prerequisite checks as requested")
        else:
            check_prerequisites(args.command, cmd_runner)

        orchestrator = build_orchestrator(args, cmd_runner)
        message = run_command(args, orchestrator)

        if args.simulate:
            display_simulation_summary(cmd_runner)
        else:
            print(message)

        return 0

    except VaultError as e:
        logger.error(str(e))
        return 1

    except KeyboardInterrupt:
        logger.error("Operation cancelled by user")
        return 130

    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if args is not None and args.debug:
            import traceback
            traceback.print_exc()
        return 1


# For module import compatibility
if __name__ == "__main__":
    sys.exit(main())
