"""
Validation utilities.

This module provides functions for validating prerequisites before a vault
transition touches the system.
"""
import os
import re
import shutil
import logging
import subprocess
from typing import Dict, List

from vaultctl.utils.command import CommandRunner
from vaultctl.core.exceptions import PrerequisiteError
from vaultctl.core.filesystem import DEFAULT_FILESYSTEM

logger = logging.getLogger('vaultctl')

# LUKS2 headers need cryptsetup 2.0 or newer
MIN_CRYPTSETUP_VERSION = (2, 0)


def required_tools(transition: str, filesystem_type: str = DEFAULT_FILESYSTEM) -> List[str]:
    """
    List the external tools a transition runs.

    Args:
        transition: One of "create", "mount" or "umount"
        filesystem_type: Filesystem built by create

    Returns:
        Tool names to look up on PATH
    """
    tools: Dict[str, List[str]] = {
        "create": ["cryptsetup", "mkfs", f"mkfs.{filesystem_type}", "mount"],
        "mount": ["cryptsetup", "mount"],
        "umount": ["umount", "cryptsetup"],
    }
    return tools[transition]


def check_prerequisites(
    transition: str,
    cmd_runner: CommandRunner,
    filesystem_type: str = DEFAULT_FILESYSTEM
) -> None:
    """
    Check for required tools and permissions.

    Args:
        transition: Transition about to run
        cmd_runner: CommandRunner instance for executing commands
        filesystem_type: Filesystem built by create

    Raises:
        PrerequisiteError: If prerequisites are not met
    """
    tools = required_tools(transition, filesystem_type)

    # In simulation mode, just log what would be checked
    if cmd_runner.simulating:
        logger.info("Checking for root privileges (simulated)")
        for tool in tools:
            logger.info(f"Tool '{tool}' would be checked")
        return

    if os.geteuid() != 0:
        raise PrerequisiteError("vaultctl must be run as root")

    missing_tools = [tool for tool in tools if not shutil.which(tool)]
    if missing_tools:
        raise PrerequisiteError(
            f"missing required tools: {', '.join(missing_tools)}\n"
            "Please install the necessary packages for your distribution and try again"
        )

    if "cryptsetup" in tools:
        check_cryptsetup_version(cmd_runner)


def check_cryptsetup_version(cmd_runner: CommandRunner) -> None:
    """
    Warn when cryptsetup is too old to write LUKS2 headers.

    Args:
        cmd_runner: CommandRunner instance for executing commands
    """
    try:
        result = cmd_runner.run(["cryptsetup", "--version"], check=False)
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning(f"Could not check cryptsetup version: {e}")
        return

    version_str = result.stdout.strip()
    version_match = re.search(r'(\d+)\.(\d+)\.(\d+)', version_str)
    if not version_match:
        logger.warning(f"Could not parse cryptsetup version from: {version_str!r}")
        return

    major, minor, _ = map(int, version_match.groups())
    if (major, minor) < MIN_CRYPTSETUP_VERSION:
        logger.warning(
            f"cryptsetup {major}.{minor} found; LUKS2 requires 2.0 or newer. "
            "Formatting new vaults will likely fail."
        )
    else:
        logger.debug(f"Found {version_str}")
