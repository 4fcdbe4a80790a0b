"""
Disk encryption module.

This module handles LUKS encrypted volumes: formatting a raw device, opening it
as a mapped device and closing the mapping again. Passphrases are never handled
here; cryptsetup prompts the operator on the terminal itself.
"""
import logging
import os
import subprocess
from abc import ABC, abstractmethod
from typing import List, Type

from vaultctl.core.exceptions import CloseError, FormatError, OpenError, VaultError
from vaultctl.core.naming import MAPPER_ROOT, mapped_device_path
from vaultctl.utils.command import CommandRunner

logger = logging.getLogger('vaultctl')

LUKS_TYPE = "luks2"


class VolumeManager(ABC):
    """Formats, opens and closes encrypted volumes."""

    mapper_root = MAPPER_ROOT

    @abstractmethod
    def format(self, device: str) -> None:
        """Irreversibly initialize device as an encrypted volume."""

    @abstractmethod
    def open(self, device: str, name: str) -> str:
        """Unlock device and expose it under the mapper root; return the mapped path."""

    @abstractmethod
    def close(self, mapped_device: str) -> None:
        """Lock the volume and remove its mapping."""


def run_cryptsetup_cmd(
    cmd: List[str],
    cmd_runner: CommandRunner,
    error_cls: Type[VaultError],
    interactive: bool = False,
    **context
) -> None:
    """
    Run a cryptsetup command, translating failures into a vault error.

    Args:
        cmd: The cryptsetup command to run
        cmd_runner: CommandRunner instance for executing commands
        error_cls: Exception class for the stage being run
        interactive: Whether cryptsetup needs the operator's terminal
        **context: Device/mountpoint identifiers attached to the error

    Raises:
        VaultError: An instance of error_cls if the command fails
    """
    try:
        cmd_runner.run(cmd, interactive=interactive)
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise error_cls(
            f"cryptsetup exited with status {e.returncode}" + (f": {stderr}" if stderr else ""),
            **context
        ) from e
    except OSError as e:
        raise error_cls(f"could not run cryptsetup: {e}", **context) from e


class CryptsetupVolumeManager(VolumeManager):
    """
    VolumeManager backed by the cryptsetup command line tool.
    """

    def __init__(self, cmd_runner: CommandRunner, mapper_root: str = MAPPER_ROOT, luks_type: str = LUKS_TYPE):
        self.cmd_runner = cmd_runner
        self.mapper_root = mapper_root
        self.luks_type = luks_type

    def format(self, device: str) -> None:
        logger.info(f"luks: formatting {device} (existing data will be destroyed)")
        run_cryptsetup_cmd(
            ["cryptsetup", "luksFormat", "--type", self.luks_type, device],
            self.cmd_runner,
            FormatError,
            interactive=True,
            device=device,
        )
        logger.info(f"luks: formatted {device}")

    def open(self, device: str, name: str) -> str:
        mapped = mapped_device_path(name, self.mapper_root)

        # cryptsetup would refuse as well, but only after asking for the passphrase
        if not self.cmd_runner.simulating and os.path.exists(mapped):
            raise OpenError(f"a mapping named '{name}' is already open at {mapped}", device=device)

        run_cryptsetup_cmd(
            ["cryptsetup", "open", "--type", "luks", device, name],
            self.cmd_runner,
            OpenError,
            interactive=True,
            device=device,
        )
        logger.info(f"luks: opened device {device} at {mapped}")
        return mapped

    def close(self, mapped_device: str) -> None:
        run_cryptsetup_cmd(
            ["cryptsetup", "close", mapped_device],
            self.cmd_runner,
            CloseError,
            device=mapped_device,
        )
        logger.info(f"luks: closed {mapped_device}")
