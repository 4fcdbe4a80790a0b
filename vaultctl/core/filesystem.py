"""
Filesystem creation module.

This module creates the filesystem that lives on an opened vault.
"""
import logging
import subprocess
from abc import ABC, abstractmethod

from vaultctl.utils.command import CommandRunner
from vaultctl.core.exceptions import FilesystemCreateError

logger = logging.getLogger('vaultctl')

DEFAULT_FILESYSTEM = "ext4"


class FilesystemBuilder(ABC):
    """Writes a fresh filesystem to a block device."""

    @abstractmethod
    def build(self, device: str) -> None:
        """Create the filesystem, destroying whatever the device held."""


class MkfsBuilder(FilesystemBuilder):
    """
    FilesystemBuilder backed by mkfs.
    """

    def __init__(self, cmd_runner: CommandRunner, filesystem_type: str = DEFAULT_FILESYSTEM):
        self.cmd_runner = cmd_runner
        self.filesystem_type = filesystem_type

    def build(self, device: str) -> None:
        """
        Create a filesystem on a mapped device.

        Args:
            device: Device path to create filesystem on

        Raises:
            FilesystemCreateError: If mkfs fails
        """
        try:
            self.cmd_runner.run(["mkfs", "-t", self.filesystem_type, device])
        except subprocess.CalledProcessError as e:
            raise FilesystemCreateError(
                f"mkfs exited with status {e.returncode}: {(e.stderr or '').strip()}",
                device=device,
            ) from e
        except OSError as e:
            raise FilesystemCreateError(f"could not run mkfs: {e}", device=device) from e

        logger.info(f"{self.filesystem_type}: created filesystem on {device}")
