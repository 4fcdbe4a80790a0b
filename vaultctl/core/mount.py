"""
Filesystem mounting module.

This module handles attaching a vault's filesystem to its mountpoint and
detaching it again, and the mountpoint directory itself.
"""
import logging
import os
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from vaultctl.utils.command import CommandRunner
from vaultctl.utils.format import TermColors, colorize
from vaultctl.core.exceptions import DirectoryCreateError, MountError, UnmountError

logger = logging.getLogger('vaultctl')


class MountCoordinator(ABC):
    """Mounts and unmounts block devices and manages mountpoint directories."""

    @abstractmethod
    def mount(self, source: str, target: str) -> None:
        """Attach source's filesystem at the existing directory target."""

    @abstractmethod
    def unmount(self, target: str) -> None:
        """Detach whatever is mounted at target."""

    @abstractmethod
    def ensure_directory(self, path: str) -> bool:
        """Create path and its parents if missing; return True if it was created."""

    @abstractmethod
    def remove_directory(self, path: str) -> None:
        """Remove an empty directory."""


class SystemMountCoordinator(MountCoordinator):
    """
    MountCoordinator backed by mount(8) and umount(8).
    """

    def __init__(self, cmd_runner: CommandRunner):
        self.cmd_runner = cmd_runner

    def mount(self, source: str, target: str) -> None:
        """
        Mount a filesystem or log that it would be mounted in simulation mode.

        Args:
            source: Device path to mount
            target: Path where to mount

        Raises:
            MountError: If mount command fails
        """
        try:
            self.cmd_runner.run(["mount", source, target])
        except subprocess.CalledProcessError as e:
            raise MountError(
                f"mount exited with status {e.returncode}: {(e.stderr or '').strip()}",
                device=source,
                mountpoint=target,
            ) from e
        except OSError as e:
            raise MountError(f"could not run mount: {e}", device=source, mountpoint=target) from e

        logger.info(colorize(f"Mounted {source} at {target}", TermColors.SUCCESS, self.cmd_runner.colored_output))

    def unmount(self, target: str) -> None:
        """
        Unmount a filesystem.

        Args:
            target: Mountpoint to detach

        Raises:
            UnmountError: If target isn't mounted or umount fails
        """
        if not self.cmd_runner.simulating and not os.path.ismount(target):
            raise UnmountError("nothing is mounted there", mountpoint=target)

        try:
            self.cmd_runner.run(["umount", target])
        except subprocess.CalledProcessError as e:
            raise UnmountError(
                f"umount exited with status {e.returncode}: {(e.stderr or '').strip()}",
                mountpoint=target,
            ) from e
        except OSError as e:
            raise UnmountError(f"could not run umount: {e}", mountpoint=target) from e

        logger.info(colorize(f"Unmounted {target}", TermColors.SUCCESS, self.cmd_runner.colored_output))

    def ensure_directory(self, path: str) -> bool:
        """
        Create directory if it doesn't exist or log that it would be created in simulation mode.

        Args:
            path: Directory path to create

        Returns:
            True if the directory did not exist before

        Raises:
            DirectoryCreateError: If the directory can't be created
        """
        dir_path = Path(path)
        if dir_path.is_dir():
            logger.debug(f"Mountpoint directory already exists: {path}")
            return False

        if self.cmd_runner.simulating:
            logger.info(f"Would create directory: {path}")
            return True

        try:
            dir_path.mkdir(parents=True)
        except OSError as e:
            raise DirectoryCreateError(str(e), mountpoint=path) from e

        logger.info(f"Created directory: {path}")
        return True

    def remove_directory(self, path: str) -> None:
        if self.cmd_runner.simulating:
            logger.info(f"Would remove directory: {path}")
            return

        Path(path).rmdir()
        logger.info(f"Removed directory: {path}")
