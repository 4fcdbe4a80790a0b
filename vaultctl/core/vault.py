"""
Vault lifecycle orchestration.

This module sequences the encryption, filesystem and mount operations into the
three transitions of a vault: create, mount and umount. Steps run strictly in
order and the first failure aborts the transition. Completed steps are kept in
a journal so the point of failure, and what is left to clean up, is logged.
With rollback enabled the journal is undone in reverse order on failure.
"""
import logging
import os
from typing import List, Optional

from vaultctl.core.encryption import VolumeManager
from vaultctl.core.exceptions import VaultError
from vaultctl.core.filesystem import FilesystemBuilder
from vaultctl.core.mount import MountCoordinator
from vaultctl.core.naming import PathLike, derive_vault_name, mapped_device_path
from vaultctl.utils.types import StepRecord, VaultInfo


class VaultOrchestrator:
    """
    Runs vault lifecycle transitions against a set of storage services.

    The vault name, and so the mapped device, is derived from the mountpoint's
    final component in every transition. A vault can only be unmounted by the
    same mountpoint basename it was created or mounted with.
    """

    def __init__(
        self,
        volumes: VolumeManager,
        filesystems: FilesystemBuilder,
        mounts: MountCoordinator,
        rollback: bool = False,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            volumes: Encrypted volume manager
            filesystems: Filesystem builder
            mounts: Mount coordinator
            rollback: Whether to undo completed steps when a transition fails
            logger: Logger to report progress on, defaults to the 'vaultctl' logger
        """
        self.volumes = volumes
        self.filesystems = filesystems
        self.mounts = mounts
        self.rollback = rollback
        self.logger = logger or logging.getLogger('vaultctl')

    @property
    def mapper_root(self) -> str:
        """Mapped devices live wherever the volume manager opens them."""
        return self.volumes.mapper_root

    def create(self, device: PathLike, mountpoint: PathLike) -> VaultInfo:
        """
        Format device as a new encrypted vault, build a filesystem on it and
        mount it at mountpoint. Anything stored on device is destroyed.

        Raises:
            VaultError: The error of the first step that failed
        """
        device, mountpoint = os.fspath(device), os.fspath(mountpoint)
        name = derive_vault_name(mountpoint)
        journal: List[StepRecord] = []

        self.logger.info(f"Creating vault '{name}' on {device}")
        try:
            self._format(device, journal)
            mapped = self._open(device, name, journal)
            self._build_filesystem(mapped, journal)
            self._attach(mapped, mountpoint, journal)
        except VaultError as e:
            self._abort("create", e, journal, device, mountpoint)
            raise

        return VaultInfo(name=name, device=device, mapped_device=mapped, mountpoint=mountpoint)

    def mount(self, device: PathLike, mountpoint: PathLike) -> VaultInfo:
        """
        Open an existing encrypted vault on device and mount it at mountpoint.

        Raises:
            VaultError: The error of the first step that failed
        """
        device, mountpoint = os.fspath(device), os.fspath(mountpoint)
        name = derive_vault_name(mountpoint)
        journal: List[StepRecord] = []

        self.logger.info(f"Mounting vault '{name}' from {device}")
        try:
            mapped = self._open(device, name, journal)
            self._attach(mapped, mountpoint, journal)
        except VaultError as e:
            self._abort("mount", e, journal, device, mountpoint)
            raise

        return VaultInfo(name=name, device=device, mapped_device=mapped, mountpoint=mountpoint)

    def umount(self, mountpoint: PathLike) -> VaultInfo:
        """
        Unmount the vault at mountpoint and close its encrypted volume.

        The volume is only closed once the unmount succeeded.

        Raises:
            VaultError: The error of the first step that failed
        """
        mountpoint = os.fspath(mountpoint)
        name = derive_vault_name(mountpoint)
        mapped = mapped_device_path(name, self.mapper_root)
        journal: List[StepRecord] = []

        self.logger.info(f"Unmounting vault '{name}' from {mountpoint}")
        try:
            self.mounts.unmount(mountpoint)
            journal.append(StepRecord("unmount", f"unmounted {mountpoint}"))

            self.volumes.close(mapped)
            journal.append(StepRecord("close", f"closed {mapped}"))
        except VaultError as e:
            self._abort("umount", e, journal, mapped, mountpoint)
            raise

        return VaultInfo(name=name, device=None, mapped_device=mapped, mountpoint=mountpoint)

    def _format(self, device: str, journal: List[StepRecord]) -> None:
        self.volumes.format(device)
        journal.append(StepRecord("format", f"formatted {device} as an encrypted volume"))

    def _open(self, device: str, name: str, journal: List[StepRecord]) -> str:
        mapped = self.volumes.open(device, name)
        journal.append(StepRecord(
            "open",
            f"opened {device} at {mapped}",
            lambda: self.volumes.close(mapped),
        ))
        return mapped

    def _build_filesystem(self, mapped: str, journal: List[StepRecord]) -> None:
        self.filesystems.build(mapped)
        journal.append(StepRecord("filesystem", f"created filesystem on {mapped}"))

    def _attach(self, mapped: str, mountpoint: str, journal: List[StepRecord]) -> None:
        if self.mounts.ensure_directory(mountpoint):
            journal.append(StepRecord(
                "directory",
                f"created directory {mountpoint}",
                lambda: self.mounts.remove_directory(mountpoint),
            ))

        self.mounts.mount(mapped, mountpoint)
        journal.append(StepRecord("mount", f"mounted {mapped} at {mountpoint}"))

    def _abort(
        self,
        transition: str,
        error: VaultError,
        journal: List[StepRecord],
        device: str,
        mountpoint: str,
    ) -> None:
        """
        Log where a transition stopped and what it left behind, then roll back
        completed steps if enabled.
        """
        if error.device is None:
            error.device = device
        if error.mountpoint is None:
            error.mountpoint = mountpoint

        self.logger.error(f"{transition} aborted at stage '{error.stage}'")
        for step in journal:
            self.logger.error(f"  completed {step.stage}: {step.detail}")

        if not self.rollback:
            for step in reversed(journal):
                if step.undo is not None:
                    self.logger.warning(f"Left in place after {step.stage}, needs manual cleanup: {step.detail}")
            return

        self.logger.warning("Rolling back completed steps")
        for step in reversed(journal):
            if step.undo is None:
                continue
            try:
                step.undo()
                self.logger.info(f"Rolled back {step.stage}: {step.detail}")
            except (VaultError, OSError) as e:
                # The original error is what gets reported; keep undoing the rest
                self.logger.error(f"Could not roll back {step.stage} ({step.detail}): {e}")
