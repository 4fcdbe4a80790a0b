"""
Base exceptions for vaultctl.

This module defines the hierarchy of exceptions used by vaultctl. Each
subclass corresponds to exactly one stage of a vault lifecycle transition.
"""
from typing import Optional


class VaultError(Exception):
    """Base exception for vaultctl errors"""
    stage = "vault"

    def __init__(
        self,
        detail: Optional[str] = None,
        device: Optional[str] = None,
        mountpoint: Optional[str] = None,
    ):
        self.detail = detail
        self.device = device
        self.mountpoint = mountpoint
        super().__init__(detail)

    def __str__(self) -> str:
        context = []
        if self.device:
            context.append(f"device={self.device}")
        if self.mountpoint:
            context.append(f"mountpoint={self.mountpoint}")

        message = f"{self.stage} failed"
        if context:
            message += f" ({', '.join(context)})"
        if self.detail:
            message += f": {self.detail}"
        return message


class InvalidMountpointError(VaultError):
    """Exception raised when no vault name can be derived from the mountpoint"""
    stage = "mountpoint validation"


class FormatError(VaultError):
    """Exception raised when the device can't be formatted as an encrypted volume"""
    stage = "luks format"


class OpenError(VaultError):
    """Exception raised when the encrypted volume can't be opened"""
    stage = "luks open"


class FilesystemCreateError(VaultError):
    """Exception raised when there's an error in filesystem creation"""
    stage = "filesystem creation"


class DirectoryCreateError(VaultError):
    """Exception raised when the mountpoint directory can't be created"""
    stage = "mountpoint creation"


class MountError(VaultError):
    """Exception raised when there's an error in mounting"""
    stage = "mount"


class UnmountError(VaultError):
    """Exception raised when there's an error in unmounting"""
    stage = "unmount"


class CloseError(VaultError):
    """Exception raised when the mapped device can't be closed"""
    stage = "luks close"


class PrerequisiteError(VaultError):
    """Exception raised when required tools or privileges are missing"""
    stage = "prerequisite check"
