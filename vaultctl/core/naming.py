"""
Vault naming.

A vault is identified by the final component of its mountpoint. The same name
is used for the device-mapper mapping, so the mapped device of a vault can be
found again from its mountpoint alone, without any stored state. Create, mount
and umount must all derive names through this module for that to hold.
"""
import os
from pathlib import PurePosixPath
from typing import Union

from vaultctl.core.exceptions import InvalidMountpointError

MAPPER_ROOT = "/dev/mapper"

# DM_NAME_LEN is 128 including the terminating NUL
MAX_NAME_LENGTH = 127

PathLike = Union[str, "os.PathLike[str]"]


def derive_vault_name(mountpoint: PathLike) -> str:
    """
    Derive the vault name from the last component of a mountpoint.

    Args:
        mountpoint: Mountpoint path, absolute or relative

    Returns:
        Vault name, e.g. "myvault" for "/mnt/myvault"

    Raises:
        InvalidMountpointError: If the path has no usable final component
    """
    path = os.fspath(mountpoint)
    name = PurePosixPath(path).name

    if not name or name in (".", ".."):
        raise InvalidMountpointError(
            "mountpoint has no final path component to name the vault after",
            mountpoint=path,
        )
    if len(os.fsencode(name)) > MAX_NAME_LENGTH:
        raise InvalidMountpointError(
            f"vault name '{name}' exceeds {MAX_NAME_LENGTH} bytes",
            mountpoint=path,
        )

    return name


def mapped_device_path(name: str, mapper_root: str = MAPPER_ROOT) -> str:
    """
    Path of the mapped device for a vault name.

    Args:
        name: Vault name
        mapper_root: Directory holding device-mapper nodes

    Returns:
        Mapped device path, e.g. "/dev/mapper/myvault"
    """
    return str(PurePosixPath(mapper_root) / name)
