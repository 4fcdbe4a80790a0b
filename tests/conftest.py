import posixpath

import pytest

from vaultctl.core.encryption import VolumeManager
from vaultctl.core.exceptions import (
    CloseError,
    DirectoryCreateError,
    FilesystemCreateError,
    FormatError,
    MountError,
    OpenError,
    UnmountError,
)
from vaultctl.core.filesystem import FilesystemBuilder
from vaultctl.core.mount import MountCoordinator
from vaultctl.core.naming import mapped_device_path


class FakeStorage(VolumeManager, FilesystemBuilder, MountCoordinator):
    """
    Deterministic in-memory stand-in for cryptsetup, mkfs and mount.

    Models the raw devices present, which of them carry a LUKS header or a
    filesystem, the device-mapper table, existing directories and the mount
    table. Every call is recorded in `calls` in order.

    `fail_on` maps an operation name to the exception it should raise.
    """

    def __init__(self, devices=("/dev/sdb1", "/dev/sdc1")):
        self.devices = set(devices)
        self.luks = set()
        self.filesystems = set()
        self.mappings = {}
        self.directories = {"/", "/mnt"}
        self.mount_table = {}
        self.calls = []
        self.fail_on = {}

    def _call(self, op, *args):
        self.calls.append((op,) + args)
        if op in self.fail_on:
            raise self.fail_on[op]

    def ops(self):
        return [call[0] for call in self.calls]

    def _raw_device(self, mapped_device):
        return self.mappings.get(posixpath.basename(mapped_device))

    # VolumeManager

    def format(self, device):
        self._call("format", device)
        if device not in self.devices:
            raise FormatError("no such device", device=device)
        self.luks.add(device)
        self.filesystems.discard(device)

    def open(self, device, name):
        self._call("open", device, name)
        if device not in self.luks:
            raise OpenError("not a LUKS device", device=device)
        if name in self.mappings:
            raise OpenError(f"device {name} already exists", device=device)
        self.mappings[name] = device
        return mapped_device_path(name, self.mapper_root)

    def close(self, mapped_device):
        self._call("close", mapped_device)
        name = posixpath.basename(mapped_device)
        if name not in self.mappings:
            raise CloseError("device is not active", device=mapped_device)
        if mapped_device in self.mount_table.values():
            raise CloseError("device is still in use", device=mapped_device)
        del self.mappings[name]

    # FilesystemBuilder

    def build(self, device):
        self._call("build", device)
        raw = self._raw_device(device)
        if raw is None:
            raise FilesystemCreateError("no such device", device=device)
        self.filesystems.add(raw)

    # MountCoordinator

    def ensure_directory(self, path):
        self._call("ensure_directory", path)
        if path in self.directories:
            return False
        self.directories.add(path)
        return True

    def remove_directory(self, path):
        self._call("remove_directory", path)
        self.directories.discard(path)

    def mount(self, source, target):
        self._call("mount", source, target)
        if target not in self.directories:
            raise MountError("mount point does not exist", device=source, mountpoint=target)
        if target in self.mount_table:
            raise MountError("already mounted", device=source, mountpoint=target)
        raw = self._raw_device(source)
        if raw is None or raw not in self.filesystems:
            raise MountError("wrong fs type", device=source, mountpoint=target)
        self.mount_table[target] = source

    def unmount(self, target):
        self._call("unmount", target)
        if target not in self.mount_table:
            raise UnmountError("not mounted", mountpoint=target)
        del self.mount_table[target]


@pytest.fixture
def storage():
    return FakeStorage()

