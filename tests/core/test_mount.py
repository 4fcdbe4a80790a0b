import os
import subprocess
from unittest import mock

import pytest

from vaultctl.core.exceptions import DirectoryCreateError, MountError, UnmountError
from vaultctl.core.mount import SystemMountCoordinator
from vaultctl.utils.command import CommandRunner, SimulationMode


class TestSystemMountCoordinator:
    def setup_method(self, method):
        self.mounts = SystemMountCoordinator(CommandRunner(colored_output=False))

    @mock.patch("subprocess.run")
    def test_mount(self, mock_run):
        self.mounts.mount("/dev/mapper/vault1", "/mnt/vault1")

        assert mock_run.call_args[0][0] == ["mount", "/dev/mapper/vault1", "/mnt/vault1"]

    @mock.patch("subprocess.run")
    def test_mount_error(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=32, cmd=["mount"], stderr="mount: /mnt/vault1: wrong fs type\n"
        )

        with pytest.raises(MountError) as ex:
            self.mounts.mount("/dev/mapper/vault1", "/mnt/vault1")

        assert ex.value.device == "/dev/mapper/vault1"
        assert ex.value.mountpoint == "/mnt/vault1"

    @mock.patch("os.path.ismount", return_value=True)
    @mock.patch("subprocess.run")
    def test_unmount(self, mock_run, mock_ismount):
        self.mounts.unmount("/mnt/vault1")

        assert mock_run.call_args[0][0] == ["umount", "/mnt/vault1"]

    @mock.patch("os.path.ismount", return_value=False)
    @mock.patch("subprocess.run")
    def test_unmount_not_mounted(self, mock_run, mock_ismount):
        with pytest.raises(UnmountError) as ex:
            self.mounts.unmount("/mnt/vault1")

        assert "nothing is mounted" in str(ex.value)
        mock_run.assert_not_called()

    @mock.patch("os.path.ismount", return_value=True)
    @mock.patch("subprocess.run")
    def test_unmount_busy(self, mock_run, mock_ismount):
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=32, cmd=["umount"], stderr="umount: /mnt/vault1: target is busy.\n"
        )

        with pytest.raises(UnmountError) as ex:
            self.mounts.unmount("/mnt/vault1")

        assert "target is busy" in str(ex.value)

    def test_ensure_directory_creates_parents(self, tmp_path):
        target = tmp_path / "vaults" / "vault1"

        assert self.mounts.ensure_directory(str(target)) is True
        assert target.is_dir()

    def test_ensure_directory_existing(self, tmp_path):
        assert self.mounts.ensure_directory(str(tmp_path)) is False

    def test_ensure_directory_error(self, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        with pytest.raises(DirectoryCreateError) as ex:
            self.mounts.ensure_directory(str(blocker / "vault1"))

        assert ex.value.mountpoint == str(blocker / "vault1")

    def test_remove_directory(self, tmp_path):
        target = tmp_path / "vault1"
        target.mkdir()

        self.mounts.remove_directory(str(target))

        assert not target.exists()

    def test_simulation_creates_nothing(self, tmp_path):
        mounts = SystemMountCoordinator(CommandRunner(SimulationMode.SIMULATE, colored_output=False))
        target = tmp_path / "vault1"

        assert mounts.ensure_directory(str(target)) is True
        mounts.mount("/dev/mapper/vault1", str(target))
        mounts.unmount(str(target))
        mounts.remove_directory(str(target))

        assert not os.path.exists(target)
        assert [r["command"][0] for r in mounts.cmd_runner.commands_run] == ["mount", "umount"]
