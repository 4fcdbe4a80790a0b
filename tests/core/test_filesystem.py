import subprocess
from unittest import mock

import pytest

from vaultctl.core.exceptions import FilesystemCreateError
from vaultctl.core.filesystem import MkfsBuilder
from vaultctl.utils.command import CommandRunner


class TestMkfsBuilder:
    @mock.patch("subprocess.run")
    def test_build_ext4_by_default(self, mock_run):
        MkfsBuilder(CommandRunner()).build("/dev/mapper/vault1")

        assert mock_run.call_args[0][0] == ["mkfs", "-t", "ext4", "/dev/mapper/vault1"]

    @mock.patch("subprocess.run")
    def test_build_other_filesystem(self, mock_run):
        MkfsBuilder(CommandRunner(), filesystem_type="xfs").build("/dev/mapper/vault1")

        assert mock_run.call_args[0][0] == ["mkfs", "-t", "xfs", "/dev/mapper/vault1"]

    @mock.patch("subprocess.run")
    def test_build_error(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(
            returncode=1, cmd=["mkfs"], stderr="/dev/mapper/vault1: No such file or directory\n"
        )

        with pytest.raises(FilesystemCreateError) as ex:
            MkfsBuilder(CommandRunner()).build("/dev/mapper/vault1")

        assert ex.value.device == "/dev/mapper/vault1"
        assert "No such file or directory" in str(ex.value)
