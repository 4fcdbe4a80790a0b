"""
vaultctl - Encrypted vault lifecycle tool

This package creates, mounts and unmounts LUKS-encrypted vaults: an encrypted
block device opened through device-mapper, an ext4 filesystem on the mapped
device, and a mountpoint where that filesystem is visible.
"""

__version__ = "0.1.0"
