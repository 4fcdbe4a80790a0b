"""
Type definitions for vaultctl.

This module provides TypedDict definitions and other type aliases
for better type checking throughout the codebase.
"""
from typing import Callable, NamedTuple, Optional, TypedDict


class VaultInfo(TypedDict):
    """Device/mountpoint pairing reported after a lifecycle transition"""
    name: str
    device: Optional[str]
    mapped_device: str
    mountpoint: str


class StepRecord(NamedTuple):
    """A completed step of a transition and how to reverse it, if it can be"""
    stage: str
    detail: str
    undo: Optional[Callable[[], None]] = None
