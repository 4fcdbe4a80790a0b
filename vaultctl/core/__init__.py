"""
Core vault operations: encryption, filesystem, mount and the lifecycle orchestrator.
"""
