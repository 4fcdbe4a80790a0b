#!/usr/bin/env python3
"""
Main entry point for the vaultctl tool.
"""
from vaultctl.cli import main

if __name__ == "__main__":
    import sys
    sys.exit(main())
