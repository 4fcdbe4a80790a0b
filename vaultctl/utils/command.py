"""
Command execution utilities.

This module provides tools for executing external commands with simplified simulation support.
"""
import logging
import os
import subprocess
import uuid
from enum import Enum
from typing import Dict, List

from vaultctl.utils.format import TermColors, colorize

logger = logging.getLogger('vaultctl')


class SimulationMode(Enum):
    """Enumeration for simulation modes"""
    DISABLED = 0  # Normal operation
    SIMULATE = 1  # Simulate operations


class CommandRunner:
    """
    Class responsible for command execution with simulation support.
    Acts as a wrapper around subprocess.run with additional functionality.
    """
    def __init__(self, simulation_mode: SimulationMode = SimulationMode.DISABLED, colored_output: bool = True):
        """
        Initialize the command runner.

        Args:
            simulation_mode: Simulation mode to operate in
            colored_output: Whether to use colored output in terminal
        """
        self.simulation_mode = simulation_mode
        self.colored_output = colored_output
        self.commands_run = []

        # Generate a unique simulation ID
        self.simulation_id = str(uuid.uuid4())[:8]

    @property
    def simulating(self) -> bool:
        return self.simulation_mode == SimulationMode.SIMULATE

    def run(self, cmd: List[str], check: bool = True, interactive: bool = False, **kwargs) -> subprocess.CompletedProcess:
        """
        Run an external command or simulate running it.

        Interactive commands keep the caller's terminal for stdin and stdout so
        the tool can prompt the operator (cryptsetup asks for confirmation and
        passphrases this way); only stderr is captured.

        Args:
            cmd: Command to run as list of strings
            check: Whether to check for non-zero return code
            interactive: Whether the command needs the operator's terminal
            **kwargs: Additional arguments to pass to subprocess.run

        Returns:
            CompletedProcess instance from subprocess.run
        """
        cmd_str = ' '.join(cmd)
        logger.debug(f"Command requested: {cmd_str}")

        # Keep track of this command
        cmd_record = {
            "command": cmd.copy(),
            "simulated": self.simulating
        }
        self.commands_run.append(cmd_record)

        # For simulation mode
        if self.simulating:
            sim_prefix = colorize(f"[SIM:{self.simulation_id}]", TermColors.SIM, self.colored_output)
            logger.info(f"{sim_prefix} Would execute: {cmd_str}")

            # Create a simulated completed process
            return self._simulate_command(cmd)

        if interactive:
            capture = {"stderr": subprocess.PIPE}
        else:
            capture = {"capture_output": True}

        # For real execution mode
        try:
            result = subprocess.run(
                cmd,
                check=check,
                text=True,
                **capture,
                **kwargs
            )
            return result

        except subprocess.CalledProcessError as e:
            logger.error(colorize(f"Command failed: {cmd_str}", TermColors.ERROR, self.colored_output))
            logger.error(f"Return code: {e.returncode}")
            if e.stdout:
                logger.error(f"Stdout: {e.stdout}")
            logger.error(f"Stderr: {e.stderr}")
            raise

    def _simulate_command(self, cmd: List[str]) -> subprocess.CompletedProcess:
        """
        Generate simulated output for a command.

        Args:
            cmd: Command to simulate

        Returns:
            CompletedProcess with simulated output
        """
        result = subprocess.CompletedProcess(
            args=cmd,
            returncode=0,
            stdout="",
            stderr=""
        )

        cmd_name = os.path.basename(cmd[0]) if cmd else ""

        if cmd_name == "cryptsetup" and "--version" in cmd:
            result.stdout = "cryptsetup 2.6.1\n"

        return result

    def get_simulation_report(self) -> str:
        """
        Generate a report of all simulated commands.

        Returns:
            Formatted string with report of simulated commands
        """
        if not self.simulating:
            return "Simulation mode is not active."

        report = []
        report.append("=" * 80)
        report.append(f"SIMULATION REPORT [ID: {self.simulation_id}]")
        report.append("=" * 80)
        report.append("")

        # Group commands by tool
        command_groups: Dict[str, List[dict]] = {}
        for cmd_record in self.commands_run:
            cmd = cmd_record["command"]
            cmd_type = os.path.basename(cmd[0]) if cmd else "unknown"
            command_groups.setdefault(cmd_type, []).append(cmd_record)

        for cmd_type, cmd_records in command_groups.items():
            report.append(f"{cmd_type.upper()} COMMANDS:")
            report.append("-" * 40)

            for i, cmd_record in enumerate(cmd_records, 1):
                cmd_str = ' '.join(cmd_record["command"])
                report.append(f"{i}. {cmd_str}")

            report.append("")

        # Summary
        report.append("-" * 80)
        report.append(f"Total commands simulated: {len(self.commands_run)}")
        report.append("=" * 80)

        return "\n".join(report)
