"""
Formatting utilities.

Terminal colors for command failures, successful steps and the simulation report.
"""


# ANSI Terminal Colors
class TermColors:
    """ANSI escape codes used by vaultctl's output"""
    SUCCESS = '\033[92m'  # Green: mounted, unmounted, report header
    ERROR = '\033[91m'    # Red: failed commands
    SIM = '\033[96m'      # Cyan: simulated commands and summary
    BOLD = '\033[1m'
    ENDC = '\033[0m'


def colorize(message: str, color: str, enabled: bool = True) -> str:
    """
    Wrap message in a color code, or return it unchanged when colors are off
    (--no-color).

    Args:
        message: Text to color
        color: One of the TermColors codes
        enabled: Whether colored output is on

    Returns:
        The message, colored if enabled
    """
    if not enabled:
        return message
    return f"{color}{message}{TermColors.ENDC}"
