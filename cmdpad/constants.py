"""Constants used throughout the cmdpad package."""

from pathlib import Path
from colorama import Fore, Style

# Configuration paths
CONFIG_DIR = Path.home() / ".config" / "cmdpad"
LIBRARY_DIR = CONFIG_DIR / "library"

# ANSI Color Codes (using colorama)
CLR_RESET = Style.RESET_ALL
CLR_RED = Fore.RED
CLR_BOLD_RED = Style.BRIGHT + Fore.RED
CLR_GREEN = Fore.GREEN
CLR_BOLD_GREEN = Style.BRIGHT + Fore.GREEN
CLR_YELLOW = Fore.YELLOW
CLR_BOLD_YELLOW = Style.BRIGHT + Fore.YELLOW
CLR_MAGENTA = Fore.MAGENTA
CLR_BOLD_MAGENTA = Style.BRIGHT + Fore.MAGENTA
CLR_CYAN = Fore.CYAN
CLR_BOLD_CYAN = Style.BRIGHT + Fore.CYAN
CLR_WHITE = Fore.WHITE
CLR_BOLD_WHITE = Style.BRIGHT + Fore.WHITE

# Library file names per command domain
LIBRARY_FILES = {
    "git": "commands.json",
    "system": "system-commands.json",
    "project": "project-commands.json",
    "prompts": "prompts.json",
}

# Output stream names used by lifecycle events
STREAM_STDOUT = "stdout"
STREAM_STDERR = "stderr"

# Exit code reported when a caller-imposed timeout expires
TIMEOUT_EXIT_CODE = 124

# Default configuration values
DEFAULT_COMMAND_TIMEOUT = 0  # 0 means no timeout for synchronous commands
DEFAULT_KILL_GRACE_PERIOD = 3.0
DEFAULT_CONSOLE_MAX_ENTRIES = 1000
DEFAULT_ENABLE_DEBUG = False
READ_CHUNK_SIZE = 4096
