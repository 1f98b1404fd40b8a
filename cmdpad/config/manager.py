"""Configuration manager for cmdpad."""

from typing import Dict, Any, List, Optional
from pathlib import Path
import sys

import yaml

from ..commands.models import CommandDomain
from ..constants import (
    CONFIG_DIR, DEFAULT_COMMAND_TIMEOUT, DEFAULT_KILL_GRACE_PERIOD,
    DEFAULT_CONSOLE_MAX_ENTRIES, DEFAULT_ENABLE_DEBUG
)
from ..utils.logging import logger
from ..utils.helpers import safe_file_write
from .templates import CONFIG_TEMPLATE


class ConfigManager:
    """Manages configuration loading, validation, and setup for cmdpad."""

    def __init__(self, config_dir: Optional[Path] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Custom configuration directory path
        """
        self.config_dir = Path(config_dir) if config_dir else CONFIG_DIR
        self.config_file = self.config_dir / "config.yaml"

        self._config: Optional[Dict[str, Any]] = None

    def initialize(self) -> bool:
        """Set up the configuration directory and load the config.

        Returns:
            True if the configuration was loaded
        """
        if not self._perform_initial_setup():
            return False

        self._config = self._load_config()
        return True

    def _perform_initial_setup(self) -> bool:
        """Creates the config directory and a default config file if missing."""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)

            if not self.config_file.exists():
                content = CONFIG_TEMPLATE.format(library_dir=self.config_dir / "library")
                if not safe_file_write(self.config_file, content, f"config template {self.config_file}"):
                    return False
                logger.system(f"Review {self.config_file} to customize cmdpad.")

            return True

        except Exception as e:
            logger.error(f"Failed during initial setup: {e}")
            return False

    def _load_config(self) -> Dict[str, Any]:
        """Load and validate the configuration file."""
        try:
            with open(self.config_file, 'r') as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML file {self.config_file}: {e}")
            sys.exit(1)
        except IOError as e:
            logger.error(f"Could not read {self.config_file}: {e}")
            sys.exit(1)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            logger.error(f"{self.config_file} is not a valid YAML dictionary.")
            sys.exit(1)

        # Validate and set debug flag
        enable_debug = config_data.get("enable_debug", DEFAULT_ENABLE_DEBUG)
        if not isinstance(enable_debug, bool):
            logger.warning(f"enable_debug in {self.config_file} must be true/false. Defaulting to false.")
            enable_debug = DEFAULT_ENABLE_DEBUG
        config_data["enable_debug"] = enable_debug

        # Validate library directory
        library_dir = config_data.get("library_dir")
        if library_dir in (None, ""):
            library_dir = self.config_dir / "library"
        elif not isinstance(library_dir, str):
            logger.error(f"library_dir in {self.config_file} must be a path string.")
            sys.exit(1)
        config_data["library_dir"] = Path(library_dir).expanduser()

        # Validate default working directory
        default_cwd = config_data.get("default_cwd")
        if default_cwd in (None, ""):
            default_cwd = None
        elif not isinstance(default_cwd, str):
            logger.error(f"default_cwd in {self.config_file} must be a path string.")
            sys.exit(1)
        else:
            default_cwd = Path(default_cwd).expanduser()
            if not default_cwd.is_dir():
                logger.warning(f"default_cwd '{default_cwd}' in {self.config_file} is not a directory.")
        config_data["default_cwd"] = default_cwd

        # Validate command timeout
        cmd_timeout = config_data.get("command_timeout", DEFAULT_COMMAND_TIMEOUT)
        if cmd_timeout is None:
            cmd_timeout = DEFAULT_COMMAND_TIMEOUT
        if isinstance(cmd_timeout, bool) or not (isinstance(cmd_timeout, (int, float)) and cmd_timeout >= 0):
            logger.error(f"command_timeout ('{cmd_timeout}') in {self.config_file} must be a non-negative number.")
            sys.exit(1)
        config_data["command_timeout"] = cmd_timeout

        # Validate kill grace period
        grace = config_data.get("kill_grace_period", DEFAULT_KILL_GRACE_PERIOD)
        if isinstance(grace, bool) or not (isinstance(grace, (int, float)) and grace > 0):
            logger.error(f"kill_grace_period ('{grace}') in {self.config_file} must be a positive number.")
            sys.exit(1)
        config_data["kill_grace_period"] = float(grace)

        # Validate console size
        max_entries = config_data.get("console_max_entries", DEFAULT_CONSOLE_MAX_ENTRIES)
        if max_entries is None:
            max_entries = 0
        if isinstance(max_entries, bool) or not (isinstance(max_entries, int) and max_entries >= 0):
            logger.error(f"console_max_entries ('{max_entries}') in {self.config_file} must be a non-negative integer.")
            sys.exit(1)
        config_data["console_max_entries"] = max_entries

        config_data["dangerous_patterns"] = self._validate_dangerous_patterns(
            config_data.get("dangerous_patterns"))
        config_data["continuous_patterns"] = self._validate_pattern_list(
            config_data.get("continuous_patterns"), "continuous_patterns")

        logger.debug(f"Configuration loaded successfully from {self.config_file}")
        return config_data

    def _validate_pattern_list(self, patterns: Any, key: str) -> List[str]:
        if patterns is None:
            return []
        if not isinstance(patterns, list):
            logger.warning(f"'{key}' in {self.config_file} is not a list. Ignoring it.")
            return []
        return [str(p) for p in patterns if p is not None]

    def _validate_dangerous_patterns(self, patterns: Any) -> Dict[CommandDomain, List[str]]:
        if patterns is None:
            return {}
        if not isinstance(patterns, dict):
            logger.warning(f"'dangerous_patterns' in {self.config_file} is not a map. Ignoring it.")
            return {}
        result: Dict[CommandDomain, List[str]] = {}
        for name, items in patterns.items():
            try:
                domain = CommandDomain(str(name))
            except ValueError:
                logger.warning(f"Unknown domain '{name}' in dangerous_patterns of {self.config_file}.")
                continue
            result[domain] = self._validate_pattern_list(items, f"dangerous_patterns.{name}")
        logger.debug(f"Loaded extra dangerous patterns for {len(result)} domain(s).")
        return result

    @property
    def config(self) -> Dict[str, Any]:
        """Get the current configuration."""
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call initialize() first.")
        return self._config.copy()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        if self._config is None:
            raise RuntimeError("Configuration not loaded. Call initialize() first.")
        return self._config.get(key, default)

    def reload(self) -> None:
        """Reload the configuration from disk."""
        self._config = self._load_config()

    def is_initialized(self) -> bool:
        """Check if the configuration has been initialized."""
        return self._config is not None

    def summary(self) -> List[str]:
        """Human readable lines describing the active configuration."""
        config = self.config
        return [
            f"Config file: {self.config_file}",
            f"Library directory: {config['library_dir']}",
            f"Default working directory: {config['default_cwd'] or '(current directory)'}",
            f"Command timeout: {config['command_timeout'] or 'none'}",
            f"Kill grace period: {config['kill_grace_period']}s",
            f"Console max entries: {config['console_max_entries'] or 'unlimited'}",
            f"Debug: {config['enable_debug']}",
            f"Extra dangerous patterns: {sum(len(v) for v in config['dangerous_patterns'].values())}",
            f"Extra continuous patterns: {len(config['continuous_patterns'])}",
        ]


def create_config_manager(config_dir: Optional[Path] = None) -> ConfigManager:
    """Create and initialize a configuration manager.

    Args:
        config_dir: Custom configuration directory path

    Returns:
        Initialized ConfigManager instance
    """
    manager = ConfigManager(config_dir)
    if not manager.initialize():
        logger.error("Configuration setup failed.")
        sys.exit(1)
    return manager
