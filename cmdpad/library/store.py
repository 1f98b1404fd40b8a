"""Command library files, one JSON array of commands per domain."""

import json
from pathlib import Path
from typing import Iterable, List, Optional

from .defaults import DEFAULT_LIBRARIES
from ..commands.models import CommandDomain, CommandSpec
from ..constants import LIBRARY_DIR, LIBRARY_FILES
from ..utils.helpers import atomic_write_json
from ..utils.logging import logger


class CommandLibrary:
    """Loads and saves the command library of each domain."""
    
    def __init__(self, library_dir: Optional[Path] = None):
        self.library_dir = Path(library_dir) if library_dir else LIBRARY_DIR
    
    def path_for(self, domain: CommandDomain) -> Path:
        return self.library_dir / LIBRARY_FILES[domain.value]
    
    def defaults(self, domain: CommandDomain) -> List[CommandSpec]:
        return [CommandSpec.from_dict(item, domain) for item in DEFAULT_LIBRARIES[domain]]
    
    def load(self, domain: CommandDomain) -> List[CommandSpec]:
        """Load a domain's commands, falling back to the built-in set.
        
        The fallback applies when the file is missing, unreadable, not a JSON
        array, or (for the project domain) an empty array.
        """
        path = self.path_for(domain)
        if not path.exists():
            logger.debug(f"No saved {domain.value} library at {path}; using defaults")
            return self.defaults(domain)
        
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.error(f"Error loading {domain.value} commands from {path}: {e}")
            return self.defaults(domain)
        
        if not isinstance(data, list):
            logger.warning(f"{path} is not a JSON array; using default {domain.value} commands")
            return self.defaults(domain)
        if not data and domain is CommandDomain.PROJECT:
            return self.defaults(domain)
        
        commands = []
        for item in data:
            try:
                commands.append(CommandSpec.from_dict(item, domain))
            except (ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping invalid command in {path}: {e}")
        logger.debug(f"Loaded {len(commands)} {domain.value} commands from {path}")
        return commands
    
    def save(self, domain: CommandDomain, commands: Iterable[CommandSpec]) -> bool:
        """Write a domain's commands, replacing the file atomically."""
        path = self.path_for(domain)
        if atomic_write_json(path, [spec.to_dict() for spec in commands]):
            logger.debug(f"Saved {domain.value} commands to {path}")
            return True
        return False
    
    def find(self, command_id: str, domain: Optional[CommandDomain] = None) -> Optional[CommandSpec]:
        """Look up a command by id in one domain, or in every executable domain."""
        domains = [domain] if domain else [d for d in CommandDomain if d is not CommandDomain.PROMPTS]
        for dom in domains:
            for spec in self.load(dom):
                if spec.id == command_id:
                    return spec
        return None


def create_command_library(library_dir: Optional[Path] = None) -> CommandLibrary:
    """Create a command library rooted at the given directory."""
    return CommandLibrary(library_dir)
