"""Destructive command detection for cmdpad."""

import re
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from .models import CommandDomain, CommandSpec
from ..utils.logging import logger

# (pattern, case_insensitive) signatures per domain
DEFAULT_DANGEROUS_PATTERNS: Dict[CommandDomain, List[Tuple[str, bool]]] = {
    CommandDomain.GIT: [
        (r'git\s+push\s+.*(--force|-f\b)', False),
        (r'git\s+reset\s+--hard', False),
        (r'git\s+clean\s+-[a-z]*f[a-z]*d|git\s+clean\s+-[a-z]*d[a-z]*f', False),
        (r'git\s+push\s+.*--delete', False),
        (r'git\s+branch\s+-D\b', False),
    ],
    CommandDomain.SYSTEM: [
        # Destructive file operations
        (r'rm\s+-[a-z]*(rf|fr)', False),
        (r'rm\s+.*--recursive.*--force|rm\s+.*--force.*--recursive', False),
        (r'sudo\s+rm', False),
        # Format/partition operations
        (r'mkfs', False),
        (r'dd\s+if=', False),
        (r'>\s*/dev/sd', False),
        (r'(^|[;&|]\s*)format\s', True),
        (r'fdisk', False),
        # Power state
        (r'\b(shutdown|reboot|poweroff|halt)\b', True),
        (r'pmset\s+sleepnow', False),
    ],
    CommandDomain.PROJECT: [
        (r'rm\s+-rf', True),
        (r'del\s+/', True),
        (r'(^|[;&|]\s*)format\s+', True),
        (r'mkfs', True),
        (r'dd\s+if=', True),
        (r'\bshutdown\b', True),
        (r'\breboot\b', True),
        (r'migrate:(fresh|reset)|db:wipe', True),
        (r'DROP\s+(DATABASE|TABLE)', True),
    ],
    CommandDomain.PROMPTS: [],
}


class RiskClassifier:
    """Flags resolved commands that should be confirmed before they run.
    
    Classification is advisory: it gates a confirmation step and never
    blocks execution by itself.
    """
    
    def __init__(self, domain: Optional[CommandDomain] = None,
                 extra_patterns: Optional[Dict[CommandDomain, Iterable[str]]] = None):
        """Initialize a classifier.
        
        Args:
            domain: Domain whose signatures apply; None applies every domain
            extra_patterns: Additional case-insensitive signatures per domain
        """
        self.domain = domain
        self._patterns: Dict[CommandDomain, List[Tuple[str, Pattern]]] = {}
        for dom, patterns in DEFAULT_DANGEROUS_PATTERNS.items():
            self._patterns[dom] = [
                (p, re.compile(p, re.IGNORECASE if ci else 0)) for p, ci in patterns
            ]
        for dom, patterns in (extra_patterns or {}).items():
            for pattern in patterns:
                self.add_pattern(pattern, dom)
    
    def _active_domains(self) -> List[CommandDomain]:
        if self.domain is None:
            return list(CommandDomain)
        return [self.domain]
    
    def matched_pattern(self, command: str) -> Optional[str]:
        """Return the first signature matching the command, if any."""
        for dom in self._active_domains():
            for source, compiled in self._patterns[dom]:
                if compiled.search(command):
                    return source
        return None
    
    def is_dangerous(self, command: str) -> bool:
        """Check whether a resolved command matches a destructive signature."""
        pattern = self.matched_pattern(command)
        if pattern is not None:
            logger.debug(f"Dangerous pattern '{pattern}' matched command: {command}")
            return True
        return False
    
    def needs_confirmation(self, spec: CommandSpec, command: str) -> bool:
        """A command needs confirmation if its spec demands it or it looks destructive."""
        return spec.requires_confirmation or self.is_dangerous(command)
    
    def patterns(self, domain: CommandDomain) -> List[str]:
        """Signatures registered for a domain."""
        return [source for source, _ in self._patterns[domain]]
    
    def add_pattern(self, pattern: str, domain: CommandDomain, case_insensitive: bool = True):
        """Add a custom dangerous pattern to a domain."""
        if pattern not in self.patterns(domain):
            flags = re.IGNORECASE if case_insensitive else 0
            self._patterns[domain].append((pattern, re.compile(pattern, flags)))
            logger.debug(f"Added dangerous pattern for {domain.value}: {pattern}")
    
    def remove_pattern(self, pattern: str, domain: CommandDomain):
        """Remove a pattern from a domain."""
        before = len(self._patterns[domain])
        self._patterns[domain] = [(s, c) for s, c in self._patterns[domain] if s != pattern]
        if len(self._patterns[domain]) != before:
            logger.debug(f"Removed dangerous pattern for {domain.value}: {pattern}")


def create_risk_classifier(domain: Optional[CommandDomain] = None,
                           extra_patterns: Optional[Dict[CommandDomain, Iterable[str]]] = None) -> RiskClassifier:
    """Create a risk classifier with the default signatures."""
    return RiskClassifier(domain, extra_patterns)
