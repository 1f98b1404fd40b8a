"""Placeholder extraction and substitution for command templates."""

import re
from enum import Enum
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import TemplateError
from .models import Variable, VariableKind, default_label

PLACEHOLDER_PATTERN = re.compile(r'\{\{(\w+)\}\}')


class MissingValuePolicy(Enum):
    """What resolve() does when a declared variable has no value."""
    EMPTY = "empty"    # substitute an empty string
    STRICT = "strict"  # raise TemplateError


class TemplateEngine:
    """Resolves ``{{name}}`` placeholders in command templates.

    The engine holds no mutable state, so a single instance can be shared
    between threads.
    """
    
    def __init__(self, policy: MissingValuePolicy = MissingValuePolicy.EMPTY):
        self.policy = policy
    
    def extract_placeholders(self, template: str) -> List[str]:
        """Return placeholder identifiers in order of first occurrence, without duplicates."""
        seen: List[str] = []
        for match in PLACEHOLDER_PATTERN.finditer(template):
            if match.group(1) not in seen:
                seen.append(match.group(1))
        return seen
    
    def resolve(self, template: str, variables: Sequence[Variable],
                values: Mapping[str, Optional[str]],
                policy: Optional[MissingValuePolicy] = None) -> str:
        """Substitute every declared variable's placeholder with its value.
        
        Args:
            template: Command template containing ``{{name}}`` placeholders
            variables: Variables declared on the command
            values: User supplied values keyed by variable name
            policy: Overrides the engine's missing value policy for this call
            
        Returns:
            The resolved command string. Placeholders that no declared
            variable names are left untouched.
            
        Raises:
            TemplateError: Under the STRICT policy, if any declared variable has no value
        """
        policy = policy or self.policy
        
        missing = [v.name for v in variables if values.get(v.name) is None]
        if missing and policy is MissingValuePolicy.STRICT:
            raise TemplateError(missing, template)
        
        result = template
        for variable in variables:
            value = values.get(variable.name)
            if value is None:
                value = ""
            placeholder = re.compile(r'\{\{\s*' + re.escape(variable.name) + r'\s*\}\}')
            # A callable replacement inserts the value literally (no backslash escapes)
            result = placeholder.sub(lambda _m, v=str(value): v, result)
        return result
    
    def unresolved_placeholders(self, command: str) -> List[str]:
        """Placeholders still present in a resolved command (undeclared on the spec)."""
        return self.extract_placeholders(command)
    
    def synthesize_variables(self, template: str,
                             variables: Sequence[Variable] = ()) -> Tuple[Variable, ...]:
        """Declared variables plus default text variables for undeclared placeholders."""
        declared = {v.name for v in variables}
        synthesized = [
            Variable(name=name, label=default_label(name), kind=VariableKind.TEXT)
            for name in self.extract_placeholders(template)
            if name not in declared
        ]
        return tuple(variables) + tuple(synthesized)
    
    def preview(self, template: str, variables: Sequence[Variable]) -> str:
        """Render the template with each placeholder shown as ``[Label]``."""
        return self.resolve(
            template, variables,
            {v.name: f"[{v.label}]" for v in variables},
            policy=MissingValuePolicy.EMPTY,
        )
    
    def validate_values(self, variables: Sequence[Variable],
                        values: Mapping[str, Optional[str]]) -> Dict[str, str]:
        """Return an error message per variable whose value is not acceptable."""
        errors: Dict[str, str] = {}
        for variable in variables:
            value = values.get(variable.name)
            if value is None:
                continue
            if variable.kind is VariableKind.DROPDOWN:
                if not variable.accepts(value):
                    errors[variable.name] = (
                        f"'{value}' is not one of: {', '.join(variable.options)}"
                    )
            elif variable.kind is VariableKind.TEXT:
                pass
            else:
                raise ValueError(f"Unknown variable kind: {variable.kind!r}")
        return errors


def create_template_engine(policy: MissingValuePolicy = MissingValuePolicy.EMPTY) -> TemplateEngine:
    """Create a template engine with the given missing value policy."""
    return TemplateEngine(policy)
