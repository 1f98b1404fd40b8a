"""Command library data model for cmdpad."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class CommandDomain(Enum):
    """Command domains, one library file each."""
    GIT = "git"
    SYSTEM = "system"
    PROJECT = "project"
    PROMPTS = "prompts"


class VariableKind(Enum):
    """How a variable's value is collected from the user."""
    TEXT = "text"
    DROPDOWN = "dropdown"


@dataclass(frozen=True)
class Variable:
    """A named placeholder declared on a command template."""
    name: str
    label: str = ""
    kind: VariableKind = VariableKind.TEXT
    options: Tuple[str, ...] = ()

    def __post_init__(self):
        if not self.name:
            raise ValueError("Variable name must not be empty")
        if not self.label:
            object.__setattr__(self, "label", default_label(self.name))
        object.__setattr__(self, "options", tuple(self.options))
        if self.kind is VariableKind.DROPDOWN:
            if not self.options:
                raise ValueError(f"Dropdown variable '{self.name}' needs at least one option")
        elif self.kind is VariableKind.TEXT:
            if self.options:
                raise ValueError(f"Text variable '{self.name}' cannot declare options")
        else:
            raise ValueError(f"Unknown variable kind: {self.kind!r}")

    @property
    def default_value(self) -> str:
        """Initial value shown to the user before any input."""
        if self.kind is VariableKind.DROPDOWN:
            return self.options[0]
        return ""

    def accepts(self, value: str) -> bool:
        """Check whether a value is valid for this variable."""
        if self.kind is VariableKind.DROPDOWN:
            return value in self.options
        return True

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Variable":
        raw_kind = data.get("type", VariableKind.TEXT.value)
        try:
            kind = VariableKind(raw_kind)
        except ValueError:
            raise ValueError(f"Unknown variable type '{raw_kind}' for '{data.get('name')}'")
        options = data.get("options") or ()
        if kind is VariableKind.TEXT:
            # Editors leave stale option lists behind when switching a dropdown back to text
            options = ()
        return cls(
            name=str(data.get("name", "")),
            label=str(data.get("label", "")),
            kind=kind,
            options=tuple(str(o) for o in options),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name, "label": self.label, "type": self.kind.value}
        if self.kind is VariableKind.DROPDOWN:
            data["options"] = list(self.options)
        return data


def default_label(name: str) -> str:
    """Label synthesized for an undeclared placeholder: the identifier, capitalized."""
    return name[:1].upper() + name[1:]


@dataclass(frozen=True)
class CommandSpec:
    """A named, parameterized command template plus its metadata."""
    id: str
    name: str
    template: str
    variables: Tuple[Variable, ...] = ()
    category: str = ""
    requires_confirmation: bool = False
    description: str = ""
    icon: Optional[str] = None
    domain: CommandDomain = CommandDomain.GIT

    def __post_init__(self):
        if not self.id:
            raise ValueError("Command id must not be empty")
        object.__setattr__(self, "variables", tuple(self.variables))
        names = [v.name for v in self.variables]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Command '{self.id}' declares duplicate variables: {', '.join(duplicates)}")

    def variable(self, name: str) -> Optional[Variable]:
        for var in self.variables:
            if var.name == name:
                return var
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any], domain: CommandDomain = CommandDomain.GIT) -> "CommandSpec":
        """Build a spec from a library JSON object.

        Prompt entries carry their body under ``text`` instead of ``command``.
        """
        template = data.get("command")
        if template is None:
            template = data.get("text", "")
        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            template=str(template),
            variables=tuple(Variable.from_dict(v) for v in data.get("variables") or []),
            category=str(data.get("category", "")),
            requires_confirmation=bool(data.get("requiresConfirmation", False)),
            description=str(data.get("description", "")),
            icon=data.get("icon"),
            domain=domain,
        )

    def to_dict(self) -> Dict[str, Any]:
        body_key = "text" if self.domain is CommandDomain.PROMPTS else "command"
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            body_key: self.template,
            "category": self.category,
        }
        if self.domain is not CommandDomain.PROMPTS:
            data["requiresConfirmation"] = self.requires_confirmation
            if self.variables:
                data["variables"] = [v.to_dict() for v in self.variables]
        if self.icon:
            data["icon"] = self.icon
        return data
