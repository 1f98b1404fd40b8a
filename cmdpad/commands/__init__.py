"""Command resolution, classification and execution for cmdpad."""

from .errors import (
    CommandPadError, TemplateError, LifecycleError,
    SpawnError, AlreadyRunningError, NotFoundError,
)
from .models import CommandDomain, CommandSpec, Variable, VariableKind
from .template import MissingValuePolicy, TemplateEngine, create_template_engine
from .safety import RiskClassifier, create_risk_classifier
from .modes import ExecutionMode, ExecutionModeSelector, create_mode_selector
from .events import EventChannel, FinishedEvent, OutputEvent, ProcessState, Subscription
from .executor import CommandExecutor, CommandResult, LaunchResult, create_command_executor
from .lifecycle import ProcessInfo, ProcessLifecycleManager, create_lifecycle_manager
from .confirmation import ConfirmationPrompt, create_confirmation_gate

__all__ = [
    "CommandPadError",
    "TemplateError",
    "LifecycleError",
    "SpawnError",
    "AlreadyRunningError",
    "NotFoundError",
    "CommandDomain",
    "CommandSpec",
    "Variable",
    "VariableKind",
    "MissingValuePolicy",
    "TemplateEngine",
    "create_template_engine",
    "RiskClassifier",
    "create_risk_classifier",
    "ExecutionMode",
    "ExecutionModeSelector",
    "create_mode_selector",
    "EventChannel",
    "FinishedEvent",
    "OutputEvent",
    "ProcessState",
    "Subscription",
    "CommandExecutor",
    "CommandResult",
    "LaunchResult",
    "create_command_executor",
    "ProcessInfo",
    "ProcessLifecycleManager",
    "create_lifecycle_manager",
    "ConfirmationPrompt",
    "create_confirmation_gate",
]
