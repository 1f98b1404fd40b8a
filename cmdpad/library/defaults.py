"""Built-in command sets used when a domain has no saved library file."""

from typing import Any, Dict, List

from ..commands.models import CommandDomain

DEFAULT_GIT_COMMANDS: List[Dict[str, Any]] = [
    {"id": "git-status", "name": "Status", "description": "Show working tree status",
     "command": "git status", "category": "branching", "requiresConfirmation": False},
    {"id": "git-branch", "name": "List Branches", "description": "List local branches",
     "command": "git branch", "category": "branching", "requiresConfirmation": False},
    {"id": "git-checkout", "name": "Checkout", "description": "Switch to a branch",
     "command": "git checkout {{branch}}", "category": "branching", "requiresConfirmation": False,
     "variables": [{"name": "branch", "label": "Branch Name", "type": "text"}]},
    {"id": "git-create-branch", "name": "New Branch", "description": "Create and switch to a new branch",
     "command": "git checkout -b {{branch}}", "category": "branching", "requiresConfirmation": False,
     "variables": [{"name": "branch", "label": "New Branch Name", "type": "text"}]},
    {"id": "git-add-all", "name": "Stage All", "description": "Stage all changes",
     "command": "git add -A", "category": "commits", "requiresConfirmation": False},
    {"id": "git-commit", "name": "Commit", "description": "Commit staged changes",
     "command": "git commit -m '{{message}}'", "category": "commits", "requiresConfirmation": True,
     "variables": [{"name": "message", "label": "Commit Message", "type": "text"}]},
    {"id": "git-log", "name": "Log", "description": "Show the last 20 commits",
     "command": "git log --oneline -20", "category": "commits", "requiresConfirmation": False},
    {"id": "git-pull", "name": "Pull", "description": "Pull a branch from origin",
     "command": "git pull origin {{branch}}", "category": "sync", "requiresConfirmation": False,
     "variables": [{"name": "branch", "label": "Branch", "type": "dropdown",
                    "options": ["main", "master", "develop"]}]},
    {"id": "git-push", "name": "Push", "description": "Push a branch to origin",
     "command": "git push origin {{branch}}", "category": "sync", "requiresConfirmation": True,
     "variables": [{"name": "branch", "label": "Branch", "type": "text"}]},
    {"id": "git-diff", "name": "Diff", "description": "Show unstaged changes",
     "command": "git diff", "category": "advanced", "requiresConfirmation": False},
    {"id": "git-stash", "name": "Stash", "description": "Stash working changes",
     "command": "git stash", "category": "advanced", "requiresConfirmation": False},
    {"id": "git-stash-pop", "name": "Stash Pop", "description": "Apply the latest stash",
     "command": "git stash pop", "category": "advanced", "requiresConfirmation": False},
    {"id": "git-reset-soft", "name": "Undo Last Commit", "description": "Soft reset to HEAD~1",
     "command": "git reset --soft HEAD~1", "category": "advanced", "requiresConfirmation": True},
]

DEFAULT_SYSTEM_COMMANDS: List[Dict[str, Any]] = [
    {"id": "caffeinate-display", "name": "Keep Display Awake", "description": "Prevent display sleep",
     "command": "caffeinate -d", "category": "power", "requiresConfirmation": False},
    {"id": "pmset-sleepnow", "name": "Sleep Now", "description": "Put the machine to sleep",
     "command": "pmset sleepnow", "category": "power", "requiresConfirmation": True},
    {"id": "say-message", "name": "Say", "description": "Speak a message",
     "command": 'say "{{message}}"', "category": "audio", "requiresConfirmation": False,
     "variables": [{"name": "message", "label": "Message", "type": "text"}]},
    {"id": "ping-host", "name": "Ping", "description": "Ping a host four times",
     "command": "ping -c 4 {{host}}", "category": "network", "requiresConfirmation": False,
     "variables": [{"name": "host", "label": "Host", "type": "text"}]},
    {"id": "list-processes", "name": "Processes", "description": "Top of the process list",
     "command": "ps aux | head -20", "category": "utilities", "requiresConfirmation": False},
    {"id": "disk-usage", "name": "Disk Usage", "description": "Show mounted filesystem usage",
     "command": "df -h", "category": "utilities", "requiresConfirmation": False},
]

DEFAULT_PROJECT_COMMANDS: List[Dict[str, Any]] = [
    {"id": "npm-start", "name": "NPM Start", "description": "Start npm development server",
     "command": "npm start", "category": "server", "requiresConfirmation": False},
    {"id": "npm-run-dev", "name": "NPM Run Dev", "description": "Run development build",
     "command": "npm run dev", "category": "server", "requiresConfirmation": False},
    {"id": "python-serve", "name": "Python Server", "description": "Start Python HTTP server",
     "command": "python -m http.server {{port}}", "category": "server", "requiresConfirmation": False,
     "variables": [{"name": "port", "label": "Port Number", "type": "text"}]},
    {"id": "npm-build", "name": "NPM Build", "description": "Build for production",
     "command": "npm run build", "category": "build", "requiresConfirmation": False},
    {"id": "npm-install", "name": "NPM Install", "description": "Install dependencies",
     "command": "npm install", "category": "build", "requiresConfirmation": False},
    {"id": "npm-test", "name": "NPM Test", "description": "Run the test suite",
     "command": "npm test", "category": "test", "requiresConfirmation": False},
    {"id": "artisan-migrate", "name": "Migrate", "description": "Run database migrations",
     "command": "php artisan migrate", "category": "database", "requiresConfirmation": True},
]

DEFAULT_PROMPTS: List[Dict[str, Any]] = [
    {"id": "ai-code-review", "name": "Code Review Prompt", "category": "ai",
     "text": "Please review this code and provide feedback on:\n1. Code quality and best practices\n"
             "2. Potential bugs or issues\n3. Performance optimizations\n4. Security concerns"},
    {"id": "ai-explain-code", "name": "Explain Code", "category": "ai",
     "text": "Can you explain what this code does? Break it down step by step and explain the logic."},
]

DEFAULT_LIBRARIES: Dict[CommandDomain, List[Dict[str, Any]]] = {
    CommandDomain.GIT: DEFAULT_GIT_COMMANDS,
    CommandDomain.SYSTEM: DEFAULT_SYSTEM_COMMANDS,
    CommandDomain.PROJECT: DEFAULT_PROJECT_COMMANDS,
    CommandDomain.PROMPTS: DEFAULT_PROMPTS,
}
