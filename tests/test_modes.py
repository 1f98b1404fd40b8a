import pytest

from cmdpad.commands.modes import ExecutionMode, ExecutionModeSelector


@pytest.fixture
def selector():
    return ExecutionModeSelector()


@pytest.mark.parametrize("command", [
    "npm start",
    "npm run dev",
    "php artisan serve",
    "python -m http.server 8000",
    "python3 manage.py runserver",
    "uvicorn app:app --reload",
    "tsc --watch",
    "tail -f /var/log/syslog",
    "docker compose up",
    "caffeinate -d",
])
def test_servers_and_watchers_are_continuous(selector, command):
    assert selector.is_continuous(command) is True


@pytest.mark.parametrize("command", [
    "npm run build",
    "npm install",
    "git status",
    "docker compose up -d",
    "vite build",
    "php artisan migrate",
])
def test_bounded_commands_are_not_continuous(selector, command):
    assert selector.is_continuous(command) is False


def test_select_mode_follows_heuristic(selector):
    assert selector.select_mode("npm start") is ExecutionMode.BACKGROUND
    assert selector.select_mode("git status") is ExecutionMode.SYNC


def test_forced_mode_wins(selector):
    assert selector.select_mode("git status", force=ExecutionMode.BACKGROUND) is ExecutionMode.BACKGROUND
    assert selector.select_mode("npm start", force=ExecutionMode.SYNC) is ExecutionMode.SYNC


def test_extra_patterns():
    selector = ExecutionModeSelector([r"cargo\s+watch"])
    assert selector.is_continuous("cargo watch -x run") is True
