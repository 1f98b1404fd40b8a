import pytest
import yaml

from cmdpad.commands.models import CommandDomain
from cmdpad.config.manager import ConfigManager, create_config_manager


def write_config(tmp_path, text):
    tmp_path.mkdir(parents=True, exist_ok=True)
    (tmp_path / "config.yaml").write_text(text)


def test_template_is_created_with_defaults(tmp_path):
    manager = create_config_manager(tmp_path)
    assert (tmp_path / "config.yaml").exists()
    yaml.safe_load((tmp_path / "config.yaml").read_text())

    config = manager.config
    assert config["library_dir"] == tmp_path / "library"
    assert config["default_cwd"] is None
    assert config["command_timeout"] == 0
    assert config["kill_grace_period"] == 3.0
    assert config["console_max_entries"] == 1000
    assert config["enable_debug"] is False
    assert config["dangerous_patterns"] == {
        CommandDomain.GIT: [], CommandDomain.SYSTEM: [], CommandDomain.PROJECT: [],
    }
    assert config["continuous_patterns"] == []


def test_custom_values(tmp_path):
    write_config(tmp_path, f"""
library_dir: {tmp_path / 'lib'}
default_cwd: {tmp_path}
command_timeout: 30
kill_grace_period: 1
dangerous_patterns:
  git:
    - 'git\\s+rebase'
  nonsense:
    - 'x'
continuous_patterns:
  - 'cargo\\s+watch'
""")
    manager = create_config_manager(tmp_path)
    assert manager.get("library_dir") == tmp_path / "lib"
    assert manager.get("default_cwd") == tmp_path
    assert manager.get("command_timeout") == 30
    assert manager.get("kill_grace_period") == 1.0
    assert manager.get("dangerous_patterns") == {CommandDomain.GIT: [r"git\s+rebase"]}
    assert manager.get("continuous_patterns") == [r"cargo\s+watch"]


@pytest.mark.parametrize("line", [
    "kill_grace_period: 0",
    "kill_grace_period: soon",
    "command_timeout: -1",
    "console_max_entries: 2.5",
    "library_dir: [a, b]",
])
def test_invalid_values_exit(tmp_path, line):
    write_config(tmp_path, line + "\n")
    with pytest.raises(SystemExit):
        create_config_manager(tmp_path)


def test_non_mapping_config_exits(tmp_path):
    write_config(tmp_path, "- just\n- a list\n")
    with pytest.raises(SystemExit):
        create_config_manager(tmp_path)


def test_invalid_debug_flag_defaults_to_false(tmp_path):
    write_config(tmp_path, "enable_debug: maybe\n")
    assert create_config_manager(tmp_path).get("enable_debug") is False


def test_config_before_initialize_raises(tmp_path):
    with pytest.raises(RuntimeError):
        ConfigManager(tmp_path).config


def test_summary_mentions_file(tmp_path):
    manager = create_config_manager(tmp_path)
    assert manager.summary()[0] == f"Config file: {tmp_path / 'config.yaml'}"
