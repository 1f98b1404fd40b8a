"""Configuration templates for cmdpad."""

CONFIG_TEMPLATE = """\
# config.yaml - cmdpad configuration
# Ensure this is valid YAML.
# library_dir: Directory holding the command library files
#   (commands.json, system-commands.json, project-commands.json, prompts.json).
#   Leave empty to use {library_dir}.
# default_cwd: Working directory for commands when none is given. Empty means the current directory.
# command_timeout: Timeout in seconds for commands that run to completion. 0 waits indefinitely.
# kill_grace_period: Seconds a stopped background command gets to exit before it is force-killed.
# console_max_entries: Entries kept in the console log. 0 keeps everything.
# enable_debug: Set to true for verbose debugging output
# dangerous_patterns: Extra regular expressions (case-insensitive) that require confirmation,
#   keyed by domain: git, system, project.
#   Example:
#     git:
#       - 'git\\s+rebase'
# continuous_patterns: Extra regular expressions for commands that run until stopped
#   and are therefore started in the background.
#   Example:
#     - 'cargo\\s+watch'

library_dir:
default_cwd:
command_timeout: 0
kill_grace_period: 3
console_max_entries: 1000
enable_debug: false

dangerous_patterns:
  git: []
  system: []
  project: []

continuous_patterns: []
"""
