"""
Centralized constants for command-ext.

Default external tools, shell patterns and logging format.
"""
import re

# ── External tools (overridable per call and via the `tools` config section) ──
SUDO_BIN = "sudo"
SSH_BIN = "ssh"
SHELL_BIN = "bash"

# ── Flags passed to those tools ──
SUDO_USER_FLAG = "-u"
SSH_IDENTITY_FLAG = "-i"
SHELL_COMMAND_FLAG = "-c"

# ── Shell syntax ──
# Names usable as `export NAME=...` / `unset NAME` operands.
ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
# A leading word of this shape is an assignment, not the command name.
ASSIGNMENT_WORD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")
SHELL_RESERVED_WORDS = frozenset({
    "if", "then", "else", "elif", "fi", "do", "done", "case", "esac",
    "while", "until", "for", "in", "function", "select", "time",
})
REDIRECT_OPERATOR = ">"

# ── Check modes accepted by recipes and the CLI ──
CHECK_MODES = ("check", "status", "output", "full")
DEFAULT_CHECK_MODE = "output"

# ── Logging ──
LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s"
DEFAULT_LOG_LEVEL = "INFO"
