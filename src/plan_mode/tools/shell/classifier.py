"""Planning-mode shell command policy.

An ordered-rule matcher over the raw command text with two lists:
destructive patterns and known-safe patterns. Destructive always wins;
a command matching neither list is allowed.
"""

import re
from typing import Iterable

from plan_mode.tools.shell.models import ClassificationResult, CommandCategory

Rule = tuple[str, str]

# Patterns that modify state (regex, description)
DESTRUCTIVE_PATTERNS: list[Rule] = [
    # Filesystem writes
    (r"(?i)\brm\b", "rm (delete files)"),
    (r"(?i)\brmdir\b", "rmdir (delete directory)"),
    (r"(?i)\bmv\b", "mv (move files)"),
    (r"(?i)\bcp\b", "cp (copy files)"),
    (r"(?i)\bmkdir\b", "mkdir (create directory)"),
    (r"(?i)\btouch\b", "touch (create file)"),
    (r"(?i)\bchmod\b", "chmod (change permissions)"),
    (r"(?i)\bchown\b", "chown (change owner)"),
    (r"(?i)\bchgrp\b", "chgrp (change group)"),
    (r"(?i)\bln\b", "ln (create link)"),
    (r"(?i)\btee\b", "tee (write file)"),
    (r"(?i)\btruncate\b", "truncate (resize file)"),
    (r"(?i)\bdd\b", "dd (raw copy)"),
    (r"(?i)\bshred\b", "shred (destroy file)"),
    # Redirections
    (r"[^<]>(?!>)", "output redirection"),
    (r">>", "append redirection"),
    # Package managers
    (r"(?i)\bnpm\s+(install|uninstall|update|ci|link|publish)", "npm package change"),
    (r"(?i)\byarn\s+(add|remove|install|publish)", "yarn package change"),
    (r"(?i)\bpnpm\s+(add|remove|install|publish)", "pnpm package change"),
    (r"(?i)\bpip\s+(install|uninstall)", "pip package change"),
    (r"(?i)\bapt(-get)?\s+(install|remove|purge|update|upgrade)", "apt package change"),
    (r"(?i)\bbrew\s+(install|uninstall|upgrade)", "brew package change"),
    # Repository writes
    (
        r"(?i)\bgit\s+(add|commit|push|pull|merge|rebase|reset|checkout\s+-b|branch\s+-[dD]"
        r"|stash|cherry-pick|revert|tag|init|clone)",
        "git write operation",
    ),
    # Privileges and processes
    (r"(?i)\bsudo\b", "sudo (privilege escalation)"),
    (r"(?i)\bsu\b", "su (switch user)"),
    (r"(?i)\bkill\b", "kill (signal process)"),
    (r"(?i)\bpkill\b", "pkill (signal processes)"),
    (r"(?i)\bkillall\b", "killall (signal processes)"),
    (r"(?i)\breboot\b", "reboot"),
    (r"(?i)\bshutdown\b", "shutdown"),
    (r"(?i)\bsystemctl\s+(start|stop|restart|enable|disable)", "systemctl service change"),
    (r"(?i)\bservice\s+\S+\s+(start|stop|restart)", "service change"),
    # Editors
    (r"(?i)\b(vim?|nano|emacs|code|subl)\b", "interactive editor"),
]

# Known read-only commands (regex, description)
SAFE_PATTERNS: list[Rule] = [
    *[
        (rf"^\s*{name}\b", f"{name} (read-only)")
        for name in (
            "cat", "head", "tail", "less", "more", "grep", "find", "ls", "pwd",
            "echo", "printf", "wc", "sort", "uniq", "diff", "file", "stat", "du",
            "df", "tree", "which", "whereis", "type", "env", "printenv", "uname",
            "whoami", "id", "date", "cal", "uptime", "ps", "top", "htop", "free",
        )
    ],
    (r"(?i)^\s*git\s+(status|log|diff|show|branch|remote|config\s+--get)", "git read operation"),
    (r"(?i)^\s*git\s+ls-", "git ls-*"),
    (r"(?i)^\s*npm\s+(list|ls|view|info|search|outdated|audit)", "npm query"),
    (r"(?i)^\s*yarn\s+(list|info|why|audit)", "yarn query"),
    (r"(?i)^\s*node\s+--version", "node version"),
    (r"(?i)^\s*python\s+--version", "python version"),
    (r"(?i)^\s*curl\s", "curl (fetch)"),
    (r"(?i)^\s*wget\s+-O\s*-", "wget to stdout"),
    (r"^\s*jq\b", "jq (query JSON)"),
    (r"(?i)^\s*sed\s+-n", "sed -n (print only)"),
    (r"^\s*awk\b", "awk"),
    (r"^\s*rg\b", "ripgrep"),
    (r"^\s*fd\b", "fd (find files)"),
    (r"^\s*bat\b", "bat (view file)"),
    (r"^\s*exa\b", "exa (list files)"),
]


def _compile(rules: Iterable[Rule]) -> list[tuple[re.Pattern[str], str]]:
    return [(re.compile(pattern), desc) for pattern, desc in rules]


class CommandPolicy:
    """Decides whether a shell command may run while planning mode is on.

    Example:
        policy = CommandPolicy()
        policy.is_safe("git status")     # True
        policy.is_safe("cat a > b")      # False (redirection)
        policy.is_safe("make test")      # True (neither list)
    """

    def __init__(
        self,
        safe_patterns: Iterable[Rule] | None = None,
        destructive_patterns: Iterable[Rule] | None = None,
    ):
        self._safe = _compile(SAFE_PATTERNS if safe_patterns is None else safe_patterns)
        self._destructive = _compile(
            DESTRUCTIVE_PATTERNS if destructive_patterns is None else destructive_patterns
        )

    def classify(self, command: str) -> ClassificationResult:
        for pattern, desc in self._destructive:
            if pattern.search(command):
                return ClassificationResult(
                    category=CommandCategory.DESTRUCTIVE,
                    command=command,
                    matched_pattern=pattern.pattern,
                    reason=desc,
                )
        for pattern, desc in self._safe:
            if pattern.search(command):
                return ClassificationResult(
                    category=CommandCategory.SAFE,
                    command=command,
                    matched_pattern=pattern.pattern,
                    reason=desc,
                )
        return ClassificationResult(category=CommandCategory.UNKNOWN, command=command)

    def is_safe(self, command: str) -> bool:
        return self.classify(command).allowed


def default_policy() -> CommandPolicy:
    """Policy with the production rule lists."""
    return CommandPolicy()
