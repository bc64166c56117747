"""Shell, git and gh utilities.

Provides simple wrappers around subprocess calls for running shell commands,
git and GitHub CLI operations, plus output formatting helpers.
"""

from __future__ import annotations

import subprocess


def git(*args: str, check: bool = True) -> str:
    """Run a git command and return stdout.

    Args:
        *args: Arguments to pass to git (e.g., "add", "Chart.yaml").
        check: If True (default), raise on non-zero exit. Set to False
               for commands that may legitimately fail.

    Returns:
        Stripped stdout from the git command.
    """
    result = subprocess.run(["git", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def gh(*args: str, check: bool = True) -> str:
    """Run a GitHub CLI command and return stdout.

    Authentication comes from GH_TOKEN / GITHUB_TOKEN in the environment,
    which is how gh picks up credentials inside GitHub Actions.
    """
    result = subprocess.run(["gh", *args], capture_output=True, text=True, check=check)
    return result.stdout.strip()


def run(*args: str, check: bool = True) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary command, streaming its output to the terminal.

    Args:
        *args: Command and arguments (e.g., "helm", "package", "charts/app").
        check: If True (default), raise on non-zero exit.

    Returns:
        CompletedProcess with returncode for checking success.
    """
    return subprocess.run(args, check=check)


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print a non-fatal warning and carry on."""
    print(f"  Warning: {msg}")

