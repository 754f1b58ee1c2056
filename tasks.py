"""Developer tasks powered by Invoke."""

from __future__ import annotations

import os
import pathlib
import subprocess
from typing import Iterable

from invoke import task

ROOT = pathlib.Path(__file__).parent.resolve()
ENV = dict(os.environ)
RESULTS_DIR = ROOT / "results"


def _run(command: Iterable[str] | str) -> None:
    if isinstance(command, str):
        cmd = command
    else:
        cmd = " ".join(command)
    subprocess.run(cmd, shell=True, check=True, cwd=ROOT, env=ENV)


def _ensure_results_dir() -> None:
    RESULTS_DIR.mkdir(exist_ok=True)


@task
def tests(_context):
    """Run test suite without coverage (quick feedback)."""
    _run(["python", "-m", "pytest", "tests/"])


@task
def coverage(_context):
    """Run tests under coverage and generate reports."""
    _ensure_results_dir()
    _run(["python", "-m", "coverage", "erase"])
    _run(
        [
            "python",
            "-m",
            "coverage",
            "run",
            "-m",
            "pytest",
            "tests/",
            "--junitxml=results/pytest.xml",
        ]
    )
    _run(["python", "-m", "coverage", "report"])
    _run(["python", "-m", "coverage", "html", "-d", "results/htmlcov"])
    _run(["python", "-m", "coverage", "xml", "-o", "results/coverage.xml"])


@task
def lint(_context):
    """Run formatting and type checks."""
    _run(["python", "-m", "black", "--check", "src", "tests"])
    _run(["python", "-m", "mypy", "src"])


@task
def gc_preview(_context):
    """Show what run retention would delete, without deleting."""
    _run(["python", "-m", "mobiledevagent.cli", "gc", "--dry-run"])
