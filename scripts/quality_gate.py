from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path
from typing import NamedTuple, Sequence

REPO_ROOT = Path(__file__).resolve().parents[1]
WALKTHROUGH = REPO_ROOT / "data" / "scenarios" / "walkthrough.json"


class GateStep(NamedTuple):
    name: str
    cmd: Sequence[str]


STEPS: list[GateStep] = [
    GateStep(
        "Pytest (ledger core)",
        [
            sys.executable,
            "-m",
            "pytest",
            "-q",
            "tests",
            "--ignore=tests/test_api_ledger.py",
            "--ignore=tests/test_api_health.py",
        ],
    ),
    GateStep(
        "Pytest (HTTP surface)",
        [sys.executable, "-m", "pytest", "-q", "tests/test_api_ledger.py", "tests/test_api_health.py"],
    ),
    GateStep(
        "Replay walkthrough scenario",
        [sys.executable, "-m", "apps.worker.run_replay", str(WALKTHROUGH)],
    ),
]


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the ledger quality gate steps in order.")
    parser.add_argument(
        "--continue",
        dest="continue_on_failure",
        action="store_true",
        help="Run every step even after a failure.",
    )
    return parser.parse_args(argv)


def _tail(stdout: str | None, stderr: str | None, max_lines: int = 60) -> str:
    combined = "\n".join(part for part in (stdout, stderr) if part)
    return "\n".join(combined.splitlines()[-max_lines:])


def run_gate(continue_on_failure: bool = False) -> int:
    failed: list[str] = []
    for step in STEPS:
        print(f"Running: {' '.join(step.cmd)}")
        completed = subprocess.run(step.cmd, text=True, capture_output=True, cwd=REPO_ROOT)
        if completed.returncode == 0:
            print(f"PASS: {step.name}")
            continue
        failed.append(step.name)
        print(f"FAIL: {step.name}")
        print(_tail(completed.stdout, completed.stderr) or "(no output)")
        if not continue_on_failure:
            break

    print(f"Summary: {len(STEPS) - len(failed)} passed, {len(failed)} failed")
    return 1 if failed else 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    return run_gate(continue_on_failure=args.continue_on_failure)


if __name__ == "__main__":
    sys.exit(main())
