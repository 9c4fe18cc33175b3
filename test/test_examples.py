#!/usr/bin/env python3
"""
lwparam examples test script

Runs every example under examples/ in a subprocess to make sure it finishes
cleanly. Examples are executed from /tmp so that the package is imported
through PYTHONPATH rather than from the current directory.
"""

import os
import signal
import subprocess
import sys
from pathlib import Path

import pytest

# Get project root (parent of test directory)
PROJECT_ROOT = Path(__file__).parent.parent.resolve()

EXAMPLES = [
    ("examples/parameters/sync_remote_params.py", ["greeting = 'hello'", "shutting down cleanly"]),
    ("examples/parameters/async_remote_params.py", ["types: ['BOOL', 'STRING']", "frame_id = 'map'"]),
]


def run_example_with_timeout(script_path, timeout=15.0, check_output=None):
    """
    Execute example script with timeout

    Args:
        script_path: Path to the script to execute
        timeout: Timeout in seconds (default: 15.0)
        check_output: List of keywords to check in output (optional)

    Returns:
        Tuple of (success: bool, output: str)
    """
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(PROJECT_ROOT), env.get("PYTHONPATH")]))
    process = subprocess.Popen(
        [sys.executable, str(script_path)],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        cwd="/tmp",
        env=env,
        preexec_fn=lambda: signal.signal(signal.SIGINT, signal.SIG_IGN),
    )

    try:
        stdout, stderr = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        process.kill()
        process.communicate()
        return False, "Timeout"

    output = stdout + stderr

    if process.returncode != 0 or "Traceback" in output or "Error" in output:
        return False, output

    if check_output:
        for keyword in check_output:
            if keyword not in output:
                return False, f"Expected keyword '{keyword}' not found in output:\n{output}"

    return True, output


@pytest.mark.skipif(sys.platform == "win32", reason="examples are run with POSIX signal handling")
@pytest.mark.parametrize("script, keywords", EXAMPLES)
def test_example_runs_cleanly(script, keywords):
    success, output = run_example_with_timeout(PROJECT_ROOT / script, check_output=keywords)

    assert success, output
