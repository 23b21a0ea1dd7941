#!/usr/bin/env python3

from __future__ import annotations

import os
import subprocess
import sys


ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))


def _norm(s: str) -> str:
    return s.replace('\r\n', '\n')


def _run_example(path: str, *, input_data: str | None, extra_args: list, timeout_s: float = 10.0) -> dict:
    cmd = [sys.executable, "-m", "bfinterp", path, *extra_args]
    try:
        p = subprocess.run(
            cmd,
            input=input_data,
            text=True,
            capture_output=True,
            cwd=ROOT,
            timeout=timeout_s,
        )
        return {
            "returncode": p.returncode,
            "stdout": p.stdout,
            "stderr": p.stderr,
            "timeout": False,
        }
    except subprocess.TimeoutExpired as e:
        return {
            "returncode": None,
            "stdout": e.stdout or "",
            "stderr": (e.stderr or "") + "\n[TIMEOUT]",
            "timeout": True,
        }


def main() -> int:
    examples = [
        {
            "file": "examples/01_hello_world.bf",
            "input": None,
            "returncode": 0,
            "check": lambda out, err: out == "Hello World!\n",
            "expect": "exactly equals 'Hello World!\\n'",
        },
        {
            "file": "examples/02_echo.bf",
            "input": "h\ni\n",
            "returncode": 0,
            "check": lambda out, err: out == "hi",
            "expect": "exactly equals 'hi'",
        },
        {
            "file": "examples/03_clear_cell.bf",
            "input": None,
            "returncode": 0,
            "check": lambda out, err: out == "A\n",
            "expect": "exactly equals 'A\\n'",
        },
        {
            "file": "examples/04_wrap.bf",
            "input": None,
            "returncode": 0,
            "check": lambda out, err: out == "U",
            "expect": "exactly equals 'U'",
        },
        {
            "file": "examples/05_out_of_bounds.bf",
            "input": None,
            "returncode": 1,
            "check": lambda out, err: out == "1" and err.startswith("execution error: out of bounds"),
            "expect": "prints '1' then reports an out of bounds execution error",
        },
        {
            "file": "examples/06_nested_loops.bf",
            "input": None,
            "returncode": 0,
            "check": lambda out, err: out == "H",
            "expect": "exactly equals 'H' (fifty cubed modulo 256)",
        },
    ]

    print("=== Examples Verification ===")

    any_fail = False
    for ex in examples:
        # every example must behave the same with and without the optimizer
        for extra_args in ([], ["--no-optimize"]):
            r = _run_example(ex["file"], input_data=ex["input"], extra_args=extra_args)
            out = _norm(r["stdout"])

            passed = r["returncode"] == ex["returncode"] and ex["check"](out, r["stderr"])
            status = "PASS" if passed else "FAIL"
            print(f"\n[{status}] {ex['file']} {' '.join(extra_args)}")

            if passed:
                continue

            any_fail = True
            print(f"Expected: {ex['expect']} (exit {ex['returncode']})")
            print(f"Return code: {r['returncode']}  Timeout: {r['timeout']}")
            print("--- stdout ---")
            print(out)
            print("--- stderr ---")
            print(r["stderr"])

    if any_fail:
        print("\nSome examples FAILED.")
        return 1

    print("\nAll examples passed (output checks).")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
