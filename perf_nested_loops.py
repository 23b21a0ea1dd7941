import sys
import os
import time

from bfinterp import RunOptions, compile_string, run_file

EXAMPLE = os.path.join(os.path.dirname(__file__), 'examples', '06_nested_loops.bf')


def time_nested_loops():
    with open(EXAMPLE, encoding="utf-8") as f:
        source = f.read()

    for optimize in (False, True):
        label = "optimized" if optimize else "unoptimized"
        options = RunOptions(optimize=optimize)

        start = time.time()
        program = compile_string(source, options=options)
        compile_time = time.time() - start
        print(f"[{label}] Parsing took {compile_time*1000:.2f} ms ({len(program)} instructions)")

        start = time.time()
        result = run_file(EXAMPLE, options=options)
        exec_time = time.time() - start
        if not result.ok:
            print(f"[{label}] run failed: {result.error}", file=sys.stderr)
            return 1
        print(f"[{label}] Run took {exec_time*1000:.2f} ms ({result.steps} steps, output {result.output!r})")
    return 0


if __name__ == "__main__":
    raise SystemExit(time_nested_loops())
