#!/usr/bin/env python3
"""Print every readiness check, marking which ones gate readiness. Exit 0 when ready, 1 otherwise."""
import sys
from pathlib import Path

_backend = Path(__file__).resolve().parent.parent
if str(_backend) not in sys.path:
    sys.path.insert(0, str(_backend))

from app.readiness import REQUIRED_CHECKS, is_ready, run_all_checks


def main() -> int:
    checks = run_all_checks()
    ready, summary = is_ready(checks)
    width = max(len(name) for name in summary)
    for name, msg in summary.items():
        passed = checks[name][0]
        kind = "required" if name in REQUIRED_CHECKS else "optional"
        print(f"  {'✅' if passed else '❌'} {name.ljust(width)}  [{kind}]  {msg}")
    print("")
    print("READY" if ready else "NOT READY")
    return 0 if ready else 1


if __name__ == "__main__":
    sys.exit(main())
