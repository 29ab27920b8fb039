from __future__ import annotations

from pathlib import Path

REPORT_SCHEMA_VERSION = "1"

STATE_DIR = Path(".statecheck")
REPORTS_DIR = STATE_DIR / "reports"
DEFAULT_CONFIG_FILE = Path("statecheck.yaml")

SEED_ENV_VAR = "STATECHECK_SEED"

# Property driver defaults.
DEFAULT_NUM_RUNS = 100
DEFAULT_MAX_COMMANDS = 10
DEFAULT_CONCURRENCY = 1
DEFAULT_SHRINK_MAX_SECONDS = 10.0
DEFAULT_SHRINK_MAX_ITERATIONS = 500

# Failure classes. Adapter faults shrink exactly like postcondition violations.
FAILURE_CLASS_POSTCONDITION = "POSTCONDITION"
FAILURE_CLASS_ADAPTER = "ADAPTER"

RUN_PASSED = "PASSED"
RUN_FAILED = "FAILED"

EXIT_SUCCESS = 0
EXIT_PROPERTY_FAILED = 1
EXIT_INTERNAL_ERROR = 2
