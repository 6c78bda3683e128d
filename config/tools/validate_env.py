# tools/validate_env.py

import sys           # for exit codes
from pprint import pprint  # for structured printing

# make src discoverable if running as a script
from pathlib import Path
# __file__ is .../config/tools/validate_env.py
# parents[2] is the project root; append ROOT/src
PROJECT_ROOT = Path(__file__).resolve().parents[2]
sys.path.append(str(PROJECT_ROOT / "src"))

from env.loader import load_npc_profile  # import our loader


def main(argv=None) -> None:
    """Load and print the resolved NPC profile, failing fast on errors."""
    args = sys.argv[1:] if argv is None else argv
    path = args[0] if args else None          # optional explicit config path
    try:
        profile = load_npc_profile(path)
    except (OSError, ValueError) as e:
        print("NPC config validation FAILED:", file=sys.stderr)
        print(repr(e), file=sys.stderr)
        sys.exit(1)                          # non-zero exit: CI will mark as failed

    print("NPC config validation OK.")
    print("\nNPC:", profile.name, "(spawn on start)" if profile.spawn_on_start else "")
    print("\nController:")
    pprint(profile.controller)
    print("\nStartup boundary:")
    pprint(profile.boundary)
    print("\nLogging:", profile.logging.level)
    print("\nMonitoring:")
    pprint(profile.monitoring)


if __name__ == "__main__":
    main()  # run main() only when script is executed directly
