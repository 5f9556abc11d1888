"""
populate_demo_data.py

Usage:
    python populate_demo_data.py [--reset]

Loads the demo sites, assets, system tanks and a few completed extinguisher
periods into the configured database (FIRETRACK_DATABASE_URI, defaulting to
firetrack.db next to the package). Without --reset existing data is kept and
the script does nothing if sites are already present.
"""

import sys

from firetrack import create_app
from firetrack.utils.seed import populate_demo_data


def main() -> int:
    reset = "--reset" in sys.argv[1:]
    app = create_app()
    with app.app_context():
        seeded = populate_demo_data(reset=reset, skip_if_exists=not reset)
    print("Demo data loaded." if seeded else "Sites already present; nothing to do.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
