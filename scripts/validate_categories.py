#!/usr/bin/env python3
"""Consistency check for the category table."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from budget_planner.categories import CATEGORY_TABLE, validate_category_table


def main() -> int:
    errors = validate_category_table()
    if errors:
        print("Category table validation failed:")
        for message in errors:
            print(f"  - {message}")
        return 1

    print(f"All {len(CATEGORY_TABLE)} categories validated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
