"""
Profile Recompute - Aggregate Cache Maintenance
================================================

Recomputes the cached aggregate scores stored on customer rows.
By default only customers whose cache is stale are touched; --all
recomputes every customer.

    python recompute_profiles.py
    python recompute_profiles.py --all
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from src.application import build_service
from src.infrastructure.publishing import DryRunPublisher

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def run_recompute(recompute_all: bool = False) -> int:
    """Recompute aggregates and print a summary. Returns customers refreshed."""

    print("\n" + "=" * 60)
    print("   Welp - Profile Recompute")
    print("=" * 60 + "\n")

    # Nothing is published here; skip real publisher setup
    service = build_service(publisher=DryRunPublisher())

    try:
        refreshed = service.refresh_aggregates(stale_only=not recompute_all)
    except KeyboardInterrupt:
        print("\nInterrupted! Remaining customers stay stale and will refresh on lookup.")
        return 0

    stats = service.get_stats()

    print(f"Recomputed {refreshed} customer profile(s)")
    print("\n" + "=" * 60)
    print(f"   Customers: {stats['customers']} | Reviews: {stats['reviews']} "
          f"| Flagged: {stats['flagged_customers']}")
    print("=" * 60 + "\n")

    return refreshed


def main():
    parser = argparse.ArgumentParser(description="Recompute cached customer aggregates")
    parser.add_argument(
        "--all",
        action="store_true",
        help="Recompute every customer, not just those with a stale cache"
    )
    args = parser.parse_args()

    try:
        run_recompute(recompute_all=args.all)
    except Exception as e:
        logger.exception(f"Recompute failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
