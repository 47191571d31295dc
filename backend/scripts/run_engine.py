#!/usr/bin/env python3
"""Run the Cognitive Analyst agent, which hosts the background scheduler.

Usage:
    # From the backend/ directory with the venv activated:
    python scripts/run_engine.py

    # Seed demo conversations first:
    python scripts/run_engine.py --seed
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Ensure backend/ is on sys.path so `from cognition.…` imports work
_backend_dir = Path(__file__).resolve().parent.parent
if str(_backend_dir) not in sys.path:
    sys.path.insert(0, str(_backend_dir))

from cognition.config.settings import COGNITIVE_ANALYST_PORT, LOG_LEVEL  # noqa: E402

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s  %(levelname)-7s  %(name)-22s  %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("run_engine")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Cognitive analysis engine")
    parser.add_argument("--port", type=int, default=COGNITIVE_ANALYST_PORT)
    parser.add_argument("--seed", action="store_true", help="seed demo conversations before starting")
    args = parser.parse_args(argv)

    if args.seed:
        from cognition.scripts.seed_demo import seed
        seed()
        logger.info("Demo conversations seeded")

    from cognition.agents.factory import create_cognitive_analyst

    agent = create_cognitive_analyst(port=args.port)
    logger.info("=" * 60)
    logger.info("  Cognitive Analyst  →  port %d", args.port)
    logger.info("  Address: %s", agent.address)
    logger.info("=" * 60)
    agent.run()


if __name__ == "__main__":
    main()
