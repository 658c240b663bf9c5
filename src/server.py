"""Protean Engine runner for the back office domain.

Starts Engine workers that process events asynchronously when the domain
runs with ``event_processing = "async"`` (the production overlay):
- OutboxProcessor: polls outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes projectors and event handlers

Usage:
    PROTEAN_ENV=production python src/server.py
    python src/server.py --test-mode   # Drain pending work once and exit
"""

import argparse
import asyncio

from protean.server.engine import Engine


def _get_domain():
    from backoffice.domain import backoffice

    backoffice.init()
    return backoffice


async def run(test_mode: bool = False):
    engine = Engine(_get_domain(), test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Back office Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    asyncio.run(run(args.test_mode))


if __name__ == "__main__":
    main()
