"""
Washflow entry point.

Builds an app session against the in-memory backend and replays one of the
console scenarios. The mobile shell embeds ``WashApp`` directly instead.

Usage:
    python main.py                 # instant booking walkthrough
    python main.py scheduled       # scheduled booking walkthrough
"""

import asyncio
import logging
import sys

from washflow.config import settings

logger = logging.getLogger(__name__)


def _run_console_mode(scenario: str) -> None:
    """Start the offline console demo (no backend required)."""
    from console_demo import ConsoleSession

    logger.info("Starting %s console demo: %s", settings.app_name, scenario)
    asyncio.run(ConsoleSession().run_scenario(scenario))


if __name__ == "__main__":
    _run_console_mode(sys.argv[1] if len(sys.argv) > 1 else "instant")
