#!/usr/bin/env python3
"""
Runner script for Threatboard.

This script runs a dashboard session either behind the API server or
headless, logging every state change.
"""

import asyncio
import signal
import argparse
from datetime import datetime
import uvicorn

from threatboard.core.config import settings
from threatboard.core.logging import logger, setup_logging
from threatboard.models.state import AggregationState
from threatboard.services.dashboard_session import create_session
from threatboard.utils.helpers import format_sample_row


def render_state(state: AggregationState):
    """Log the dashboard as the list view would show it."""
    logger.info(f"Threat Level: {state.threat_level}")
    if state.warning_message:
        logger.warning(state.warning_message)
    if state.samples:
        logger.info(format_sample_row(state.samples[-1]))


async def run_headless(args):
    """Run a session without the API server until interrupted."""
    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except NotImplementedError:
            # add_signal_handler is unavailable on Windows
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop_event.set))

    session = create_session(fetch=not args.no_fetch, locations=not args.no_location)
    subscription = session.store.subscribe(render_state)
    try:
        async with session:
            if session.location_available is False and not args.no_location:
                logger.warning("Running without location samples")
            await stop_event.wait()
    finally:
        subscription.dispose()


async def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Threatboard runner")
    parser.add_argument("--no-api", action="store_true", help="Don't start the API server")
    parser.add_argument("--no-fetch", action="store_true", help="Don't run the bulk fetch")
    parser.add_argument("--no-location", action="store_true", help="Don't run the location stream")
    args = parser.parse_args()

    setup_logging()

    print("\n" + "=" * 80)
    print(f"{settings.PROJECT_NAME} v{settings.VERSION}")
    print(f"Starting at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 80 + "\n")

    try:
        if args.no_api:
            logger.info("API server disabled, running headless")
            await run_headless(args)
        else:
            from threatboard.main import create_app

            logger.info(f"Starting API server on {settings.API_HOST}:{settings.API_PORT}")
            app = create_app(
                lambda: create_session(fetch=not args.no_fetch, locations=not args.no_location)
            )
            config = uvicorn.Config(
                app,
                host=settings.API_HOST,
                port=settings.API_PORT,
                log_level=settings.LOG_LEVEL.lower(),
            )
            server = uvicorn.Server(config)
            await server.serve()
    except Exception as e:
        logger.error(f"Error in main: {e}", exc_info=True)
    finally:
        logger.info("Shutdown complete")


if __name__ == "__main__":
    asyncio.run(main())
