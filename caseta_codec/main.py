import argparse
import asyncio
import sys

import logfire

from caseta_codec.bootstrap import bootstrap
from caseta_codec.caseta import (
    CasetaConnection,
    CasetaError,
    DefaultTransportProvider,
)
from caseta_codec.core.config import DEFAULT_CONFIG_PATH, BridgeSettings, load_config
from caseta_codec.utils.logging import get_logger

SERVICE_NAME = "caseta-monitor"

logger = get_logger(__name__)


def build_connection(settings: BridgeSettings) -> CasetaConnection:
    provider = DefaultTransportProvider(
        settings.host,
        settings.port,
        connect_timeout=settings.connect_timeout,
    )
    return CasetaConnection(
        settings.username,
        settings.password,
        provider,
        login_timeout=settings.login_timeout,
        idle_timeout=settings.idle_timeout,
        strict=settings.strict,
    )


async def run_monitor(connection: CasetaConnection) -> int:
    """Log every message from the bridge until it disconnects."""
    async with connection:
        try:
            await connection.initialize()
            with logfire.span("Monitor Bridge Events"):
                async for message in connection.messages():
                    logger.info(f"Got message: {message}")
        except CasetaError as e:
            logger.error(f"Ran into an error waiting for the next message: {e}")
            return 1

    logger.info("Disconnected from Caseta bridge")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Log Pico remote events from a Caseta bridge")
    parser.add_argument("--config", default=DEFAULT_CONFIG_PATH, help=f"Path to the YAML config file (default: {DEFAULT_CONFIG_PATH})")
    parser.add_argument("--env", choices=["DEV", "PROD"], default="PROD", help="Environment mode, controls log verbosity (default: PROD)")
    parser.add_argument("--console", action="store_true", help="Also log to stderr through the logging module")
    parser.add_argument("--host", help="Override caseta.host from the config")
    parser.add_argument("--port", type=int, help="Override caseta.port from the config")

    args = parser.parse_args(argv)

    bootstrap(args.env, service_name=SERVICE_NAME, enable_console=args.console)

    config = load_config(args.config)
    if args.host:
        config.set("caseta.host", args.host)
    if args.port:
        config.set("caseta.port", args.port)

    try:
        settings = BridgeSettings.from_config(config)
    except CasetaError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    return asyncio.run(run_monitor(build_connection(settings)))


if __name__ == "__main__":
    sys.exit(main())
