import logging
from typing import Literal

import logfire

from caseta_codec.utils.logging import get_logger
logger = get_logger(__name__)

EnvironmentT = Literal['DEV', 'TEST', 'PROD']

logfire_handler = None

def configure_logfire(environment_mode: EnvironmentT, service_name: str):
    global logfire_handler

    level = "debug" if environment_mode == 'DEV' else "info"
    console_options = logfire.ConsoleOptions(min_log_level=level)

    # Only export when a write token is configured for this machine
    logfire.configure(
        service_name=service_name,
        environment=environment_mode,
        console=console_options,
        send_to_logfire="if-token-present",
    )

    if logfire_handler is not None:
        return

    handler = logfire.LogfireLoggingHandler()
    handler.setLevel(logging.DEBUG)
    logging.getLogger().addHandler(handler)
    logfire_handler = handler

def configure_logging(environment_mode: EnvironmentT, enable_console: bool = False):
    level = logging.DEBUG if environment_mode == 'DEV' else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    if enable_console:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)  # Set the level for console output
        formatter = logging.Formatter("[{levelname}]\t{name}\t{message}", style="{")
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

def bootstrap(environment_mode: EnvironmentT, service_name: str = "caseta-monitor", enable_console: bool = False):
    configure_logfire(environment_mode, service_name)
    configure_logging(environment_mode, enable_console)
    logger.debug(f"Bootstrapped {service_name} in {environment_mode} mode")
