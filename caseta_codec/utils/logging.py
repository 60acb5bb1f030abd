import logging

LOG_TRACE_LEVEL = logging.DEBUG // 2
logging.addLevelName(LOG_TRACE_LEVEL, "TRACE")

class CustomLogger(logging.Logger):
    def trace(self, message, *args, **kwargs):
        if self.isEnabledFor(LOG_TRACE_LEVEL):
            self._log(LOG_TRACE_LEVEL, message, args, **kwargs)

logging.Logger.trace = CustomLogger.trace
logging.setLoggerClass(CustomLogger)


# Function to get a pre-configured logger
def get_logger(name: str = __name__) -> CustomLogger:
        return logging.getLogger(name)  # Returns an instance of CustomLogger


def mask_secret(value: str) -> str:
    """Replace a credential with asterisks of the same length for log output."""
    return "*" * len(value)
