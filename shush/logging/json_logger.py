import logging
import json

TEXT_FORMAT = "%(name)s: %(levelname)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record):
        payload = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload['exc_info'] = self.formatException(record.exc_info)
        return json.dumps(payload)


def configure_logging(level: str | int = logging.WARNING, fmt: str = "text"):
    """Send shush logs to stderr; stdout is reserved for command output."""
    logger = logging.getLogger("shush")
    logger.setLevel(level.upper() if isinstance(level, str) else level)

    handler = logging.StreamHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))

    for old in list(logger.handlers):
        logger.removeHandler(old)
    logger.addHandler(handler)
    logger.propagate = False

    return logger
