import logging
import logging.config

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_configured = False


def configure_logging(level: str = "INFO") -> None:
    """
    Configure root logging once per process.
    Uvicorn keeps its own handlers; our modules log through the "bloom" hierarchy.
    """
    global _configured
    if _configured:
        logging.getLogger("bloom").setLevel(level.upper())
        return

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {"default": {"format": LOG_FORMAT}},
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                }
            },
            "loggers": {
                "bloom": {"handlers": ["console"], "level": level.upper(), "propagate": False},
            },
        }
    )
    _configured = True
