from logging.config import dictConfig


def configure_logging(level: str = "INFO") -> None:
    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "class": "logging.Formatter",
                    "datefmt": "%Y-%m-%dT%H:%M:%S",
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "level": "DEBUG",
                    "formatter": "console",
                },
            },
            "loggers": {
                "formsapi": {
                    "handlers": ["default"],
                    "level": level.upper(),
                    "propagate": False,
                },
                "databases": {"handlers": ["default"], "level": "WARNING"},
                "uvicorn": {"handlers": ["default"], "level": "INFO"},
            },
        }
    )
