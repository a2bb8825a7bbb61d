import logging

from game_organizer.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(settings: Settings) -> None:
    """Send log records to stderr and, when configured, to a log file as well."""
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if settings.log_file is not None:
        settings.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )
    logging.getLogger(__name__).info("Log level: %s", settings.log_level)
