"""Logging configuration helpers."""

import logging

CONTEXT_FIELDS = (
    "connection_id",
    "owner_id",
    "meeting_id",
    "activity_id",
    "room",
    "event",
    "path",
)


class ContextFormatter(logging.Formatter):
    """Appends the tracking context passed through ``extra=`` to each line."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        context = " ".join(
            f"{name}={getattr(record, name)}"
            for name in CONTEXT_FIELDS
            if getattr(record, name, None) is not None
        )
        return f"{message} [{context}]" if context else message


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging with a single stream handler."""
    logger = logging.getLogger("meeting_activity")
    logger.setLevel(level.upper())
    if logger.handlers:
        return
    handler = logging.StreamHandler()
    handler.setFormatter(ContextFormatter("%(levelname)s: %(name)s: %(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
