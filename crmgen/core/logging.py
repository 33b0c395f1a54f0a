import logging
import sys

# Attributes every LogRecord has; anything else came in through ``extra=``
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", None, None))) | {"message", "asctime"}
_CONTEXT_KEYS = ("model", "record_id")


class ContextFormatter(logging.Formatter):
    """Formatter that prints the model/record context and appends any other extras as key=value."""
    def format(self, record):
        for key in _CONTEXT_KEYS:
            if not hasattr(record, key):
                setattr(record, key, '-')
        line = super().format(record)
        extras = [
            f"{k}={v}" for k, v in sorted(vars(record).items())
            if k not in _RECORD_ATTRS and k not in _CONTEXT_KEYS
        ]
        if extras:
            line = f"{line} ({' '.join(extras)})"
        return line


def configure_logging(level: int = logging.INFO) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(
        "%(asctime)s %(levelname)s %(name)s [model=%(model)s record=%(record_id)s] - %(message)s"
    ))
    logging.basicConfig(
        level=level,
        handlers=[handler],
        force=True,
    )
