import logging
import re
from pythonjsonlogger.json import JsonFormatter
from .config import Settings


class TokenRedactingFilter(logging.Filter):
    _bearer_re = re.compile(r"\bBearer\s+[0-9A-Za-z]+", re.IGNORECASE)
    _field_re = re.compile(r"(\btoken[\'\"]?\s*[:=]\s*[\'\"]?)[0-9A-Za-z]+", re.IGNORECASE)

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            msg = record.getMessage()
        except Exception:
            return True
        msg = self._bearer_re.sub("Bearer [REDACTED]", msg)
        msg = self._field_re.sub(r"\1[REDACTED]", msg)
        record.msg = msg
        record.args = ()
        return True


def configure_logging(settings: Settings) -> None:
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = logging.StreamHandler()

    if settings.LOG_JSON:
        formatter = JsonFormatter(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")
    else:
        formatter = logging.Formatter(fmt="%(asctime)s %(levelname)s %(name)s %(message)s")

    handler.setFormatter(formatter)
    handler.addFilter(TokenRedactingFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [handler]

    # Reduce noisy loggers
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    logging.getLogger("passlib").setLevel(logging.ERROR)
