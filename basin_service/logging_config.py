import logging
import json
import sys
from datetime import datetime, timezone
from typing import Optional
import os

SERVICE_NAME = "basin-term-service"

# Attributes every LogRecord carries; anything else arrived via ``extra``
_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'exc_info', 'exc_text', 'stack_info', 'lineno', 'funcName',
    'created', 'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'taskName', 'message', 'asctime',
    'request_id', 'coordinates', 'basin_region', 'basin_model', 'response_time_ms'
))


class StructuredJSONFormatter(logging.Formatter):
    """Formatter for structured JSON logging, one object per line"""

    def __init__(self, service_name: str = SERVICE_NAME):
        super().__init__()
        self.service_name = service_name
        self.hostname = os.environ.get('HOSTNAME', 'localhost')

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "service": self.service_name,
            "hostname": self.hostname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        # Request context
        if hasattr(record, 'request_id'):
            log_entry["request_id"] = record.request_id
        if hasattr(record, 'coordinates'):
            log_entry["coordinates"] = record.coordinates
        if hasattr(record, 'basin_region'):
            log_entry["basin_region"] = record.basin_region
        if hasattr(record, 'basin_model'):
            log_entry["basin_model"] = record.basin_model
        if hasattr(record, 'response_time_ms'):
            log_entry["response_time_ms"] = record.response_time_ms

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info)
            }

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith('_'):
                log_entry.setdefault("extra", {})[key] = value

        return json.dumps(log_entry, default=str, separators=(',', ':'))


class DevelopmentFormatter(logging.Formatter):
    """Human-readable formatter for development"""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s | %(levelname)8s | %(name)30s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(
    level: str = "INFO",
    use_json: Optional[bool] = None,
    service_name: str = SERVICE_NAME
) -> None:
    """Setup logging configuration for the basin term service"""

    # JSON in production or when explicitly requested
    if use_json is None:
        use_json = (
            os.environ.get('APP_ENV') == 'production' or
            os.environ.get('LOG_FORMAT', '').lower() == 'json'
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredJSONFormatter(service_name) if use_json else DevelopmentFormatter())
    root_logger.addHandler(console_handler)

    configure_basin_loggers(level)

    logger = logging.getLogger(__name__)
    logger.info(
        "Logging configured",
        extra={
            "log_format": "json" if use_json else "development",
            "log_level": level,
            "service": service_name
        }
    )


def configure_basin_loggers(level: str) -> None:
    """Configure specific loggers for basin service components"""

    loggers = [
        'basin_service.basin',
        'basin_service.data_sources',
        'basin_service.api',
        'basin_service.config',
    ]

    for logger_name in loggers:
        logging.getLogger(logger_name).setLevel(getattr(logging, level.upper()))

    # Suppress noisy third-party loggers
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)


def get_resolution_logger(coordinate, region_id: Optional[str] = None, model_id: Optional[str] = None):
    """Get logger with basin resolution context"""
    logger = logging.getLogger('basin_service.basin.engine')

    class ContextAdapter(logging.LoggerAdapter):
        def process(self, msg, kwargs):
            extra = dict(kwargs.get('extra') or {})
            extra['coordinates'] = {'lat': coordinate.latitude, 'lon': coordinate.longitude}
            if region_id is not None:
                extra['basin_region'] = region_id
            if model_id is not None:
                extra['basin_model'] = model_id
            kwargs['extra'] = extra
            return msg, kwargs

    return ContextAdapter(logger, {})
