import logging
from datetime import datetime, timezone
from typing import Any, Dict, Union
from pythonjsonlogger import jsonlogger
from contextvars import ContextVar

# Context variable to store request_id for the current task/request
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

class CustomJsonFormatter(jsonlogger.JsonFormatter):
    def __init__(self, *args, service: str = "", environment: str = "", **kwargs):
        super().__init__(*args, **kwargs)
        self.service = service
        self.environment = environment

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super(CustomJsonFormatter, self).add_fields(log_record, record, message_dict)

        # Inject correlation ID if available
        req_id = request_id_var.get()
        if req_id:
            log_record["request_id"] = req_id

        if not log_record.get("timestamp"):
            log_record["timestamp"] = datetime.now(timezone.utc).isoformat()

        if log_record.get("level"):
            log_record["level"] = log_record["level"].upper()
        else:
            log_record["level"] = record.levelname

        log_record.setdefault("service", self.service)
        log_record.setdefault("environment", self.environment)

def setup_logging(level: Union[int, str] = logging.INFO, service: str = "", environment: str = ""):
    logger = logging.getLogger()
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    # The app module is imported once per test session and again by uvicorn reloads
    if any(isinstance(h.formatter, CustomJsonFormatter) for h in logger.handlers):
        return
    log_handler = logging.StreamHandler()
    formatter = CustomJsonFormatter(
        "%(timestamp) %(level) %(name) %(message)", service=service, environment=environment
    )
    log_handler.setFormatter(formatter)
    logger.addHandler(log_handler)

    # Suppress verbose logs from some libraries; urllib3 logs every completion call
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)
