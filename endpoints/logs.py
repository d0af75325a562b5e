import logging
import logging.handlers
import json
import os
from typing import Optional, Dict, Any
from fastapi import Request
from config import settings
import uuid
import traceback

class Logger:
    def __init__(self, log_file: str = settings.LOG_FILE, max_log_days: int = settings.LOG_MAX_DAYS):
        """
        Initialize the logger with optional file rotation, JSON formatting, and dynamic log level.
        An empty ``log_file`` logs to stdout only.
        """
        # Configure logger
        self.logger = logging.getLogger("LedgerLogger")
        self.logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
        self.logger.propagate = False

        # Remove existing handlers to avoid duplication
        self.logger.handlers.clear()

        # JSON formatter
        formatter = logging.Formatter(
            json.dumps({
                "timestamp": "%(asctime)s",
                "level": "%(levelname)s",
                "action": "%(message)s",
                "user_id": "%(user_id)s",
                "correlation_id": "%(correlation_id)s",
                "context": "%(context)s"
            }, ensure_ascii=False)
        )

        if log_file:
            # Ensure log directory exists
            log_dir = os.path.dirname(log_file)
            if log_dir:
                os.makedirs(log_dir, exist_ok=True)
            # File handler with daily rotation
            file_handler = logging.handlers.TimedRotatingFileHandler(
                filename=log_file,
                when="midnight",
                interval=1,
                backupCount=max_log_days,
                encoding="utf-8"
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        # Stream handler for stdout
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        self.logger.addHandler(stream_handler)

    def log_action(
        self,
        action: str,
        level: str = "INFO",
        user_id: Optional[int] = None,
        correlation_id: str = "",
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Log a user action with context and correlation ID.
        """
        context_str = json.dumps(context or {}, ensure_ascii=False, default=str)

        self.logger.log(
            level=getattr(logging, level.upper(), logging.INFO),
            msg=action,
            extra={
                "user_id": user_id if user_id is not None else "anonymous",
                "correlation_id": correlation_id,
                "context": context_str
            }
        )

    async def log_request(
        self,
        request: Request,
        action: str,
        user_id: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Log an HTTP request and return the correlation ID minted for it.
        """
        correlation_id = str(uuid.uuid4())
        context = context or {}
        context.update({
            "method": request.method,
            "url": str(request.url),
            "client_ip": request.client.host if request.client else "unknown"
        })
        self.log_action(action, "INFO", user_id, correlation_id, context)
        return correlation_id

    def log_error(
        self,
        action: str,
        error: Exception,
        user_id: Optional[int] = None,
        correlation_id: str = "",
        context: Optional[Dict[str, Any]] = None,
        level: str = "ERROR"
    ):
        """
        Log an error with stack trace and correlation ID.
        """
        context = context or {}
        context["error"] = str(error)
        context["error_code"] = getattr(error, "code", error.__class__.__name__)
        context["stack_trace"] = "".join(traceback.format_tb(error.__traceback__)) if error.__traceback__ else "N/A"
        self.log_action(action, level, user_id, correlation_id, context)

# Singleton logger instance
logger_instance = Logger()

# Convenience functions for use in other modules
def log_action(action: str, user_id: Optional[int] = None, correlation_id: str = "", context: Optional[Dict[str, Any]] = None):
    logger_instance.log_action(action, "INFO", user_id, correlation_id, context)

async def log_request(request: Request, action: str, user_id: Optional[int] = None, context: Optional[Dict[str, Any]] = None):
    return await logger_instance.log_request(request, action, user_id, context)

def log_error(action: str, error: Exception, user_id: Optional[int] = None, correlation_id: str = "", context: Optional[Dict[str, Any]] = None, level: str = "ERROR"):
    logger_instance.log_error(action, error, user_id, correlation_id, context, level)
