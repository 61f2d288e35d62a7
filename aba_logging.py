"""Structured JSON logging"""

import logging
import sys
from datetime import datetime, timezone

from pythonjsonlogger.json import JsonFormatter

SERVICE_NAME = "aba-batch-payment"


class CustomJsonFormatter(JsonFormatter):
    """JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = SERVICE_NAME


def setup_logging(level="INFO"):
    """Configure JSON logging to stdout"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Streamlit reruns the script, so replace rather than stack handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(name)s %(message)s"))
    logger.addHandler(handler)
