"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pythonjsonlogger import jsonlogger

from retail_gateway.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    # JSON handler for stdout
    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_sale_committed(
    request_id: Optional[str],
    company_id: str,
    sale_id: str,
    total_cents: int,
    installments: int,
    ledger_posted: bool,
    duration_ms: float,
) -> None:
    """Log structured sale outcome for analysis"""
    logging.getLogger("retail_gateway.sales").info(
        "Sale committed",
        extra={
            "request_id": request_id,
            "company_id": company_id,
            "sale_id": sale_id,
            "step": "sale_committed",
            "total_cents": total_cents,
            "installments": installments,
            "ledger_posted": ledger_posted,
            "duration_ms": duration_ms,
        },
    )


def log_debt_recomputed(company_id: str, client_id: str, debt_status: str, overdue_amount_cents: int) -> None:
    """Log structured debt classification outcome"""
    logging.getLogger("retail_gateway.debt").info(
        "Client debt recomputed",
        extra={
            "company_id": company_id,
            "client_id": client_id,
            "step": "debt_recomputed",
            "debt_status": debt_status,
            "overdue_amount_cents": overdue_amount_cents,
        },
    )
