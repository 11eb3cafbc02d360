"""
Logging utilities for request debugging and tracing.
"""
import json
import os
import logging
from typing import Dict, Mapping, Optional

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = ('authorization', 'x-api-key', 'api-key', 'cookie')


def redact_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    """Copy of headers with credentials replaced by [REDACTED]"""
    return {
        name: "[REDACTED]" if name.lower() in SENSITIVE_HEADERS else value
        for name, value in headers.items()
    }


def log_request(request_id: str, body: bytes, endpoint: str, headers: Optional[Dict[str, str]] = None):
    """Log incoming request details including headers"""
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"[{request_id}] RAW REQUEST CAPTURE")
    logger.debug(f"[{request_id}] Endpoint: {endpoint}")

    try:
        request_data = json.loads(body) if body else {}
    except ValueError:
        request_data = {}
    if isinstance(request_data, dict):
        logger.debug(f"[{request_id}] Model: {request_data.get('model', 'unknown')}")
        logger.debug(f"[{request_id}] Stream: {request_data.get('stream', False)}")
        logger.debug(f"[{request_id}] Tools: {len(request_data.get('tools') or [])}")

    if headers:
        logger.debug(f"[{request_id}] ===== INCOMING HEADERS FROM CLIENT =====")
        for header_name, header_value in redact_headers(headers).items():
            logger.debug(f"[{request_id}] {header_name}: {header_value}")


def configure_debug_logging(log_file: str = "proxy_debug.log") -> str:
    """
    Route all loggers at DEBUG level to a log file and a rich console handler.

    Existing root handlers are replaced so repeated calls do not duplicate output.

    Returns:
        Absolute path of the log file (opened in append mode)
    """
    from rich.logging import RichHandler

    log_path = os.path.abspath(log_file)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    file_handler = logging.FileHandler(log_path, mode='a', encoding='utf-8')
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
    root_logger.addHandler(file_handler)
    root_logger.addHandler(RichHandler(rich_tracebacks=True, show_path=False))

    return log_path
