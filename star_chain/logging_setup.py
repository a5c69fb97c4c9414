"""
StarChain - Logging System
============================
Sistema logging strutturato JSON per audit e debugging.

Security Level: HIGH
Last Updated: 2026-10-19
Version: 1.0.0

Features:
- Logging JSON strutturato
- Rotation automatica
- Multiple handlers (file, console)
- Context enrichment
- Performance tracking
- Audit trail blocchi
"""

import logging
import logging.handlers
import json
import sys
import time
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime, timezone
import traceback


# ============================================================================
# JSON FORMATTER
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    Formatter per log in formato JSON.

    Output structure:
    {
        "timestamp": "2026-10-19T10:00:00.000000Z",
        "level": "INFO",
        "logger": "starchain.blockchain",
        "message": "Block added",
        "extra_data": {...},
        "exception": {...}
    }
    """

    def __init__(
        self,
        include_extra: bool = True,
        include_stack: bool = True
    ):
        super().__init__()
        self.include_extra = include_extra
        self.include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        """
        Formatta LogRecord in JSON.

        Args:
            record: LogRecord da formattare

        Returns:
            str: JSON string
        """
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc)

        log_data = {
            "timestamp": timestamp.strftime("%Y-%m-%dT%H:%M:%S.%fZ"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.thread:
            log_data["thread_id"] = record.thread
            log_data["thread_name"] = record.threadName

        if record.process:
            log_data["process_id"] = record.process

        if self.include_extra and hasattr(record, 'extra_data'):
            log_data["extra_data"] = record.extra_data

        if record.exc_info and self.include_stack:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info)
            }

        return json.dumps(log_data, default=str)


# ============================================================================
# TEXT FORMATTER (Human-Readable)
# ============================================================================

class ColoredTextFormatter(logging.Formatter):
    """
    Formatter colorato per console.

    Colors:
    - DEBUG: Gray
    - INFO: Green
    - WARNING: Yellow
    - ERROR: Red
    - CRITICAL: Bold Red
    """

    COLORS = {
        'DEBUG': '\033[90m',
        'INFO': '\033[92m',
        'WARNING': '\033[93m',
        'ERROR': '\033[91m',
        'CRITICAL': '\033[1;91m',
        'RESET': '\033[0m'
    }

    def format(self, record: logging.LogRecord) -> str:
        """Formatta con colori"""
        levelname = record.levelname
        if levelname in self.COLORS:
            levelname = f"{self.COLORS[levelname]}{levelname}{self.COLORS['RESET']}"

        timestamp = datetime.fromtimestamp(
            record.created, tz=timezone.utc
        ).strftime('%Y-%m-%d %H:%M:%S')

        message = f"{timestamp} [{levelname}] {record.name}: {record.getMessage()}"

        if hasattr(record, 'extra_data'):
            message += f" | {record.extra_data}"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


# ============================================================================
# LOGGER CLASS
# ============================================================================

class StarChainLogger:
    """
    Wrapper logger con context enrichment e structured logging.
    """

    def __init__(self, logger: logging.Logger):
        self._logger = logger
        self._context: Dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self._logger.name

    def set_context(self, **kwargs):
        """
        Imposta context globale (aggiunto a tutti i log).

        Example:
            >>> logger.set_context(node_name="registry-1")
        """
        self._context.update(kwargs)

    def clear_context(self):
        """Clear context"""
        self._context.clear()

    def _log(
        self,
        level: int,
        message: str,
        extra_data: Optional[Dict[str, Any]] = None,
        exc_info=None
    ):
        merged_extra = {**self._context}
        if extra_data:
            merged_extra.update(extra_data)

        self._logger.log(
            level,
            message,
            exc_info=exc_info,
            extra={'extra_data': merged_extra} if merged_extra else {}
        )

    def debug(self, message: str, extra_data: Optional[Dict] = None):
        self._log(logging.DEBUG, message, extra_data)

    def info(self, message: str, extra_data: Optional[Dict] = None):
        self._log(logging.INFO, message, extra_data)

    def warning(self, message: str, extra_data: Optional[Dict] = None):
        self._log(logging.WARNING, message, extra_data)

    def error(self, message: str, extra_data: Optional[Dict] = None, exc_info=None):
        self._log(logging.ERROR, message, extra_data, exc_info)

    def critical(self, message: str, extra_data: Optional[Dict] = None, exc_info=None):
        self._log(logging.CRITICAL, message, extra_data, exc_info)

    def exception(self, message: str, extra_data: Optional[Dict] = None):
        """Log exception con traceback"""
        self._log(logging.ERROR, message, extra_data, exc_info=sys.exc_info())


# ============================================================================
# SETUP FUNCTION
# ============================================================================

def setup_logging(
    log_level: str = "INFO",
    log_to_file: bool = False,
    log_dir: Path = Path("./logs"),
    log_format: str = "json",
    log_rotation_mb: int = 100,
    log_retention_days: int = 30,
    enable_console: bool = True,
) -> StarChainLogger:
    """
    Setup logging system completo.

    Args:
        log_level: Level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_file: Salva su file
        log_dir: Directory log files
        log_format: Formato (json, text)
        log_rotation_mb: MB prima rotation
        log_retention_days: Numero backup mantenuti
        enable_console: Log anche su console

    Returns:
        StarChainLogger: Logger root configurato

    Example:
        >>> logger = setup_logging(log_level="DEBUG", log_to_file=False)
        >>> logger.info("Registry started", extra_data={"height": 0})
    """
    root_logger = logging.getLogger("starchain")
    root_logger.setLevel(getattr(logging, log_level.upper()))

    root_logger.handlers.clear()

    # ========================================================================
    # FILE HANDLERS (with rotation)
    # ========================================================================

    if log_to_file:
        log_dir.mkdir(parents=True, exist_ok=True)

        text_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        file_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "starchain.log",
            maxBytes=log_rotation_mb * 1024 * 1024,
            backupCount=log_retention_days,
            encoding='utf-8'
        )
        file_handler.setFormatter(
            JSONFormatter() if log_format == "json" else text_formatter
        )
        root_logger.addHandler(file_handler)

        # Error log separato
        error_handler = logging.handlers.RotatingFileHandler(
            filename=log_dir / "starchain_errors.log",
            maxBytes=log_rotation_mb * 1024 * 1024,
            backupCount=log_retention_days,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(
            JSONFormatter(include_stack=True) if log_format == "json" else text_formatter
        )
        root_logger.addHandler(error_handler)

    # ========================================================================
    # CONSOLE HANDLER
    # ========================================================================

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(ColoredTextFormatter())
        root_logger.addHandler(console_handler)

    return StarChainLogger(root_logger)


# ============================================================================
# CATEGORY LOGGERS
# ============================================================================

def get_logger(category: str) -> StarChainLogger:
    """
    Ottieni logger per categoria specifica.

    Args:
        category: Categoria (blockchain, ownership, crypto, ...)

    Returns:
        StarChainLogger: Logger per categoria

    Example:
        >>> chain_logger = get_logger("blockchain")
        >>> chain_logger.info("Genesis created")
    """
    return StarChainLogger(logging.getLogger(f"starchain.{category}"))


# ============================================================================
# PERFORMANCE TRACKING
# ============================================================================

class PerformanceLogger:
    """
    Context manager per tracking performance.

    Example:
        >>> logger = get_logger("blockchain")
        >>> with PerformanceLogger(logger, "validate_chain"):
        ...     validator.validate_chain(blocks)
        # Logs: "validate_chain completed in 0.123ms"
    """

    def __init__(
        self,
        logger: StarChainLogger,
        operation: str,
        threshold_ms: Optional[int] = None
    ):
        self.logger = logger
        self.operation = operation
        self.threshold_ms = threshold_ms
        self.start_time = None
        self.elapsed_ms: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed_ms = (time.perf_counter() - self.start_time) * 1000

        extra = {
            "operation": self.operation,
            "duration_ms": round(self.elapsed_ms, 2)
        }

        if self.threshold_ms and self.elapsed_ms > self.threshold_ms:
            self.logger.warning(
                f"{self.operation} took {self.elapsed_ms:.2f}ms (threshold: {self.threshold_ms}ms)",
                extra_data=extra
            )
        else:
            self.logger.debug(
                f"{self.operation} completed in {self.elapsed_ms:.2f}ms",
                extra_data=extra
            )


# ============================================================================
# AUDIT LOGGER
# ============================================================================

class AuditLogger:
    """
    Logger specializzato per audit trail.

    Registra:
    - Blocchi aggiunti (genesis incluso)
    - Star registrate
    - Submission rifiutate

    Se log_dir è None non viene creato alcun file: i record passano
    comunque dal logger "starchain.audit".
    """

    def __init__(self, log_dir: Optional[Path] = None):
        self.log_dir = log_dir
        self.logger = logging.getLogger("starchain.audit")
        self.logger.setLevel(logging.INFO)

        if log_dir is not None:
            log_dir.mkdir(parents=True, exist_ok=True)
            audit_file = (log_dir / "audit.log").resolve()

            already_attached = any(
                isinstance(h, logging.FileHandler)
                and Path(h.baseFilename) == audit_file
                for h in self.logger.handlers
            )
            if not already_attached:
                # No rotation per audit
                handler = logging.FileHandler(audit_file, encoding='utf-8')
                handler.setFormatter(JSONFormatter(include_extra=True))
                self.logger.addHandler(handler)

    def _record(self, message: str, action: str, **fields):
        self.logger.info(
            message,
            extra={
                'extra_data': {
                    "action": action,
                    **fields,
                    "timestamp": datetime.now(timezone.utc).isoformat()
                }
            }
        )

    def log_block_added(self, height: int, block_hash: str, owner: Optional[str] = None):
        """Log block addition"""
        self._record(
            "Block added",
            "block_added",
            height=height,
            hash=block_hash,
            owner=owner,
        )

    def log_star_registered(self, owner: str, height: int, block_hash: str):
        """Log star registration"""
        self._record(
            "Star registered",
            "star_registered",
            owner=owner,
            height=height,
            hash=block_hash,
        )

    def log_submission_rejected(self, address: str, reason: str):
        """Log submission rifiutata"""
        self._record(
            "Star submission rejected",
            "submission_rejected",
            address=address,
            reason=reason,
        )


# ============================================================================
# EXPORT
# ============================================================================

__all__ = [
    "setup_logging",
    "get_logger",
    "StarChainLogger",
    "PerformanceLogger",
    "AuditLogger",
    "JSONFormatter",
    "ColoredTextFormatter",
]
