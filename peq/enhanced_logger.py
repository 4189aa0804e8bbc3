#!/usr/bin/env python3
"""
Enhanced structured logging for the parallel export query builder
Prefixes every message with the export context (table, split column, parallelism)
"""

import logging
import os
import threading
import psutil
from typing import Optional
from dataclasses import dataclass

from peq.export_config import get_log_settings


@dataclass
class ExportContext:
    """Per-call context for structured logging"""
    table_name: str
    split_column: Optional[str] = None
    parallelism: Optional[int] = None
    query_count: int = 0


class EnhancedLogger:
    """
    Structured logger that tags messages with the export being built
    """

    def __init__(self, name: str = "PEQ"):
        self.logger = logging.getLogger(name)
        self._setup_logger()

        # Thread-local storage for context
        self._local = threading.local()
        self._lock = threading.Lock()
        self._exports_built = 0
        self._exports_failed = 0

    def _setup_logger(self):
        """Configure structured logging format"""
        if not self.logger.handlers:
            settings = get_log_settings()

            console_handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '[%(asctime)s] [%(levelname)s] %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

            log_file_path = settings.get('file_path')
            if log_file_path:
                try:
                    log_dir = os.path.dirname(log_file_path)
                    if log_dir:
                        os.makedirs(log_dir, exist_ok=True)

                    file_handler = logging.FileHandler(log_file_path, mode='a')
                    file_handler.setFormatter(formatter)
                    self.logger.addHandler(file_handler)
                except OSError as e:
                    # If file logging fails, continue with console logging only
                    console_handler.emit(logging.LogRecord(
                        name=self.logger.name, level=logging.WARNING, pathname='', lineno=0,
                        msg=f"Failed to setup file logging to {log_file_path}: {e}",
                        args=(), exc_info=None
                    ))

            self.logger.setLevel(str(settings.get('level') or 'INFO').upper())

    def set_export_context(self, table_name: str, split_column: Optional[str] = None,
                           parallelism: Optional[int] = None):
        """Set export context for current thread"""
        self._local.export_context = ExportContext(
            table_name=table_name,
            split_column=split_column,
            parallelism=parallelism
        )

    def get_export_context(self) -> Optional[ExportContext]:
        """Get current export context"""
        return getattr(self._local, 'export_context', None)

    def clear_export_context(self):
        self._local.export_context = None

    def _get_memory_usage(self) -> str:
        """Get current memory usage"""
        try:
            process = psutil.Process()
            memory_mb = process.memory_info().rss / 1024 / 1024
            return f"{memory_mb:.1f}MB"
        except psutil.Error:
            return "Unknown"

    def _build_context_prefix(self) -> str:
        """Build context prefix for log messages"""
        parts = []

        ctx = self.get_export_context()
        if ctx:
            parts.append(f"TABLE:{ctx.table_name}")
            if ctx.split_column:
                parts.append(f"SPLIT:{ctx.split_column}")
            if ctx.parallelism:
                parts.append(f"PARALLELISM:{ctx.parallelism}")
            if ctx.query_count > 0:
                parts.append(f"QUERIES:{ctx.query_count}")

        parts.append(f"MEM:{self._get_memory_usage()}")

        return "[" + "] [".join(parts) + "]"

    def info(self, message: str, **kwargs):
        """Log info message with context"""
        self.logger.info(f"{self._build_context_prefix()} {message}", **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message with context"""
        self.logger.warning(f"{self._build_context_prefix()} {message}", **kwargs)

    def error(self, message: str, **kwargs):
        """Log error message with context"""
        self.logger.error(f"{self._build_context_prefix()} {message}", **kwargs)

    def debug(self, message: str, **kwargs):
        """Log debug message with context"""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"{self._build_context_prefix()} {message}", **kwargs)

    # Export-level logging methods
    def export_started(self, table_name: str, split_column: Optional[str] = None,
                       parallelism: Optional[int] = None):
        """Log start of query building for one export"""
        self.set_export_context(table_name, split_column, parallelism)
        if parallelism:
            self.info(f"Building queries split on '{split_column}' with parallelism {parallelism}")
        else:
            self.info("Building single export query")

    def bounds_probed(self, min_value: int, max_value: int, duration: float):
        """Log result of the bounds probe"""
        self.info(f"Split column bounds: min={min_value}, max={max_value} "
                  f"(probe took {duration:.2f}s)")

    def null_bounds_defaulted(self, split_column: str):
        """Log an empty probe window"""
        self.warning(f"Bounds probe on '{split_column}' returned NULL (empty window), "
                     f"using [0, 0]")

    def ranges_calculated(self, range_count: int, bucket_size: int):
        self.debug(f"Calculated {range_count} ranges (bucket size: {bucket_size})")

    def queries_built(self, query_count: int):
        """Log completion of query building"""
        ctx = self.get_export_context()
        if ctx:
            ctx.query_count = query_count
        with self._lock:
            self._exports_built += 1
        self.info(f"Built {query_count} export {'query' if query_count == 1 else 'queries'}")

    def build_failed(self, error: Exception):
        """Log failed query building"""
        with self._lock:
            self._exports_failed += 1
        self.error(f"Query building failed: {type(error).__name__}: {error}")

    def get_build_stats(self) -> dict:
        with self._lock:
            return {'built': self._exports_built, 'failed': self._exports_failed}


# Global logger instance
logger = EnhancedLogger("PEQ")

