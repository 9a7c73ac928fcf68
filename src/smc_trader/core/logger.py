"""Project logging setup.

`get_logger(name)` returns a child of the `smc-trader` logger, which gets a
console handler and a date-stamped log file (`logs/smc_YYYY-MM-DD.log`) on
first use. `get_symbol_logger(symbol)` additionally writes one file per
instrument so a session's decisions can be read in isolation.

Environment:
- `LOG_LEVEL`: level name, default INFO
- `LOGS_DIR`: log directory, default `<project root>/logs`; `-` means console only
- `LOG_RETENTION_DAYS`: archived days to keep, default 7

At midnight the previous day's file moves to `logs/archive/YYYY-MM-DD/`.
"""
import logging
import os
import shutil
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional

ROOT_LOGGER_NAME = "smc-trader"
_LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
_SYMBOL_FORMAT = "%(asctime)s %(levelname)-8s %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _today() -> str:
	return datetime.now().strftime("%Y-%m-%d")


def _formatter(fmt: str = _LOG_FORMAT) -> logging.Formatter:
	return logging.Formatter(fmt, datefmt=_DATE_FORMAT)


class DailyRotatingFileHandler(logging.Handler):
	"""Writes to `<prefix>_<date>.log` and archives the file when the date changes."""

	def __init__(self, logs_dir: str, retention_days: int = 7, prefix: str = "smc"):
		super().__init__()
		self.logs_dir = Path(logs_dir)
		self.retention_days = retention_days
		self.prefix = prefix  # "smc" or a symbol
		self.current_date = _today()
		self.current_handler: Optional[logging.FileHandler] = None
		self._open()

	def log_path(self, date: str) -> Path:
		return self.logs_dir / f"{self.prefix}_{date}.log"

	def _open(self) -> None:
		if self.current_handler:
			self.current_handler.close()
		self.current_handler = logging.FileHandler(str(self.log_path(self.current_date)), encoding="utf-8")
		if self.formatter:
			self.current_handler.setFormatter(self.formatter)

	def _rotate(self, new_date: str) -> None:
		if self.current_handler:
			self.current_handler.close()

		finished = self.log_path(self.current_date)
		if finished.exists():
			archive_dir = self.logs_dir / "archive" / self.current_date
			archive_dir.mkdir(parents=True, exist_ok=True)
			shutil.move(str(finished), str(archive_dir / finished.name))
		_cleanup_old_archive_logs(self.logs_dir, self.retention_days)

		self.current_date = new_date
		self._open()

	def setFormatter(self, fmt):
		super().setFormatter(fmt)
		if self.current_handler:
			self.current_handler.setFormatter(fmt)

	def emit(self, record):
		try:
			today = _today()
			if today != self.current_date:
				self._rotate(today)
			if self.current_handler:
				self.current_handler.emit(record)
		except Exception:
			self.handleError(record)

	def close(self):
		if self.current_handler:
			self.current_handler.close()
		super().close()


def _cleanup_old_archive_logs(logs_dir: Path, retention_days: Optional[int] = None) -> None:
	"""Delete archive day directories older than the retention period."""
	archive_dir = logs_dir / "archive"
	if not archive_dir.exists():
		return

	days = _retention_days() if retention_days is None else retention_days
	cutoff = (datetime.now() - timedelta(days=days)).strftime("%Y-%m-%d")
	for day_dir in archive_dir.iterdir():
		if day_dir.is_dir() and day_dir.name < cutoff:
			shutil.rmtree(day_dir, ignore_errors=True)


def _retention_days() -> int:
	try:
		return int(os.getenv("LOG_RETENTION_DAYS", "7"))
	except ValueError:
		return 7


def _level_from_env() -> int:
	level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), None)
	return level if isinstance(level, int) else logging.INFO


def _logs_dir() -> Optional[str]:
	"""Writable log directory, or None for console-only logging."""
	logs_dir = os.getenv("LOGS_DIR")
	if logs_dir == "-":
		return None
	if not logs_dir:
		# src/smc_trader/core/logger.py -> project root
		logs_dir = str(Path(__file__).resolve().parents[3] / "logs")
	try:
		os.makedirs(logs_dir, exist_ok=True)
	except OSError:
		return None
	return logs_dir


def _file_handler(logs_dir: str, prefix: str, fmt: str) -> DailyRotatingFileHandler:
	handler = DailyRotatingFileHandler(logs_dir, retention_days=_retention_days(), prefix=prefix)
	handler.setFormatter(_formatter(fmt))
	return handler


def _configure_root_logger() -> logging.Logger:
	root = logging.getLogger(ROOT_LOGGER_NAME)
	if root.handlers:
		return root

	root.setLevel(_level_from_env())
	console = logging.StreamHandler()
	console.setFormatter(_formatter())
	root.addHandler(console)

	logs_dir = _logs_dir()
	if logs_dir:
		try:
			_cleanup_old_archive_logs(Path(logs_dir))
			root.addHandler(_file_handler(logs_dir, "smc", _LOG_FORMAT))
		except OSError as e:
			root.warning(f"File logging disabled: {e}")
	return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
	"""Return a configured logger for `name`.

	Example:
		from smc_trader.core.logger import get_logger
		log = get_logger(__name__)
		log.info("bias bullish -> neutral")
	"""
	root = _configure_root_logger()
	if not name:
		return root
	if name.startswith("smc_trader."):
		name = name[len("smc_trader."):]
	return root.getChild(name)


def get_symbol_logger(symbol: str) -> logging.Logger:
	"""Logger for one instrument, also written to `logs/<SYMBOL>_YYYY-MM-DD.log`."""
	logger = get_logger().getChild(f"symbol.{symbol}")
	if logger.handlers:
		return logger

	logs_dir = _logs_dir()
	if logs_dir:
		try:
			logger.addHandler(_file_handler(logs_dir, symbol, _SYMBOL_FORMAT))
		except OSError as e:
			get_logger().warning(f"Failed to create file handler for {symbol}: {e}")
	return logger


__all__ = ["get_logger", "get_symbol_logger", "DailyRotatingFileHandler"]
