"""
TilePaint Logging - File and console logging for the editing engine
"""
from datetime import datetime
from pathlib import Path

# Log file handle
_log_file = None
_log_enabled = True


def init_logging(log_dir: str = None):
    """Initialize file logging for TilePaint"""
    global _log_file

    if log_dir is None:
        # Default to the package root directory
        log_dir = Path(__file__).parent.parent.parent

    log_path = Path(log_dir) / "tilepaint_debug.log"

    try:
        # Clear previous log
        _log_file = open(log_path, 'w', encoding='utf-8')
        _log_file.write(f"=== TilePaint Debug Log - {datetime.now().isoformat()} ===\n\n")
        _log_file.flush()
        print(f"[TilePaint] Logging to: {log_path}")
    except OSError as e:
        print(f"[TilePaint] Warning: Could not create log file: {e}")
        _log_file = None


def log(message: str, prefix: str = "[TilePaint]"):
    """Log a message to both console and file"""
    full_message = f"{prefix} {message}"

    # Always print to console
    print(full_message)

    # Write to file if available
    if _log_file and _log_enabled:
        try:
            _log_file.write(full_message + "\n")
            _log_file.flush()
        except OSError:
            pass


def log_editor(message: str):
    """Log a MapEditor message"""
    log(message, "[MapEditor]")


def log_history(message: str):
    """Log a HistoryManager message"""
    log(message, "[HistoryManager]")


def log_fill(message: str):
    """Log a FillEngine message"""
    log(message, "[FillEngine]")


def log_zones(message: str):
    """Log a ZoneRegistry message"""
    log(message, "[ZoneRegistry]")


def log_stroke(message: str):
    """Log a StrokeEngine message"""
    log(message, "[StrokeEngine]")


def close_logging():
    """Close the log file"""
    global _log_file
    if _log_file:
        try:
            _log_file.close()
        except OSError:
            pass
        _log_file = None


def set_logging_enabled(enabled: bool):
    """Enable or disable file logging"""
    global _log_enabled
    _log_enabled = enabled
