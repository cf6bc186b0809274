"""
Unified logging system for booktrans
Provides consistent logging across CLI, Web and the background job worker
"""
import sys
import os
from datetime import datetime
from typing import Optional, Dict, Any, Callable
from enum import Enum


class LogLevel(Enum):
    """Log levels with priority values"""
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogType(Enum):
    """Types of log messages for special handling"""
    GENERAL = "general"
    LLM_REQUEST = "llm_request"
    LLM_RESPONSE = "llm_response"
    PROGRESS = "progress"
    JOB_START = "job_start"
    JOB_END = "job_end"
    CACHE = "cache"
    ERROR_DETAIL = "error_detail"


class Colors:
    """ANSI color codes for terminal output"""
    # Check if colors should be disabled
    NO_COLOR = os.environ.get('NO_COLOR') is not None or not sys.stdout.isatty()

    YELLOW = '' if NO_COLOR else '\033[93m'       # Headers
    WHITE = '' if NO_COLOR else '\033[97m'        # Main text
    GRAY = '' if NO_COLOR else '\033[90m'         # Technical info
    ORANGE = '' if NO_COLOR else '\033[38;5;214m' # Input sent to the LLM
    GREEN = '' if NO_COLOR else '\033[92m'        # LLM output
    RED = '' if NO_COLOR else '\033[91m'          # Errors
    ENDC = '' if NO_COLOR else '\033[0m'          # Reset

    @classmethod
    def disable(cls):
        """Disable all colors"""
        cls.YELLOW = cls.WHITE = cls.GRAY = cls.ORANGE = cls.GREEN = cls.RED = cls.ENDC = ''


class UnifiedLogger:
    """
    Unified logger that provides consistent logging across all interfaces
    """

    def __init__(self,
                 name: str = "booktrans",
                 console_output: bool = True,
                 enable_colors: bool = True,
                 min_level: LogLevel = LogLevel.INFO,
                 web_callback: Optional[Callable] = None,
                 storage_callback: Optional[Callable] = None):
        """
        Initialize the unified logger

        Args:
            name: Logger name/identifier
            console_output: Whether to output to console
            enable_colors: Whether to use colored output
            min_level: Minimum log level to display
            web_callback: Callback for web interface (WebSocket emission)
            storage_callback: Callback for storing logs (e.g., in memory)
        """
        self.name = name
        self.console_output = console_output
        self.enable_colors = enable_colors
        self.min_level = min_level
        self.web_callback = web_callback
        self.storage_callback = storage_callback

        if not enable_colors:
            Colors.disable()

    def _format_timestamp(self) -> str:
        """Format current timestamp"""
        return datetime.now().strftime("%H:%M:%S")

    def _format_console_message(self, level: LogLevel, message: str,
                                log_type: LogType = LogType.GENERAL,
                                data: Optional[Dict[str, Any]] = None) -> str:
        """Format message for console output"""
        timestamp = self._format_timestamp()

        level_colors = {
            LogLevel.DEBUG: Colors.GRAY,
            LogLevel.INFO: Colors.WHITE,
            LogLevel.WARNING: Colors.YELLOW,
            LogLevel.ERROR: Colors.RED,
            LogLevel.CRITICAL: Colors.RED
        }

        color = level_colors.get(level, Colors.WHITE)

        if log_type == LogType.LLM_REQUEST:
            return self._format_llm_request(data or {})
        elif log_type == LogType.LLM_RESPONSE:
            return self._format_llm_response(data or {})
        elif log_type == LogType.PROGRESS:
            return self._format_progress(data or {})
        elif log_type == LogType.JOB_START:
            return self._format_job_start(message, data or {})
        elif log_type == LogType.JOB_END:
            return self._format_job_end(message, data or {})
        elif log_type == LogType.ERROR_DETAIL:
            return self._format_error_detail(message, data or {})
        else:
            level_str = f"[{level.name}]" if level != LogLevel.INFO else ""
            return f"{color}[{timestamp}] {level_str} {message}{Colors.ENDC}"

    def _format_llm_request(self, data: Dict[str, Any]) -> str:
        """Format LLM request with full details"""
        output = []

        output.append(f"{Colors.YELLOW}{'=' * 80}{Colors.ENDC}")
        output.append(f"{Colors.YELLOW}[{self._format_timestamp()}] SENDING TO LLM{Colors.ENDC}")

        if 'units' in data:
            output.append(f"{Colors.GRAY}Units in request: {data['units']}{Colors.ENDC}")
        if 'model' in data:
            output.append(f"{Colors.GRAY}Model: {data['model']}{Colors.ENDC}")

        output.append(f"\n{Colors.ORANGE}RAW PROMPT (INPUT):{Colors.ENDC}")
        if data.get('system_prompt'):
            output.append(f"{Colors.GRAY}[SYSTEM]{Colors.ENDC}")
            output.append(f"{Colors.ORANGE}{data['system_prompt']}{Colors.ENDC}")
        if data.get('user_prompt'):
            output.append(f"{Colors.GRAY}[USER]{Colors.ENDC}")
            output.append(f"{Colors.ORANGE}{data['user_prompt']}{Colors.ENDC}")

        return '\n'.join(output)

    def _format_llm_response(self, data: Dict[str, Any]) -> str:
        """Format LLM response"""
        output = [f"{Colors.GREEN}[{self._format_timestamp()}] LLM RESPONSE (OUTPUT){Colors.ENDC}"]

        if 'execution_time' in data:
            output.append(f"{Colors.GRAY}Execution time: {data['execution_time']:.2f} seconds{Colors.ENDC}")

        # Full response only in debug mode for console
        if self.min_level == LogLevel.DEBUG:
            output.append(f"\n{Colors.GREEN}RAW RESPONSE:{Colors.ENDC}")
            output.append(f"{Colors.GREEN}{data.get('response', '')}{Colors.ENDC}")

        return '\n'.join(output)

    def _format_progress(self, data: Dict[str, Any]) -> str:
        """Format progress summary"""
        percentage = data.get('percentage', 0)
        current = data.get('current', 0)
        total = data.get('total', 0)

        bar_length = 30
        filled = int(bar_length * percentage / 100)
        bar = '█' * filled + '░' * (bar_length - filled)

        return (f"{Colors.WHITE}PROGRESS: {current}/{total} units ({percentage}%){Colors.ENDC}\n"
                f"{Colors.WHITE}[{bar}] {percentage}%{Colors.ENDC}")

    def _format_job_start(self, message: str, data: Dict[str, Any]) -> str:
        """Format job start message"""
        output = [f"{Colors.YELLOW}TRANSLATION JOB STARTED{Colors.ENDC}"]

        if 'title' in data:
            output.append(f"{Colors.WHITE}Title: {data['title']} ({data.get('owner_id', '?')}){Colors.ENDC}")
        output.append(f"{Colors.WHITE}Total units: {data.get('total_units', 0)}, "
                      f"cached: {data.get('cache_hits', 0)}, "
                      f"to translate: {data.get('pending_units', 0)}{Colors.ENDC}")
        if 'batch_size' in data:
            output.append(f"{Colors.GRAY}Batch size: {data['batch_size']}{Colors.ENDC}")

        return '\n'.join(output)

    def _format_job_end(self, message: str, data: Dict[str, Any]) -> str:
        """Format job end message"""
        output = [f"\n{Colors.WHITE}{message.upper()}{Colors.ENDC}"]

        if 'elapsed_seconds' in data:
            output.append(f"{Colors.GRAY}Duration: {data['elapsed_seconds']:.1f}s{Colors.ENDC}")
        if 'attempted_this_run' in data:
            output.append(f"{Colors.WHITE}Units attempted in this run: {data['attempted_this_run']}{Colors.ENDC}")

        return '\n'.join(output)

    def _format_error_detail(self, message: str, data: Dict[str, Any]) -> str:
        """Format detailed error message"""
        output = [f"{Colors.RED}[{self._format_timestamp()}] ERROR: {message}{Colors.ENDC}"]

        if 'details' in data:
            output.append(f"{Colors.RED}Details: {data['details']}{Colors.ENDC}")
        if 'unit' in data:
            output.append(f"{Colors.RED}Unit: {data['unit']}{Colors.ENDC}")

        return '\n'.join(output)

    def log(self, level: LogLevel, message: str,
            log_type: LogType = LogType.GENERAL,
            data: Optional[Dict[str, Any]] = None):
        """
        Main logging method

        Args:
            level: Log level
            message: Log message
            log_type: Type of log for special formatting
            data: Additional data for the log entry
        """
        if level.value < self.min_level.value:
            return

        if self.console_output:
            try:
                console_msg = self._format_console_message(level, message, log_type, data)
                if console_msg:
                    print(console_msg, flush=True)
            except UnicodeEncodeError:
                # Windows consoles (cp1252) choke on some characters
                safe_message = message.encode('ascii', 'replace').decode('ascii')
                print(f"[{self._format_timestamp()}] {safe_message}", flush=True)

        log_entry = {
            'timestamp': datetime.now().isoformat(),
            'level': level.name,
            'type': log_type.value,
            'message': message,
            'data': data or {}
        }

        if self.web_callback:
            self.web_callback(log_entry)

        if self.storage_callback:
            self.storage_callback(log_entry)

    # Convenience methods
    def debug(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.DEBUG, message, log_type, data)

    def info(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.INFO, message, log_type, data)

    def warning(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.WARNING, message, log_type, data)

    def error(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.ERROR, message, log_type, data)

    def critical(self, message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
        self.log(LogLevel.CRITICAL, message, log_type, data)


# Global logger instance
_global_logger = None


def get_logger(name: str = "booktrans", **kwargs) -> UnifiedLogger:
    """
    Get or create the global logger instance

    Args:
        name: Logger name
        **kwargs: Additional arguments for UnifiedLogger

    Returns:
        UnifiedLogger instance
    """
    global _global_logger
    if _global_logger is None:
        _global_logger = UnifiedLogger(name, **kwargs)
    else:
        # Update callbacks if provided
        if 'web_callback' in kwargs:
            _global_logger.web_callback = kwargs['web_callback']
        if 'storage_callback' in kwargs:
            _global_logger.storage_callback = kwargs['storage_callback']
        if 'min_level' in kwargs:
            _global_logger.min_level = kwargs['min_level']
    return _global_logger


def setup_cli_logger(enable_colors: bool = True) -> UnifiedLogger:
    """Setup logger for CLI usage"""
    # Import here to avoid circular dependencies
    from booktrans.config import DEBUG_MODE

    return get_logger(
        console_output=True,
        enable_colors=enable_colors,
        min_level=LogLevel.DEBUG if DEBUG_MODE else LogLevel.INFO
    )


def setup_web_logger(web_callback: Callable, storage_callback: Optional[Callable] = None) -> UnifiedLogger:
    """Setup logger for web interface usage"""
    from booktrans.config import DEBUG_MODE

    return get_logger(
        console_output=True,
        enable_colors=True,
        min_level=LogLevel.DEBUG if DEBUG_MODE else LogLevel.INFO,
        web_callback=web_callback,
        storage_callback=storage_callback
    )


# === Module-level convenience functions ===

def log(level: LogLevel, message: str,
        log_type: LogType = LogType.GENERAL,
        data: Optional[Dict[str, Any]] = None):
    """Module-level logging function using the global logger."""
    get_logger().log(level, message, log_type, data)


def debug(message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
    """Log debug message using global logger."""
    log(LogLevel.DEBUG, message, log_type, data)


def info(message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
    """Log info message using global logger."""
    log(LogLevel.INFO, message, log_type, data)


def warning(message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
    """Log warning message using global logger."""
    log(LogLevel.WARNING, message, log_type, data)


def error(message: str, log_type: LogType = LogType.GENERAL, data: Optional[Dict[str, Any]] = None):
    """Log error message using global logger."""
    log(LogLevel.ERROR, message, log_type, data)
