"""
Centralized configuration class
"""
import os
import logging
from pathlib import Path
from dataclasses import dataclass
from dotenv import load_dotenv

# Setup debug logger for configuration
_config_logger = logging.getLogger('config')

# Check for DEBUG_MODE early (before .env is loaded, check environment)
_debug_mode = os.getenv('DEBUG_MODE', 'false').lower() == 'true'
if _debug_mode:
    logging.basicConfig(level=logging.DEBUG, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    _config_logger.setLevel(logging.DEBUG)

# Get config directory (current working directory)
_env_file = Path.cwd() / '.env'

if _debug_mode:
    _config_logger.debug(f"Looking for .env at: {_env_file.absolute()} (exists: {_env_file.exists()})")

# Load .env file if it exists
load_dotenv(_env_file)

# Load from environment variables with defaults
API_ENDPOINT = os.getenv('API_ENDPOINT', 'http://localhost:11434/api/generate')
DEFAULT_MODEL = os.getenv('DEFAULT_MODEL', 'qwen3:14b')
HOST = os.getenv('HOST', '127.0.0.1')
PORT = int(os.getenv('PORT', '5000'))
REQUEST_TIMEOUT = int(os.getenv('REQUEST_TIMEOUT', '120'))
OLLAMA_NUM_CTX = int(os.getenv('OLLAMA_NUM_CTX', '4096'))
MAX_TRANSLATION_ATTEMPTS = int(os.getenv('MAX_TRANSLATION_ATTEMPTS', '2'))
RETRY_DELAY_SECONDS = int(os.getenv('RETRY_DELAY_SECONDS', '2'))

# LLM Provider configuration
LLM_PROVIDER = os.getenv('LLM_PROVIDER', 'ollama')  # 'ollama' or 'openai'
OPENAI_API_KEY = os.getenv('OPENAI_API_KEY', '')

# Batch job configuration
DEFAULT_BATCH_SIZE = int(os.getenv('DEFAULT_BATCH_SIZE', '5'))
# Pause between two windows so the provider is not hammered
WINDOW_DELAY_SECONDS = float(os.getenv('WINDOW_DELAY_SECONDS', '0.2'))

# Translation cache
CACHE_DB_PATH = os.getenv('CACHE_DB_PATH', 'data/translations.db')

DEFAULT_SOURCE_LANGUAGE = os.getenv('DEFAULT_SOURCE_LANGUAGE', 'English')
DEFAULT_TARGET_LANGUAGE = os.getenv('DEFAULT_TARGET_LANGUAGE', 'Chinese')

# Debug mode
DEBUG_MODE = os.getenv('DEBUG_MODE', 'false').lower() == 'true'

if DEBUG_MODE:
    _config_logger.debug("=" * 60)
    _config_logger.debug(f"API_ENDPOINT: {API_ENDPOINT}")
    _config_logger.debug(f"DEFAULT_MODEL: {DEFAULT_MODEL}")
    _config_logger.debug(f"LLM_PROVIDER: {LLM_PROVIDER}")
    _config_logger.debug(f"CACHE_DB_PATH: {CACHE_DB_PATH}")
    _config_logger.debug(f"DEFAULT_BATCH_SIZE: {DEFAULT_BATCH_SIZE}")
    _config_logger.debug("=" * 60)

# Translation tags
TRANSLATE_TAG_IN = "<TRANSLATION>"
TRANSLATE_TAG_OUT = "</TRANSLATION>"
INPUT_TAG_IN = "<SOURCE_TEXT>"
INPUT_TAG_OUT = "</SOURCE_TEXT>"


def validate_batch_size(batch_size: int) -> int:
    """Return batch_size as int, rejecting values below 1."""
    batch_size = int(batch_size)
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")
    return batch_size


@dataclass
class TranslationConfig:
    """Unified configuration for both CLI and web interfaces"""

    # Core settings
    source_language: str = DEFAULT_SOURCE_LANGUAGE
    target_language: str = DEFAULT_TARGET_LANGUAGE
    model: str = DEFAULT_MODEL
    api_endpoint: str = API_ENDPOINT

    # LLM Provider settings
    llm_provider: str = LLM_PROVIDER
    openai_api_key: str = OPENAI_API_KEY

    # Job parameters
    batch_size: int = DEFAULT_BATCH_SIZE
    window_delay: float = WINDOW_DELAY_SECONDS
    custom_instructions: str = ""

    # LLM parameters
    timeout: int = REQUEST_TIMEOUT
    context_window: int = OLLAMA_NUM_CTX

    # Interface-specific
    interface_type: str = "cli"  # or "web"
    enable_colors: bool = True

    @classmethod
    def from_cli_args(cls, args) -> 'TranslationConfig':
        """Create config from CLI arguments"""
        return cls(
            source_language=args.source_lang,
            target_language=args.target_lang,
            model=args.model,
            api_endpoint=args.api_endpoint,
            llm_provider=args.provider,
            openai_api_key=getattr(args, 'openai_api_key', OPENAI_API_KEY),
            batch_size=getattr(args, 'batch_size', DEFAULT_BATCH_SIZE),
            custom_instructions=getattr(args, 'custom_instructions', '') or '',
            interface_type="cli",
            enable_colors=not getattr(args, 'no_color', False)
        )

    @classmethod
    def from_web_request(cls, request_data: dict) -> 'TranslationConfig':
        """Create config from web request data"""
        return cls(
            source_language=request_data.get('source_language', DEFAULT_SOURCE_LANGUAGE),
            target_language=request_data.get('target_language', DEFAULT_TARGET_LANGUAGE),
            model=request_data.get('model', DEFAULT_MODEL),
            api_endpoint=request_data.get('llm_api_endpoint', API_ENDPOINT),
            llm_provider=request_data.get('llm_provider', LLM_PROVIDER),
            openai_api_key=request_data.get('openai_api_key') or OPENAI_API_KEY,
            batch_size=int(request_data.get('batch_size', DEFAULT_BATCH_SIZE)),
            custom_instructions=request_data.get('custom_instructions', ''),
            timeout=int(request_data.get('timeout', REQUEST_TIMEOUT)),
            context_window=int(request_data.get('context_window', OLLAMA_NUM_CTX)),
            interface_type="web"
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            'source_language': self.source_language,
            'target_language': self.target_language,
            'model': self.model,
            'api_endpoint': self.api_endpoint,
            'llm_provider': self.llm_provider,
            'batch_size': self.batch_size,
            'window_delay': self.window_delay,
            'custom_instructions': self.custom_instructions,
            'timeout': self.timeout,
            'context_window': self.context_window
        }
