"""Configuration module for the cartify automation suite."""

import copy
import json
import logging
import os
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# Paths of the pages under test, relative to the site's base URL
PAGE_PATHS = {
    "products": "/products",
    "cart": "/cartpage",
    "checkout": "/checkout",
}

# Environment variables and the (dotted) configuration keys they override
ENV_OVERRIDES = {
    "CARTIFY_BASE_URL": ("site.base_url", str),
    "CARTIFY_TIMEOUT": ("timeouts.default", float),
    "CARTIFY_POLL_INTERVAL": ("timeouts.poll_interval", float),
    "CARTIFY_HEADLESS": ("browser.headless", lambda v: v.strip().lower() in ("1", "true", "yes", "on")),
    "CARTIFY_BROWSER": ("browser.browser_type", str),
    "CARTIFY_LOG_LEVEL": ("logging.level", str),
}


class Config:
    """
    Configuration manager for the cartify automation suite.

    Values come from DEFAULTS, then an optional JSON or YAML file, then environment
    variables (a .env file is honoured through python-dotenv).
    """

    # Default configuration values
    DEFAULTS = {
        "site": {
            "base_url": "https://cartify0.netlify.app",
            "pages": PAGE_PATHS
        },
        "timeouts": {
            "default": 10.0,
            "poll_interval": 0.5
        },
        "browser": {
            "browser_type": "chromium",
            "headless": True,
            "viewport": {"width": 1280, "height": 1024},
            "launch_args": ["--disable-notifications", "--disable-renderer-backgrounding"],
            "navigation_timeout_ms": 30000,
            "action_timeout_ms": 2000
        },
        "logging": {
            "level": "INFO",
            "log_file": None,
            "console_output": True
        },
        "storage": {
            "screenshots_dir": "screenshots",
            "results_dir": "test_results"
        }
    }

    def __init__(self, config_path: Optional[str] = None, use_env: bool = True):
        """
        Initialize configuration.

        Args:
            config_path: Path to a JSON or YAML configuration file. Optional.
            use_env: Whether environment variables (and .env) override file values.
        """
        self.config_path = config_path
        self.config = self._load_config()
        if use_env:
            load_dotenv()
            self._apply_env_overrides()

    def _load_config(self) -> Dict[str, Any]:
        """
        Load configuration from file, merged over the defaults.

        Returns:
            Dictionary with configuration

        Raises:
            ValueError: If the file exists but cannot be parsed
        """
        if not self.config_path:
            return copy.deepcopy(self.DEFAULTS)

        if not os.path.exists(self.config_path):
            logger.warning(f"Configuration file not found at {self.config_path}. Using defaults.")
            return copy.deepcopy(self.DEFAULTS)

        try:
            with open(self.config_path, 'r', encoding='utf-8') as f:
                if self.config_path.endswith(('.yaml', '.yml')):
                    loaded = yaml.safe_load(f) or {}
                else:
                    loaded = json.load(f)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ValueError(f"Invalid configuration file {self.config_path}: {e}") from e

        if not isinstance(loaded, dict):
            raise ValueError(f"Configuration file {self.config_path} must contain a mapping")

        logger.info(f"Loaded configuration from {self.config_path}")
        return self._merge_with_defaults(loaded)

    def _merge_with_defaults(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge user configuration with defaults to ensure all required fields exist.

        Args:
            config: User configuration

        Returns:
            Merged configuration
        """
        merged = copy.deepcopy(self.DEFAULTS)

        def deep_merge(target, source):
            for key, value in source.items():
                if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                    deep_merge(target[key], value)
                else:
                    target[key] = value

        deep_merge(merged, config)
        return merged

    def _apply_env_overrides(self) -> None:
        for env_name, (key, convert) in ENV_OVERRIDES.items():
            raw = os.environ.get(env_name)
            if raw is None or raw == "":
                continue
            try:
                self.set(key, convert(raw))
            except ValueError as e:
                raise ValueError(f"Invalid value for {env_name}: {raw!r}") from e
            logger.debug(f"Configuration '{key}' overridden by {env_name}")

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            key: Configuration key (dotted notation, e.g. 'browser.headless')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value = self.config
        for part in key.split('.'):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def set(self, key: str, value: Any) -> None:
        """
        Set a configuration value in memory.

        Args:
            key: Configuration key (dotted notation, e.g. 'site.base_url')
            value: Value to set
        """
        parts = key.split('.')
        config = self.config
        for part in parts[:-1]:
            config = config.setdefault(part, {})
        config[parts[-1]] = value

    @property
    def base_url(self) -> str:
        return self.get('site.base_url').rstrip('/')

    @property
    def timeout(self) -> float:
        return float(self.get('timeouts.default', 10.0))

    @property
    def poll_interval(self) -> float:
        return float(self.get('timeouts.poll_interval', 0.5))

    def page_url(self, page: str) -> str:
        """
        Absolute URL of a page under test.

        Args:
            page: Page name ('products', 'cart', 'checkout')

        Returns:
            URL string
        """
        path = self.get(f'site.pages.{page}')
        if path is None:
            raise KeyError(f"Unknown page '{page}'")
        return f"{self.base_url}{path}"

    def get_storage_path(self, storage_type: str) -> str:
        """
        Get a storage path with user expansion.

        Args:
            storage_type: Type of storage (screenshots, results)

        Returns:
            Expanded path
        """
        path = self.get(f'storage.{storage_type}_dir') or storage_type
        return os.path.expanduser(path)

    def configure_logging(self) -> None:
        """Configure logging based on configuration."""
        log_level = getattr(logging, str(self.get('logging.level', 'INFO')).upper(), logging.INFO)
        log_file = self.get('logging.log_file')
        console_output = self.get('logging.console_output', True)

        handlers = []

        if log_file:
            handlers.append(logging.FileHandler(log_file))

        if console_output:
            handlers.append(logging.StreamHandler())

        logging.basicConfig(
            level=log_level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=handlers or None
        )
