"""Configuration system for the Site Scuba CLI with precedence handling.

Configuration is assembled from several sources, highest precedence first:
CLI flags > environment variables > config file > defaults
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from ..audit.capture.browser_factory import BrowserEngineType
from ..audit.models.crawl import CrawlConfig


class BrowserSettings(BaseModel):
    """Browser launch options."""
    engine: str = Field(default=BrowserEngineType.CHROMIUM, description="Browser engine")
    headful: bool = Field(default=False, description="Run browser with GUI")
    user_agent: Optional[str] = Field(default=None, description="Custom user agent")
    ignore_https_errors: bool = Field(default=False, description="Ignore HTTPS certificate errors")

    @field_validator('engine')
    @classmethod
    def validate_engine(cls, v):
        v = v.lower()
        if v not in BrowserEngineType.ALL:
            raise ValueError(f"engine must be one of: {', '.join(BrowserEngineType.ALL)}")
        return v


class OutputConfig(BaseModel):
    """Output configuration options."""
    format: str = Field(default="text", description="Output format")
    output_file: Optional[Path] = Field(default=None, description="Output file path")
    verbose: bool = Field(default=False, description="Verbose output")
    quiet: bool = Field(default=False, description="Quiet mode")

    @field_validator('format')
    @classmethod
    def validate_format(cls, v):
        v = v.lower()
        if v not in ['json', 'yaml', 'text']:
            raise ValueError("format must be one of: json, yaml, text")
        return v


class CLIConfiguration(BaseModel):
    """Complete CLI configuration with all sections."""

    crawl: CrawlConfig = Field(default_factory=CrawlConfig)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)

    # Metadata
    config_file_path: Optional[Path] = Field(default=None, description="Source config file")
    loaded_from: List[str] = Field(default_factory=list, description="Configuration sources")


class ConfigurationLoader:
    """Loads and merges configuration from multiple sources with proper precedence."""

    ENV_PREFIX = "SCUBA_"

    # Searched in order, first hit wins
    DEFAULT_CONFIG_FILES = [
        "scuba.yaml",
        "scuba.yml",
        ".scuba.yaml",
        ".scuba.yml",
        "scuba.json",
        ".scuba.json"
    ]

    LIST_FIELDS = (
        '.allowed_origins', '.special_layout_paths', '.brand_selectors',
        '.nav_selectors', '.footer_selectors',
        '.nav_link_selectors', '.footer_link_selectors',
    )
    BOOL_FIELDS = ('.verbose', '.quiet', '.headful', '.ignore_https_errors')
    INT_FIELDS = (
        '.max_pages', '.seed_timeout_ms', '.navigation_timeout_ms',
        '.idle_timeout_ms', '.collect_idle_timeout_ms', '.settle_delay_ms',
    )

    def __init__(self):
        self.loaded_sources: List[str] = []

    def load_configuration(
        self,
        config_file: Optional[Path] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        search_paths: Optional[List[Path]] = None
    ) -> CLIConfiguration:
        """Load configuration with proper precedence.

        Precedence (highest to lowest):
        1. CLI overrides (flags)
        2. Environment variables
        3. Specified config file
        4. Auto-discovered config files
        5. Defaults

        Args:
            config_file: Explicitly specified config file
            cli_overrides: CLI flag overrides, nested by section
            search_paths: Paths to search for config files

        Returns:
            Merged configuration

        Raises:
            FileNotFoundError: If config_file does not exist
            ValueError: If a config file cannot be parsed
            pydantic.ValidationError: If the merged values are invalid
        """
        self.loaded_sources = []

        config_data: Dict[str, Any] = {}
        self.loaded_sources.append("defaults")

        if not config_file:
            discovered = self._discover_config_file(search_paths or [Path.cwd()])
            if discovered:
                source_file = discovered.pop("_source_file")
                config_data = self._merge_config(config_data, discovered)
                self.loaded_sources.append(f"auto-discovered: {source_file}")

        if config_file:
            if not config_file.exists():
                raise FileNotFoundError(f"Configuration file not found: {config_file}")

            file_config = self._load_config_file(config_file)
            config_data = self._merge_config(config_data, file_config)
            self.loaded_sources.append(f"config file: {config_file}")

        env_config = self._load_environment_variables()
        if env_config:
            config_data = self._merge_config(config_data, env_config)
            self.loaded_sources.append("environment variables")

        if cli_overrides:
            config_data = self._merge_config(config_data, cli_overrides)
            self.loaded_sources.append("CLI flags")

        config_data["loaded_from"] = self.loaded_sources
        if config_file:
            config_data["config_file_path"] = config_file

        return CLIConfiguration(**config_data)

    def _discover_config_file(self, search_paths: List[Path]) -> Optional[Dict[str, Any]]:
        """Discover configuration file in search paths."""
        for search_path in search_paths:
            for config_filename in self.DEFAULT_CONFIG_FILES:
                config_path = search_path / config_filename
                if config_path.exists() and config_path.is_file():
                    config_data = self._load_config_file(config_path)
                    config_data["_source_file"] = str(config_path)
                    return config_data
        return None

    def _load_config_file(self, config_path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        suffix = config_path.suffix.lower()
        if suffix not in ['.yaml', '.yml', '.json']:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")

        try:
            content = config_path.read_text(encoding='utf-8')
        except OSError as e:
            raise ValueError(f"Error loading config file {config_path}: {e}") from e

        try:
            if suffix == '.json':
                data = json.loads(content)
            else:
                data = yaml.safe_load(content) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {config_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in config file {config_path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping at the top level")
        return data

    def _load_environment_variables(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        config: Dict[str, Any] = {}

        env_mapping = {
            f"{self.ENV_PREFIX}ORIGINS": "crawl.allowed_origins",
            f"{self.ENV_PREFIX}SPECIAL_PATHS": "crawl.special_layout_paths",
            f"{self.ENV_PREFIX}BRAND_SELECTORS": "crawl.brand_selectors",
            f"{self.ENV_PREFIX}NAV_SELECTORS": "crawl.nav_selectors",
            f"{self.ENV_PREFIX}FOOTER_SELECTORS": "crawl.footer_selectors",
            f"{self.ENV_PREFIX}NAV_LINK_SELECTORS": "crawl.nav_link_selectors",
            f"{self.ENV_PREFIX}FOOTER_LINK_SELECTORS": "crawl.footer_link_selectors",
            f"{self.ENV_PREFIX}MAX_PAGES": "crawl.max_pages",
            f"{self.ENV_PREFIX}SEED_TIMEOUT_MS": "crawl.seed_timeout_ms",
            f"{self.ENV_PREFIX}NAVIGATION_TIMEOUT_MS": "crawl.navigation_timeout_ms",
            f"{self.ENV_PREFIX}IDLE_TIMEOUT_MS": "crawl.idle_timeout_ms",
            f"{self.ENV_PREFIX}COLLECT_IDLE_TIMEOUT_MS": "crawl.collect_idle_timeout_ms",
            f"{self.ENV_PREFIX}SETTLE_DELAY_MS": "crawl.settle_delay_ms",
            f"{self.ENV_PREFIX}BROWSER": "browser.engine",
            f"{self.ENV_PREFIX}HEADFUL": "browser.headful",
            f"{self.ENV_PREFIX}USER_AGENT": "browser.user_agent",
            f"{self.ENV_PREFIX}IGNORE_HTTPS_ERRORS": "browser.ignore_https_errors",
            f"{self.ENV_PREFIX}OUTPUT_FORMAT": "output.format",
            f"{self.ENV_PREFIX}OUTPUT_FILE": "output.output_file",
            f"{self.ENV_PREFIX}VERBOSE": "output.verbose",
            f"{self.ENV_PREFIX}QUIET": "output.quiet",
        }

        for env_var, config_path in env_mapping.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                converted_value = self._convert_env_value(env_value, config_path)
                self._set_nested_value(config, config_path, converted_value)

        return config

    def _convert_env_value(self, value: str, config_path: str) -> Any:
        """Convert environment variable string to appropriate type."""
        if config_path.endswith(self.BOOL_FIELDS):
            return value.lower() in ('true', '1', 'yes', 'on')

        if config_path.endswith(self.INT_FIELDS):
            try:
                return int(value)
            except ValueError:
                raise ValueError(f"Expected an integer for {config_path}, got '{value}'")

        # Comma-separated lists
        if config_path.endswith(self.LIST_FIELDS):
            return [item.strip() for item in value.split(',') if item.strip()]

        if config_path.endswith('.output_file'):
            return Path(value) if value else None

        return value

    def _set_nested_value(self, config: Dict[str, Any], path: str, value: Any):
        """Set a nested configuration value using dot notation."""
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        current[keys[-1]] = value

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Merge configuration dictionaries, with override taking precedence."""
        if not override:
            return base

        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result


def load_configuration(
    config_file: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    search_paths: Optional[List[Path]] = None
) -> CLIConfiguration:
    """Convenience function to load configuration.

    Args:
        config_file: Path to configuration file
        cli_overrides: CLI flag overrides
        search_paths: Paths to search for config files

    Returns:
        Loaded and merged configuration
    """
    loader = ConfigurationLoader()
    return loader.load_configuration(config_file, cli_overrides, search_paths)


def print_configuration(config: CLIConfiguration, format: str = "yaml") -> str:
    """Render the effective configuration for debugging.

    Args:
        config: Configuration to print
        format: Output format (yaml, json)

    Returns:
        Formatted configuration string
    """
    config_dict = config.model_dump(
        mode="json",
        exclude={'loaded_from', 'config_file_path'},
        exclude_none=False
    )

    if format.lower() == "json":
        return json.dumps(config_dict, indent=2, default=str)
    else:
        return yaml.safe_dump(config_dict, default_flow_style=False, sort_keys=True)


def validate_configuration(config: CLIConfiguration) -> List[str]:
    """Validate cross-field constraints and return error messages.

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if config.output.verbose and config.output.quiet:
        errors.append("verbose and quiet cannot both be enabled")

    if config.output.output_file and config.output.output_file.exists() and config.output.output_file.is_dir():
        errors.append(f"Output path is a directory: {config.output.output_file}")

    crawl = config.crawl
    if crawl.navigation_timeout_ms > crawl.seed_timeout_ms:
        errors.append(
            f"navigation_timeout_ms ({crawl.navigation_timeout_ms}) should not exceed "
            f"seed_timeout_ms ({crawl.seed_timeout_ms})"
        )

    if crawl.special_layout_paths and any(p == "/" for p in crawl.special_layout_paths):
        errors.append("special_layout_paths entry '/' would exempt every page from layout checks")

    return errors
