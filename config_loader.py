"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict

import yaml

from models import ExportTarget


DEFAULT_CONFIG: Dict[str, Any] = {
    'vault': {
        'content_root': '',
        'attachment_folder': '',
        'config_dir': '',
    },
    'marp': {
        'executable': 'marp',
        'chrome_path': '',
        'theme_path': '',
        'resources_directory': '',
        'engine_path': '',
        'enable_markdown_it_plugins': False,
        'enable_html': False,
        'math_typesetting': 'mathjax',
    },
    'export': {
        'target': ExportTarget.SLIDE_DOCUMENT.value,
        'export_path': '',
        'staging_root': '',
    },
    'logging': {
        'level': None,
        'file': None,
    },
}


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from YAML file with environment variable substitution.

        Missing sections and keys are filled from ``DEFAULT_CONFIG``.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        # Substitute environment variables recursively
        config_data = cls._substitute_env_vars_recursive(config_data)

        return cls.with_defaults(config_data)

    @classmethod
    def with_defaults(cls, config: Dict[str, Any]) -> Dict[str, Any]:
        """Return a copy of ``config`` with missing keys taken from the defaults."""
        merged = copy.deepcopy(DEFAULT_CONFIG)
        for section, values in (config or {}).items():
            if isinstance(values, dict) and isinstance(merged.get(section), dict):
                merged[section].update(values)
            else:
                merged[section] = values
        return merged

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        cls._validate_required_field(config, 'vault.content_root')
        content_root = os.path.expanduser(get_nested(config, 'vault.content_root'))
        if not os.path.isdir(content_root):
            raise ValueError(f"vault.content_root '{content_root}' is not a valid directory")

        # Validate export target
        target = get_nested(config, 'export.target', ExportTarget.SLIDE_DOCUMENT.value)
        try:
            ExportTarget.parse(target)
        except ValueError:
            raise ValueError(
                f"export.target must be one of: {[t.value for t in ExportTarget]}"
            )

        for field in ('marp.enable_markdown_it_plugins', 'marp.enable_html'):
            if not isinstance(get_nested(config, field, False), bool):
                raise ValueError(f"{field} must be a boolean")

        math = get_nested(config, 'marp.math_typesetting', 'mathjax')
        if math not in ('mathjax', 'katex', False):
            raise ValueError("marp.math_typesetting must be 'mathjax', 'katex', or false")

        for field in ('vault.attachment_folder', 'marp.chrome_path', 'marp.theme_path',
                      'marp.resources_directory', 'marp.engine_path', 'export.export_path',
                      'export.staging_root'):
            value = get_nested(config, field, '')
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{field} must be a string")

        resources = get_nested(config, 'marp.resources_directory')
        if resources:
            # Relative paths are taken from the content root
            resources = os.path.join(content_root, os.path.expanduser(resources))
            if not os.path.isdir(resources):
                raise ValueError(f"marp.resources_directory '{resources}' is not a directory")

        staging_root = get_nested(config, 'export.staging_root')
        if staging_root and os.path.exists(staging_root) and not os.path.isdir(staging_root):
            raise ValueError(f"export.staging_root '{staging_root}' is not a directory")

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = cls.with_defaults(config)

        if getattr(args, 'content_root', None):
            merged['vault']['content_root'] = args.content_root

        if getattr(args, 'attachment_folder', None):
            merged['vault']['attachment_folder'] = args.attachment_folder

        if getattr(args, 'target', None):
            target = args.target
            merged['export']['target'] = target.value if isinstance(target, ExportTarget) else target

        if getattr(args, 'export_path', None):
            merged['export']['export_path'] = args.export_path

        if getattr(args, 'chrome_path', None):
            merged['marp']['chrome_path'] = args.chrome_path

        if getattr(args, 'marp_executable', None):
            merged['marp']['executable'] = args.marp_executable

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        verbose = getattr(args, 'verbose', 0) or 0
        if verbose >= 2:
            merged['logging']['level'] = 'DEBUG'
        elif verbose >= 1:
            merged['logging']['level'] = 'INFO'

        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        else:
            return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            var_name = match.group(1)
            env_value = os.getenv(var_name)
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config_section: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config_section, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        # Check for unsubstituted environment variables
        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "marp.chrome_path")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    keys = path.split('.')
    value = config

    for key in keys:
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'get_nested']
