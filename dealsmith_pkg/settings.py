#!/usr/bin/env python3
"""
Settings loader for Dealsmith.
Supports configuration from dealsmith.yml, dealsmith.yaml, or dealsmith.json files.
"""

import os
import json
import yaml
from typing import Dict, Any, Optional


class DealsmithSettings:
    """Load and manage Dealsmith configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'output': 'site',
        'content': '_data',
        'templates': None,
        'assets': None,
        'site_url': 'https://example.com',
        'site_name': 'ReferralCode.com',
        'site_tagline': 'Honest referral codes that work.',
        'contact_email': None,
        'footer_note': None,
        'robots': 'public',
        'robots_disallow': ['/_data/', '/*.md', '/.git/', '/logs/', '/dealsmith.yml'],
        'minify': False,
        'related_limit': 3,
        'default_success_rate': 100,
        'year': None,
        'year_token': '2025',
        'logs': 'logs',
    }

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['dealsmith.yml', 'dealsmith.yaml', 'dealsmith.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Returns:
            Dictionary of configuration settings
        """
        config_file = self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            try:
                loaded_settings = self._load_config_file(config_file)
                if not isinstance(loaded_settings, dict):
                    raise ValueError("configuration must be a mapping")
                if loaded_settings:
                    # Merge with defaults, giving preference to loaded settings
                    self.settings.update(loaded_settings)
                    print(f"Loaded configuration from: {os.path.relpath(config_file)}")
            except (ValueError, IOError, OSError) as e:
                print(f"Warning: Failed to load config file {config_file}: {e}")

        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """Find the first available configuration file."""
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ValueError(f"Unsupported config file format: {file_ext}")
        except PermissionError:
            raise PermissionError(f"Permission denied reading configuration file: {config_path}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {config_path}: {e}")
        except (IOError, OSError) as e:
            raise IOError(f"Error reading configuration file {config_path}: {e}")

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        filename = f'dealsmith.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# Dealsmith Configuration File\n\n")
                    f.write("# Site information\n")
                    f.write("site_url: https://example.com\n")
                    f.write("site_name: ReferralCode.com\n")
                    f.write("site_tagline: Honest referral codes that work.\n")
                    f.write("contact_email: hello@example.com\n\n")
                    f.write("# Build settings\n")
                    f.write("output: site\n")
                    f.write("content: _data\n")
                    f.write("minify: false\n\n")
                    f.write("# Deal settings\n")
                    f.write("related_limit: 3\n")
                    f.write("default_success_rate: 100\n")
                    f.write("year_token: '2025'  # replaced with the build year in meta titles\n\n")
                    f.write("# SEO settings\n")
                    f.write("robots: public  # public or private\n")
                    f.write("robots_disallow:\n")
                    for path in self.DEFAULT_SETTINGS['robots_disallow']:
                        f.write(f"  - '{path}'\n")
                elif file_format == 'json':
                    sample_config = {
                        key: value for key, value in self.DEFAULT_SETTINGS.items()
                        if value is not None
                    }
                    sample_config['contact_email'] = 'hello@example.com'
                    json.dump(sample_config, f, indent=2)
                else:
                    raise ValueError(f"Unsupported config file format: {file_format}")
        except PermissionError:
            raise PermissionError(f"Permission denied creating configuration file: {config_path}")
        except (IOError, OSError) as e:
            raise IOError(f"Error writing configuration file {config_path}: {e}")

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = self.settings.copy()

        for key, value in args_dict.items():
            if value is None:
                continue
            # store_true flags only override when actually set
            if key == 'minify' and value is False:
                continue
            if key == 'robots_disallow' and isinstance(value, str):
                merged[key] = [path.strip() for path in value.split(',') if path.strip()]
            else:
                merged[key] = value

        return merged
