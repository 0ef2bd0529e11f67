#!/usr/bin/env python3
"""
Configuration Manager for btreetrace
Handles environment variables and defaults centrally
"""

import os
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

@dataclass
class TraceConfig:
    """btreetrace configuration settings"""

    # Tree settings
    max_degree: int = 3
    split_policy: str = "auto"

    # Playback / export
    playback_speed: float = 1.0
    export_dir: Path = None

    # Runtime settings
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8765

    def __post_init__(self):
        """Load overrides from environment variables (BTREETRACE_*)"""
        self.max_degree = int(os.environ.get('BTREETRACE_MAX_DEGREE', str(self.max_degree)))
        self.split_policy = os.environ.get('BTREETRACE_SPLIT_POLICY', self.split_policy).lower()
        self.playback_speed = float(os.environ.get('BTREETRACE_PLAYBACK_SPEED', str(self.playback_speed)))
        self.log_level = os.environ.get('BTREETRACE_LOG_LEVEL', self.log_level).upper()
        self.host = os.environ.get('BTREETRACE_HOST', self.host)
        self.port = int(os.environ.get('BTREETRACE_PORT', str(self.port)))

        if self.export_dir is None:
            self.export_dir = Path(os.environ.get('BTREETRACE_EXPORT_DIR', Path.cwd()))
        else:
            self.export_dir = Path(self.export_dir)

    def get_safe_dict(self) -> Dict[str, Any]:
        """Get configuration as a plain dict"""
        return {
            'max_degree': self.max_degree,
            'split_policy': self.split_policy,
            'playback_speed': self.playback_speed,
            'export_dir': str(self.export_dir),
            'log_level': self.log_level,
            'host': self.host,
            'port': self.port,
        }

class ConfigManager:
    """Singleton configuration manager"""

    _instance: Optional['ConfigManager'] = None
    _config: Optional[TraceConfig] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if self._config is None:
            self.load_config()

    def load_config(self, env_file: Optional[Path] = None):
        """Load configuration from environment.

        Priority (highest to lowest):
        1. Environment variables (BTREETRACE_*)
        2. .env file (loaded into os.environ before config creation)
        3. TraceConfig dataclass defaults
        """
        env_file = Path(env_file) if env_file else Path.cwd() / '.env'
        if env_file.exists():
            self._load_env_file(env_file)

        self._config = TraceConfig()

    def _load_env_file(self, env_file: Path):
        """Load environment variables from .env file.

        Only sets values for keys not already in os.environ,
        ensuring exported env vars take precedence over .env file.
        """
        with open(env_file, 'r') as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith('#') and '=' in line:
                    key, value = line.split('=', 1)
                    key = key.strip()
                    if key not in os.environ:
                        os.environ[key] = value.strip()

    @property
    def config(self) -> TraceConfig:
        """Get the current configuration"""
        if self._config is None:
            self.load_config()
        return self._config

    @classmethod
    def reset(cls):
        """Drop the singleton so the next access reloads the configuration"""
        cls._instance = None


def get_config() -> TraceConfig:
    """Get the global configuration instance"""
    return ConfigManager().config
