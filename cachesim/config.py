from __future__ import annotations
from dataclasses import dataclass, fields
from pathlib import Path
import yaml

from .core.geometry import Geometry, compute_geometry
from .errors import ConfigError

YAML_SUFFIXES = (".yaml", ".yml")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Order of values in the plain-text cache config format
CACHE_CONFIG_KEYS = ("set_size", "line_size", "total_cache_size")


@dataclass
class SimConfig:
    """Cache Simulator Configuration"""
    # Cache geometry
    set_size: int = 4  # associativity
    line_size: int = 32
    total_cache_size: int = 1024

    # Inputs
    trace: str = ""
    config_file: str = ""

    # Reporting
    report_dir: str = "out/default_run"
    html_report: bool = True
    log_level: str = "INFO"

    def geometry(self) -> Geometry:
        """Derives the cache geometry from the current values."""
        return compute_geometry(self.total_cache_size, self.line_size, self.set_size)

    def update_from_yaml(self, yaml_path: str):
        """Updates config fields from a YAML file."""
        try:
            with open(yaml_path, 'r', encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Could not parse YAML config {yaml_path}: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Could not read YAML config {yaml_path}: {e}") from e
        if not isinstance(yaml_config, dict):
            raise ConfigError(f"YAML config {yaml_path} must be a mapping.")
        field_types = {f.name: type(getattr(self, f.name)) for f in fields(self)}
        for key, value in yaml_config.items():
            if key not in field_types:
                continue
            expected = field_types[key]
            # bool is an int subclass, so compare exact types for ints
            if type(value) is not expected:
                raise ConfigError(
                    f"YAML config {yaml_path}: {key} must be {expected.__name__}, "
                    f"got {type(value).__name__} {value!r}.")
            setattr(self, key, value)
        self.validate()

    def validate(self):
        """Checks values that have a fixed set of choices."""
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(
                f"log_level must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}.")

    def update_from_cache_config(self, path: str):
        """
        Updates the geometry from a plain-text cache config: three integers,
        set size, line size and total cache size, separated by whitespace.
        """
        try:
            with open(path, 'r', encoding="utf-8") as f:
                tokens = f.read().split()
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigError(f"Could not read cache config {path}: {e}") from e
        if len(tokens) != len(CACHE_CONFIG_KEYS):
            raise ConfigError(
                f"Cache config {path} must hold {len(CACHE_CONFIG_KEYS)} integers "
                f"({', '.join(CACHE_CONFIG_KEYS)}), got {len(tokens)} values.")
        for key, token in zip(CACHE_CONFIG_KEYS, tokens):
            try:
                setattr(self, key, int(token))
            except ValueError:
                raise ConfigError(f"Cache config {path}: {key} must be an integer, got {token!r}.") from None

    def load_file(self, path: str):
        """Loads a YAML or plain-text cache config, chosen by file suffix."""
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Config file {path} not found.")
        self.config_file = str(path)
        if config_path.suffix.lower() in YAML_SUFFIXES:
            self.update_from_yaml(path)
        else:
            self.update_from_cache_config(path)

    @classmethod
    def from_args(cls, args) -> SimConfig:
        """Factory method to create a SimConfig from parsed argparse arguments."""
        config = cls()

        # 1. Load from config files if provided; the positional cache config
        #    is applied after -c so it wins for the geometry keys
        for source in ('config', 'cache_config'):
            if getattr(args, source, None):
                config.load_file(getattr(args, source))

        # 2. Override with command-line arguments
        arg_dict = vars(args)
        for key, value in arg_dict.items():
            if key in ('config', 'cache_config'):
                continue
            if value is not None and hasattr(config, key):
                setattr(config, key, value)

        config.validate()
        return config
