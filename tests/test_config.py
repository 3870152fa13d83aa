import yaml
import argparse
import pytest
from pathlib import Path
from cachesim.config import SimConfig
from cachesim.errors import ConfigError


def _args(**kwargs):
    defaults = dict(config=None, cache_config=None, set_size=None, line_size=None,
                    total_cache_size=None, trace=None)
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


def test_config_yaml_loading(tmp_path: Path):
    """Tests that config is loaded correctly from a YAML file."""
    yaml_content = {
        'set_size': 2,
        'line_size': 64,
        'total_cache_size': 4096,
        'trace': 'trace.txt',
    }
    yaml_file = tmp_path / "test.yaml"
    with open(yaml_file, 'w') as f:
        yaml.dump(yaml_content, f)

    config = SimConfig.from_args(_args(config=str(yaml_file)))

    assert config.set_size == 2
    assert config.line_size == 64
    assert config.total_cache_size == 4096
    assert config.trace == 'trace.txt'
    assert config.config_file == str(yaml_file)


def test_config_cli_override(tmp_path: Path):
    """Tests that CLI arguments override YAML settings."""
    yaml_file = tmp_path / "test.yml"
    with open(yaml_file, 'w') as f:
        yaml.dump({'set_size': 2, 'line_size': 64, 'total_cache_size': 4096}, f)

    config = SimConfig.from_args(_args(config=str(yaml_file), set_size=8))

    assert config.set_size == 8          # Overridden value
    assert config.line_size == 64        # Value from YAML
    assert config.geometry().num_sets == 8


def test_config_plain_cache_config(tmp_path: Path):
    """Tests the three-integer format: set size, line size, total size."""
    cfg = tmp_path / "cache.cfg"
    cfg.write_text("4\n32\n1024\n")

    config = SimConfig.from_args(_args(cache_config=str(cfg)))

    assert (config.set_size, config.line_size, config.total_cache_size) == (4, 32, 1024)
    geometry = config.geometry()
    assert geometry.num_sets == 8
    assert geometry.offset_bits == 5
    assert geometry.index_bits == 3


def test_positional_cache_config_wins_over_yaml(tmp_path: Path):
    yaml_file = tmp_path / "run.yaml"
    yaml_file.write_text("set_size: 2\nreport_dir: out/x\n")
    cfg = tmp_path / "cache.cfg"
    cfg.write_text("1 16 64")

    config = SimConfig.from_args(_args(config=str(yaml_file), cache_config=str(cfg)))

    assert config.set_size == 1
    assert config.report_dir == "out/x"


@pytest.mark.parametrize("content, message", [
    ("4 32", "must hold 3 integers"),
    ("4 32 1024 7", "must hold 3 integers"),
    ("4 thirty-two 1024", "line_size must be an integer"),
])
def test_config_bad_cache_config(tmp_path: Path, content, message):
    cfg = tmp_path / "cache.cfg"
    cfg.write_text(content)
    with pytest.raises(ConfigError, match=message):
        SimConfig().update_from_cache_config(str(cfg))


def test_config_missing_file(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        SimConfig.from_args(_args(config=str(tmp_path / "nope.yaml")))


def test_config_yaml_must_be_mapping(tmp_path: Path):
    yaml_file = tmp_path / "list.yaml"
    yaml_file.write_text("- 1\n- 2\n")
    with pytest.raises(ConfigError, match="mapping"):
        SimConfig().load_file(str(yaml_file))


def test_config_invalid_geometry():
    config = SimConfig(set_size=3, line_size=8, total_cache_size=100)
    with pytest.raises(ConfigError):
        config.geometry()


def test_config_defaults_are_valid():
    geometry = SimConfig().geometry()
    assert geometry.num_sets == 8


@pytest.mark.parametrize("content, message", [
    ("log_level: 10\n", "log_level must be str"),
    ("report_dir: 5\n", "report_dir must be str"),
    ("html_report: 'no'\n", "html_report must be bool"),
    ("set_size: true\n", "set_size must be int"),
    ("line_size: 32.0\n", "line_size must be int"),
    ("trace:\n", "trace must be str"),
])
def test_config_yaml_type_mismatch(tmp_path: Path, content, message):
    yaml_file = tmp_path / "bad.yaml"
    yaml_file.write_text(content)
    with pytest.raises(ConfigError, match=message):
        SimConfig().load_file(str(yaml_file))


def test_config_yaml_unknown_log_level(tmp_path: Path):
    yaml_file = tmp_path / "bad.yaml"
    yaml_file.write_text("log_level: verbose\n")
    with pytest.raises(ConfigError, match="log_level must be one of"):
        SimConfig.from_args(_args(config=str(yaml_file)))


def test_config_yaml_ignores_unknown_keys(tmp_path: Path):
    yaml_file = tmp_path / "extra.yaml"
    yaml_file.write_text("set_size: 2\nunused: [1, 2]\n")
    config = SimConfig.from_args(_args(config=str(yaml_file)))
    assert config.set_size == 2


def test_config_path_is_directory(tmp_path: Path):
    with pytest.raises(ConfigError, match="Could not read cache config"):
        SimConfig.from_args(_args(cache_config=str(tmp_path)))


def test_config_invalid_utf8(tmp_path: Path):
    cfg = tmp_path / "cache.cfg"
    cfg.write_bytes(b"\xff\xfe 32 1024")
    with pytest.raises(ConfigError, match="Could not read cache config"):
        SimConfig().update_from_cache_config(str(cfg))
