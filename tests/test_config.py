import json
import logging

import pytest

from srccov import (CoverageConfig, ConfigurationException,
    UnloadedRangeException, SourceRange, CountProfiler)
from srccov.core.profiler import get_profiler


@pytest.fixture(autouse=True)
def restore_log_level():
    root = logging.getLogger("srccov")
    level = root.level
    yield
    root.setLevel(level)


def write_config(tmp_path, data):
    path = tmp_path / "coverage.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_defaults_without_file():
    config = CoverageConfig()
    assert config.strict is False
    assert config.verbose == 0
    assert config.profile is True
    assert not config.create_store().strict


def test_reads_file(tmp_path):
    path = write_config(tmp_path, {"coverage": {"strict": True, "verbose": 2}})
    config = CoverageConfig(path)
    assert config.strict is True
    assert config.verbose == 2
    assert logging.getLogger("srccov").level == logging.DEBUG


def test_overrides_take_precedence(tmp_path):
    path = write_config(tmp_path, {"coverage": {"strict": True}})
    overrides = CoverageConfig.construct_overrides([
        ("coverage.strict", "false"),
        ("coverage.verbose", "1"),
    ])
    assert overrides == {"coverage": {"strict": False, "verbose": 1}}

    config = CoverageConfig(path, overrides)
    assert config.strict is False
    assert config.verbose == 1
    assert logging.getLogger("srccov").level == logging.INFO


def test_construct_overrides_keeps_strings():
    overrides = CoverageConfig.construct_overrides([("a.b.c", "name")])
    assert overrides == {"a": {"b": {"c": "name"}}}
    assert CoverageConfig.construct_overrides([]) == {}


def test_strict_store_from_config():
    store = CoverageConfig(overrides={"coverage": {"strict": True}}).create_store()
    with pytest.raises(UnloadedRangeException):
        store.add_covered_root(SourceRange("a.py", 1, 2))


def test_disabling_profiling():
    CoverageConfig(overrides={"coverage": {"profile": False}})
    assert CountProfiler("config_disabled") is CountProfiler.nop
    assert get_profiler("config_disabled", None) is None


@pytest.mark.parametrize("data", [
    {"coverage": {"strict": "yes"}},
    {"coverage": {"verbose": 3}},
    {"coverage": {"verbose": True}},
    {"coverage": []},
    [],
])
def test_invalid_config(tmp_path, data):
    with pytest.raises(ConfigurationException):
        CoverageConfig(write_config(tmp_path, data))


def test_unreadable_config(tmp_path):
    with pytest.raises(ConfigurationException):
        CoverageConfig(str(tmp_path / "missing.json"))
    broken = tmp_path / "broken.json"
    broken.write_text("{")
    with pytest.raises(ConfigurationException):
        CoverageConfig(str(broken))


def test_construct_overrides_keeps_numeric_looking_strings():
    overrides = CoverageConfig.construct_overrides([
        ("coverage.tag", "e1"),
        ("coverage.other", "1e"),
        ("coverage.ratio", "2.5"),
    ])
    assert overrides == {"coverage": {"tag": "e1", "other": "1e", "ratio": 2.5}}


def test_verbosity_leaves_host_root_logger_alone():
    root = logging.getLogger()
    level = root.level
    CoverageConfig(overrides={"coverage": {"verbose": 2}})
    assert root.level == level
