from . import debug, info

from srccov.core.store import CoverageStore
from srccov.core.profiler import AbstractProfilerMeta, is_profiling_active
from srccov.exceptions import ConfigurationException

from ast import literal_eval
from typing import Optional
import collections.abc
import logging
import json

__all__ = ['CoverageConfig']

class CoverageConfig:
    """
    A parser for the JSON-formatted coverage configuration file. Settings live
    under a top-level ``"coverage"`` section::

        {"coverage": {"strict": false, "verbose": 1, "profile": true}}
    """
    DEFAULTS = {
        "strict": False,
        "verbose": 0,
        "profile": True,
    }

    def __init__(self, file: Optional[str]=None, overrides: dict=None):
        """
        Reads and parses a JSON-formatted configuration file.

        :param      file:  The path to the JSON file; if omitted, only the
                           defaults and overrides apply.
        :type       file:  str

        :param      overrides: A nested dict of keys to override those in the
                               main config.
        :type       overrides: dict
        """
        self._config = {"coverage": dict(self.DEFAULTS)}
        if file:
            try:
                with open(file, "rt") as f:
                    loaded = json.load(f)
            except (OSError, json.JSONDecodeError) as ex:
                raise ConfigurationException(
                    f"Failed to read configuration from {file}") from ex
            if not isinstance(loaded, collections.abc.Mapping):
                raise ConfigurationException(
                    f"Configuration in {file} is not a JSON object")
            self.update_overrides(loaded)
            debug("Loaded configuration from %s", file)
        if overrides:
            self.update_overrides(overrides)
        self.validate()

        self.configure_verbosity(self.verbose)
        if not self.profile:
            AbstractProfilerMeta.ProfilingNOP = True
            is_profiling_active.cache_clear()
        info("Configured coverage (strict: %s)", self.strict)

    def update_overrides(self, overrides: dict):
        def update(d, u):
            for k, v in u.items():
                if isinstance(v, collections.abc.Mapping):
                    d[k] = update(d.get(k, {}), v)
                else:
                    d[k] = v
            return d
        update(self._config, overrides)

    def validate(self):
        section = self._config.get("coverage")
        if not isinstance(section, collections.abc.Mapping):
            raise ConfigurationException("'coverage' must be a JSON object")
        for key in ("strict", "profile"):
            if not isinstance(section.get(key), bool):
                raise ConfigurationException(f"'coverage.{key}' must be a boolean")
        if section.get("verbose") not in (0, 1, 2) or \
                isinstance(section.get("verbose"), bool):
            raise ConfigurationException("'coverage.verbose' must be 0, 1 or 2")

    @staticmethod
    def configure_verbosity(level, *, logger='srccov'):
        mapping = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG
        }
        # will raise exception when level is invalid
        numeric_level = mapping[level]
        logging.getLogger(logger).setLevel(numeric_level)

    @staticmethod
    def construct_overrides(override_list: list[tuple[str, str]]) -> dict:
        """
        Builds a nested overrides dict from ``(dotted.key, value)`` pairs, such
        as those collected from ``-o coverage.strict true`` options.
        """
        def is_number_repl_isdigit(s):
            """ Returns True if string is a number. """
            """https://stackoverflow.com/a/23639915 """
            return s.lstrip('-') \
                .replace('.','',1) \
                .replace('e-','',1) \
                .replace('e','',1) \
                .isdigit()
        if not override_list:
            return {}
        overrides = dict()
        for name, value in override_list:
            keys = name.split('.')
            levels = keys[:-1]
            d = overrides
            for k in levels:
                if not d.get(k):
                    d[k] = dict()
                d = d[k]
            key = keys[-1]
            if isinstance(value, str):
                if value.lower() in ('true', 'false'):
                    value = (value.lower() == 'true')
                elif is_number_repl_isdigit(value):
                    try:
                        value = literal_eval(value)
                    except (ValueError, SyntaxError):
                        # looked numeric, e.g. "1e"; keep it as a string
                        pass
            d[key] = value
        return overrides

    @property
    def strict(self) -> bool:
        return self._config["coverage"]["strict"]

    @property
    def verbose(self) -> int:
        return self._config["coverage"]["verbose"]

    @property
    def profile(self) -> bool:
        return self._config["coverage"]["profile"]

    def create_store(self) -> CoverageStore:
        store = CoverageStore(strict=self.strict)
        debug("Created %r", store)
        return store
