from __future__ import annotations

from abc import ABC, ABCMeta, abstractmethod
from functools import lru_cache
from typing import Iterable, Any
import threading
import os

__all__ = [
    'get_profiler', 'get_all_profilers', 'is_profiling_active',
    'AbstractProfiler', 'ValueProfiler', 'LambdaProfiler', 'CountProfiler',
    'AbstractProfilerMeta'
]

ProfiledObjects = {}

DisabledProfilers = set(
    name.split('SRCCOV_NO_PROFILE_', 1)[1] for name in os.environ.keys()
    if name.startswith('SRCCOV_NO_PROFILE_'))

def get_profiler(name: str, *default: Any) -> AbstractProfiler:
    assert len(default) <= 1
    if default:
        return ProfiledObjects.get(name, *default)
    return ProfiledObjects[name]

def get_all_profilers() -> Iterable[tuple[str, AbstractProfiler]]:
    return dict(ProfiledObjects).items()

@lru_cache(maxsize=32)
def is_profiling_active(*names: Iterable[str]) -> bool:
    if AbstractProfilerMeta.ProfilingNOP:
        return False
    return not any(name in DisabledProfilers for name in names)

class AbstractProfilerMeta(ABCMeta):
    ProfilingNOP = bool(os.environ.get('SRCCOV_NO_PROFILE'))
    _lock = threading.Lock()

    def __call__(cls, name, /, *args, **kwargs):
        if not is_profiling_active(name):
            return cls.nop
        with cls._lock:
            if (p := ProfiledObjects.get(name)) is None:
                p = super().__call__(*args, **kwargs)
                object.__setattr__(p, 'name', name)
                ProfiledObjects[name] = p
        return p

    @staticmethod
    def nop(obj=None):
        return obj

class AbstractProfiler(ABC, metaclass=AbstractProfilerMeta):
    def __init__(self, **kwargs):
        pass

    @abstractmethod
    def __call__(self, obj):
        return obj

    def __str__(self):
        raise NotImplementedError

class ValueProfiler(AbstractProfiler):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._value = None

    def __call__(self, obj):
        obj = self._value = super().__call__(obj)
        return obj

    @property
    def value(self):
        return self._value

    def __str__(self):
        return str(self.value)

class LambdaProfiler(ValueProfiler):
    @property
    def value(self):
        return self._value()

class CountProfiler(ValueProfiler):
    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._count = 0

    def __call__(self, num):
        num = super().__call__(num)
        self._count += num
        return num

    @staticmethod
    def _format(num):
        for unit in ['','K']:
            if abs(num) < 1000.0:
                return "%.1f%s" % (num, unit)
            num /= 1000.0
        return "%.1f%s" % (num, 'M')

    def __str__(self):
        return self._format(self.value)

    @property
    def value(self) -> int:
        return self._count
