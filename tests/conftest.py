import pytest

from srccov import CoverageStore, SourceRange
from srccov.core.profiler import AbstractProfilerMeta, is_profiling_active


@pytest.fixture
def store():
    return CoverageStore()


@pytest.fixture
def unit():
    return "script.js"


@pytest.fixture
def section(unit):
    """Shorthand for building line ranges in the default source unit."""
    def make(start, end=None, source=unit):
        return SourceRange(source, start, start if end is None else end)
    return make


@pytest.fixture(autouse=True)
def restore_profiling():
    nop = AbstractProfilerMeta.ProfilingNOP
    yield
    AbstractProfilerMeta.ProfilingNOP = nop
    is_profiling_active.cache_clear()
