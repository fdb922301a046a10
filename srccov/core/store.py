from __future__ import annotations

from . import debug, warning

from srccov.core.types import SourceRange, SourceUnit
from srccov.core.profiler import CountProfiler
from srccov.exceptions import (MalformedRangeException,
    FrozenCoverageException, UnloadedRangeException)

from enum import Enum
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping
import numpy as np
import threading

__all__ = [
    'EventKind', 'PerSourceCoverage', 'CoverageStore',
    'sections_to_line_numbers'
]

class EventKind(Enum):
    loaded_statement = 'loaded_statement'
    loaded_root = 'loaded_root'
    covered_statement = 'covered_statement'
    covered_root = 'covered_root'

_KIND_ATTRS = {
    EventKind.loaded_statement: '_loaded_statements',
    EventKind.loaded_root: '_loaded_roots',
    EventKind.covered_statement: '_covered_statements',
    EventKind.covered_root: '_covered_roots',
}

# a covered range must first be loaded with the matching kind (strict mode)
_LOADED_KIND = {
    EventKind.covered_statement: EventKind.loaded_statement,
    EventKind.covered_root: EventKind.loaded_root,
}

def sections_to_line_numbers(sections: Iterable[SourceRange]) -> frozenset[int]:
    """
    Expands every inclusive line span in `sections` and returns the union of
    all line numbers touched.
    """
    spans = [np.arange(s.start_line, s.end_line + 1) for s in sections]
    if not spans:
        return frozenset()
    return frozenset(np.unique(np.concatenate(spans)).tolist())

def _ratio(num: int, den: int) -> float:
    if den == 0:
        return np.nan
    return num / den

class PerSourceCoverage:
    """
    The loaded and covered statements and roots of a single source unit.

    An instance is either mutable, receiving ranges from its owning
    :py:class:`CoverageStore`, or frozen, as returned by
    :py:func:`read_only_copy`. Frozen instances hold immutable sets and reject
    any insertion with :py:class:`~srccov.exceptions.FrozenCoverageException`.

    Ratios are `nan` when nothing of the corresponding kind was loaded.
    """
    __slots__ = (
        '_source', '_lock', '_strict', '_frozen',
        '_loaded_statements', '_loaded_roots',
        '_covered_statements', '_covered_roots'
    )

    def __init__(self, source: SourceUnit, *,
            lock: threading.RLock=None, strict: bool=False):
        self._source = source
        self._lock = lock or threading.RLock()
        self._strict = strict
        self._frozen = False
        self._loaded_statements = set()
        self._loaded_roots = set()
        self._covered_statements = set()
        self._covered_roots = set()

    @property
    def source(self) -> SourceUnit:
        return self._source

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    ## Mutators

    def add(self, kind: EventKind | str, section: SourceRange):
        kind = EventKind(kind)
        with self._lock:
            if self._frozen:
                raise FrozenCoverageException(
                    f"Cannot add {section!r} to read-only coverage of"
                    f" {self._source}", self._source)
            if not isinstance(section, SourceRange):
                raise MalformedRangeException(
                    f"Expected a SourceRange, got {section!r}", self._source)
            if section.source != self._source:
                raise MalformedRangeException(
                    f"{section!r} does not belong to {self._source}",
                    section.source, section.start_line, section.end_line)
            if self._strict and (loaded := _LOADED_KIND.get(kind)) and \
                    section not in getattr(self, _KIND_ATTRS[loaded]):
                warning("Rejected %s %r: it was never loaded", kind.value, section)
                raise UnloadedRangeException(
                    f"{section!r} is covered but was never loaded", section)
            getattr(self, _KIND_ATTRS[kind]).add(section)

    def add_loaded_statement(self, section: SourceRange):
        self.add(EventKind.loaded_statement, section)

    def add_loaded_root(self, section: SourceRange):
        self.add(EventKind.loaded_root, section)

    def add_covered_statement(self, section: SourceRange):
        self.add(EventKind.covered_statement, section)

    def add_covered_root(self, section: SourceRange):
        self.add(EventKind.covered_root, section)

    def read_only_copy(self) -> PerSourceCoverage:
        if self._frozen:
            return self
        copy = self.__class__(self._source, strict=self._strict)
        with self._lock:
            copy._loaded_statements = frozenset(self._loaded_statements)
            copy._loaded_roots = frozenset(self._loaded_roots)
            copy._covered_statements = frozenset(self._covered_statements)
            copy._covered_roots = frozenset(self._covered_roots)
        copy._frozen = True
        return copy

    ## Raw sets

    def _view(self, kind: EventKind) -> frozenset[SourceRange]:
        # frozenset() of a frozenset is the same object, so frozen copies
        # are never duplicated
        with self._lock:
            return frozenset(getattr(self, _KIND_ATTRS[kind]))

    @property
    def loaded_statements(self) -> frozenset[SourceRange]:
        return self._view(EventKind.loaded_statement)

    @property
    def loaded_roots(self) -> frozenset[SourceRange]:
        return self._view(EventKind.loaded_root)

    @property
    def covered_statements(self) -> frozenset[SourceRange]:
        return self._view(EventKind.covered_statement)

    @property
    def covered_roots(self) -> frozenset[SourceRange]:
        return self._view(EventKind.covered_root)

    ## Ratios

    def root_coverage(self) -> float:
        with self._lock:
            return _ratio(len(self._covered_roots), len(self._loaded_roots))

    def statement_coverage(self) -> float:
        with self._lock:
            return _ratio(len(self._covered_statements),
                len(self._loaded_statements))

    def line_coverage(self) -> float:
        """
        The share of loaded lines not touched by any loaded-but-uncovered
        statement. Overlapping statements make this differ from the ratio of
        covered lines to loaded lines: a line shared by a covered and an
        uncovered statement counts as not covered.
        """
        with self._lock:
            loaded = frozenset(self._loaded_statements)
            covered = frozenset(self._covered_statements)
        loaded_size = len(sections_to_line_numbers(loaded))
        non_covered_size = len(sections_to_line_numbers(loaded - covered))
        return _ratio(loaded_size - non_covered_size, loaded_size)

    ## Line projections

    def loaded_line_numbers(self) -> frozenset[int]:
        return sections_to_line_numbers(self.loaded_statements)

    def covered_line_numbers(self) -> frozenset[int]:
        return sections_to_line_numbers(self.covered_statements)

    def non_covered_line_numbers(self) -> frozenset[int]:
        with self._lock:
            sections = self._loaded_statements - self._covered_statements
        return sections_to_line_numbers(sections)

    def loaded_root_line_numbers(self) -> frozenset[int]:
        return sections_to_line_numbers(self.loaded_roots)

    def covered_root_line_numbers(self) -> frozenset[int]:
        return sections_to_line_numbers(self.covered_roots)

    def non_covered_root_line_numbers(self) -> frozenset[int]:
        with self._lock:
            sections = self._loaded_roots - self._covered_roots
        return sections_to_line_numbers(sections)

    def __repr__(self):
        with self._lock:
            return (f'PerSourceCoverage({self._source},'
                f' statements={len(self._covered_statements)}/{len(self._loaded_statements)},'
                f' roots={len(self._covered_roots)}/{len(self._loaded_roots)}'
                f'{", frozen" if self._frozen else ""})')

class CoverageStore:
    """
    Routes coverage events to the :py:class:`PerSourceCoverage` of their
    source unit, creating it on first reference.

    All entries of a live store share the store's lock, so that creating an
    entry, inserting a range and taking a snapshot are atomic with respect to
    each other.

    Args:
        strict (bool, optional): Reject covered ranges which were not loaded
          beforehand, instead of recording them as-is.
    """
    def __init__(self, *, strict: bool=False):
        self._lock = threading.RLock()
        self._strict = strict
        self._frozen = False
        self._coverage: dict[SourceUnit, PerSourceCoverage] = {}

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    @property
    def coverage(self) -> Mapping[SourceUnit, PerSourceCoverage]:
        if self._frozen:
            return self._coverage
        with self._lock:
            return MappingProxyType(dict(self._coverage))

    def _ensure_entry_exists(self, section: SourceRange) -> PerSourceCoverage:
        if not isinstance(section, SourceRange):
            raise MalformedRangeException(
                f"Expected a SourceRange, got {section!r}")
        if (entry := self._coverage.get(section.source)) is None:
            entry = self._coverage[section.source] = PerSourceCoverage(
                section.source, lock=self._lock, strict=self._strict)
            CountProfiler('sources')(1)
            debug("Created coverage entry for %s", section.source)
        return entry

    def record(self, kind: EventKind | str, section: SourceRange):
        kind = EventKind(kind)
        with self._lock:
            if self._frozen:
                raise FrozenCoverageException(
                    f"Cannot record {kind.value} {section!r} in a snapshot",
                    getattr(section, 'source', None))
            self._ensure_entry_exists(section).add(kind, section)
            CountProfiler('events')(1)

    def record_all(self, events: Iterable[tuple[EventKind | str, SourceRange]]):
        """
        Records a batch of ``(kind, range)`` events. The whole batch is checked
        before anything is recorded, so a bad event leaves the store unchanged.
        """
        events = [(EventKind(kind), section) for kind, section in events]
        with self._lock:
            if self._frozen:
                raise FrozenCoverageException(
                    f"Cannot record {len(events)} event(s) in a snapshot")
            self._validate_batch(events)
            for kind, section in events:
                self.record(kind, section)

    def _validate_batch(self, events: list[tuple[EventKind, SourceRange]]):
        pending = set()
        for kind, section in events:
            if not isinstance(section, SourceRange):
                raise MalformedRangeException(
                    f"Expected a SourceRange, got {section!r}")
            if self._strict and (loaded := _LOADED_KIND.get(kind)) and \
                    (loaded, section) not in pending and \
                    not ((entry := self._coverage.get(section.source)) and
                        section in entry._view(loaded)):
                warning("Rejected batch: %s %r was never loaded",
                    kind.value, section)
                raise UnloadedRangeException(
                    f"{section!r} is covered but was never loaded", section)
            pending.add((kind, section))

    def add_loaded_statement(self, section: SourceRange):
        self.record(EventKind.loaded_statement, section)

    def add_loaded_root(self, section: SourceRange):
        self.record(EventKind.loaded_root, section)

    def add_covered_statement(self, section: SourceRange):
        self.record(EventKind.covered_statement, section)

    def add_covered_root(self, section: SourceRange):
        self.record(EventKind.covered_root, section)

    def snapshot(self) -> CoverageStore:
        """
        Returns a frozen copy of the store. Every set of every entry is copied
        while holding the store's lock; events recorded afterwards are not
        visible through the copy, and the copy rejects new events.
        """
        if self._frozen:
            return self
        with self._lock:
            entries = {source: entry.read_only_copy()
                for source, entry in self._coverage.items()}
        frozen = self.__class__(strict=self._strict)
        frozen._coverage = MappingProxyType(entries)
        frozen._frozen = True
        CountProfiler('snapshots')(1)
        debug("Took a snapshot of %d source(s)", len(entries))
        return frozen

    read_only_copy = snapshot

    def __getitem__(self, source: SourceUnit) -> PerSourceCoverage:
        with self._lock:
            return self._coverage[source]

    def __contains__(self, source: SourceUnit) -> bool:
        with self._lock:
            return source in self._coverage

    def __iter__(self) -> Iterator[SourceUnit]:
        with self._lock:
            return iter(list(self._coverage))

    def __len__(self) -> int:
        with self._lock:
            return len(self._coverage)

    def __repr__(self):
        return (f'CoverageStore(sources={len(self)}'
            f'{", frozen" if self._frozen else ""})')
