from __future__ import annotations

from srccov.exceptions import MalformedRangeException

from dataclasses import dataclass
from typing import Hashable, Optional, TypeAlias

__all__ = ['SourceUnit', 'SourceRange']

SourceUnit: TypeAlias = Hashable

@dataclass(frozen=True, slots=True)
class SourceRange:
    """
    An inclusive span of lines within one source unit. Statements and roots
    are both identified by their range; two ranges are the same construct iff
    they agree on the source and on every positional field.

    The `source` field only refers to the unit; its lifetime is owned by
    whoever supplies the events.

    Raises:
        MalformedRangeException: The source is missing, a line is not a
          positive integer, or the span ends before it starts.
    """
    source: SourceUnit
    start_line: int
    end_line: int
    start_column: Optional[int] = None
    end_column: Optional[int] = None

    def __post_init__(self):
        if self.source is None:
            raise MalformedRangeException("Range has no source unit",
                None, self.start_line, self.end_line)
        for line in (self.start_line, self.end_line):
            # bool is an int, but never a line number
            if not isinstance(line, int) or isinstance(line, bool):
                raise MalformedRangeException(
                    f"Line numbers must be integers, got {line!r}",
                    self.source, self.start_line, self.end_line)
        if self.start_line < 1:
            raise MalformedRangeException(
                f"Line numbers start at 1, got {self.start_line}",
                self.source, self.start_line, self.end_line)
        if self.end_line < self.start_line:
            raise MalformedRangeException(
                f"Range ends at line {self.end_line} before it starts "
                f"at line {self.start_line}",
                self.source, self.start_line, self.end_line)

    @property
    def lines(self) -> range:
        return range(self.start_line, self.end_line + 1)

    def __len__(self) -> int:
        return self.end_line - self.start_line + 1

    def __repr__(self):
        start, end = str(self.start_line), str(self.end_line)
        if self.start_column is not None:
            start += f':{self.start_column}'
        if self.end_column is not None:
            end += f':{self.end_column}'
        return f'{self.source}:{start}-{end}'
