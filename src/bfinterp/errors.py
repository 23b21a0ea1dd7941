from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Type, TypeVar


def _build_context(lines: List[str], line_no_1: int, column: Optional[int] = None, *, context: int = 2) -> str:
    idx = max(1, min(line_no_1, len(lines)))
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx and column is not None:
            out.append(f"  {'':4s} | {' ' * (column - 1)}^")
    return "\n".join(out)


def _hint_for(message: str, *, kind: str) -> Optional[str]:
    msg = message.lower()
    if kind == 'parse':
        if 'unclosed loop' in msg:
            return 'Every "[" needs a matching "]". The earliest unclosed "[" is reported.'
        if 'missing loop start' in msg:
            return 'This "]" closes a loop that was never opened. Check for an extra "]" or a missing "[".'
        return None
    if kind == 'execution':
        if 'out of bounds' in msg:
            return 'The data pointer must stay within the tape. Check the balance of ">" and "<" inside loops.'
        return None
    return None


@dataclass
class BFError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class BFParseError(BFError):
    line: Optional[int] = None
    column: Optional[int] = None
    context: str = ""


@dataclass
class UnmatchedOpenError(BFParseError):
    pass


@dataclass
class UnmatchedCloseError(BFParseError):
    pass


@dataclass
class BFExecutionError(BFError):
    pc: int = 0
    pointer: int = 0


@dataclass
class OutOfBoundsError(BFExecutionError):
    pass


_ParseErrorT = TypeVar('_ParseErrorT', bound=BFParseError)

_PARSE_MESSAGES = {
    UnmatchedOpenError: 'unclosed loop',
    UnmatchedCloseError: 'missing loop start',
}


def make_parse_error(
    kind: Type[_ParseErrorT],
    *,
    source: str,
    line: Optional[int] = None,
    column: Optional[int] = None,
) -> _ParseErrorT:
    """Build a parse error of `kind`, with a source excerpt when a position is known."""
    message = _PARSE_MESSAGES[kind]
    if line is None:
        return kind(message=message)

    ctx = _build_context(source.split('\n'), line, column)
    hint = _hint_for(message, kind='parse')
    hint_block = f"\nHint: {hint}" if hint else ""
    return kind(
        message=f"{message} at line {line} char {column}\n{ctx}{hint_block}",
        line=line,
        column=column,
        context=ctx,
    )


def make_out_of_bounds_error(*, pc: int, pointer: int, move: int, tape_length: int) -> OutOfBoundsError:
    direction = 'right' if move > 0 else 'left'
    message = 'out of bounds'
    hint = _hint_for(message, kind='execution')
    hint_block = f"\nHint: {hint}" if hint else ""
    return OutOfBoundsError(
        message=(
            f"{message}: moving {direction} by {abs(move)} from cell {pointer} "
            f"leaves the tape of {tape_length} cells (instruction {pc}){hint_block}"
        ),
        pc=pc,
        pointer=pointer,
    )
