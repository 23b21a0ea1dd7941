from __future__ import annotations

from dataclasses import dataclass, replace
from typing import ClassVar, List, Sequence, Union

CELL_MODULUS = 256


# ---------------- Instructions ----------------
@dataclass(frozen=True)
class MoveRight:
    count: int = 1  # '>' repeated
    symbol: ClassVar[str] = ">"

    def render(self) -> str:
        return self.symbol * self.count


@dataclass(frozen=True)
class MoveLeft:
    count: int = 1  # '<' repeated
    symbol: ClassVar[str] = "<"

    def render(self) -> str:
        return self.symbol * self.count


@dataclass(frozen=True)
class Increment:
    count: int = 1  # '+' repeated, modulo 256
    symbol: ClassVar[str] = "+"

    def render(self) -> str:
        return self.symbol * self.count


@dataclass(frozen=True)
class Decrement:
    count: int = 1  # '-' repeated, modulo 256
    symbol: ClassVar[str] = "-"

    def render(self) -> str:
        return self.symbol * self.count


@dataclass(frozen=True)
class Output:
    symbol: ClassVar[str] = "."

    def render(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class Input:
    symbol: ClassVar[str] = ","

    def render(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class LoopStart:
    target: int  # index of the matching LoopEnd
    symbol: ClassVar[str] = "["

    def render(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class LoopEnd:
    target: int  # index of the matching LoopStart
    symbol: ClassVar[str] = "]"

    def render(self) -> str:
        return self.symbol


@dataclass(frozen=True)
class Reset:
    symbol: ClassVar[str] = "[-]"

    def render(self) -> str:
        return self.symbol


Instruction = Union[MoveRight, MoveLeft, Increment, Decrement, Output, Input, LoopStart, LoopEnd, Reset]
Program = List[Instruction]

COUNTED = (MoveRight, MoveLeft, Increment, Decrement)
VALUE_CHANGES = (Increment, Decrement)
JUMPS = (LoopStart, LoopEnd)


def with_count(instruction: Instruction, count: int) -> Instruction:
    """Copy of a counted instruction carrying `count`.

    Value changes are kept modulo 256; pointer moves are not bounded here.
    """
    if isinstance(instruction, VALUE_CHANGES):
        count %= CELL_MODULUS
    return replace(instruction, count=count)


def check_pairs(program: Sequence[Instruction]) -> None:
    """Raise ValueError unless every loop boundary points at a partner pointing back."""
    stack: List[int] = []
    for index, instruction in enumerate(program):
        if isinstance(instruction, LoopStart):
            stack.append(index)
            target = instruction.target
            if not (0 <= target < len(program)) or not isinstance(program[target], LoopEnd):
                raise ValueError(f"LoopStart at {index} points at {target}, which is not a LoopEnd")
            if program[target].target != index:
                raise ValueError(f"LoopStart at {index} and LoopEnd at {target} do not point at each other")
        elif isinstance(instruction, LoopEnd):
            if not stack:
                raise ValueError(f"LoopEnd at {index} has no open loop")
            opened = stack.pop()
            if instruction.target != opened:
                raise ValueError(f"LoopEnd at {index} points at {instruction.target}, expected {opened}")
    if stack:
        raise ValueError(f"LoopStart at {stack[0]} is never closed")
