"""
Counters - Named, non-negative tallies attached to cards and players.

A holder keeps at most one Counter per type. Operations work on tuples of
counters and return new tuples.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any

from ..errors import EntityValidationError


@dataclass(frozen=True)
class Counter:
    """A tally such as "+1/+1" or "poison"."""
    type: str
    count: int


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def validate_counter(counter: Any) -> None:
    """Raise EntityValidationError unless counter is a well-formed Counter."""
    if not isinstance(counter, Counter):
        raise EntityValidationError("Counter must be a Counter")
    if not isinstance(counter.type, str) or not counter.type.strip():
        raise EntityValidationError("Invalid counter structure")
    if not _is_count(counter.count):
        raise EntityValidationError("Invalid counter structure")


def validate_counters(counters: Any) -> tuple[Counter, ...]:
    """Validate a counter collection and return it as a tuple."""
    if not isinstance(counters, (list, tuple)):
        raise EntityValidationError("Counters must be a list")
    seen: set[str] = set()
    for counter in counters:
        validate_counter(counter)
        if counter.type in seen:
            raise EntityValidationError(f"Duplicate counter type: {counter.type}")
        seen.add(counter.type)
    return tuple(counters)


def add_counter(counters: tuple[Counter, ...], counter: Counter) -> tuple[Counter, ...]:
    """Return counters with counter merged in (counts of the same type sum)."""
    validate_counter(counter)

    for i, existing in enumerate(counters):
        if existing.type == counter.type:
            merged = Counter(type=counter.type, count=existing.count + counter.count)
            return counters[:i] + (merged,) + counters[i + 1:]

    return counters + (counter,)


def remove_counter(counters: tuple[Counter, ...], counter: Counter) -> tuple[Counter, ...]:
    """
    Return counters with counter.count removed from its type.

    Removing to exactly zero deletes the type entry.
    """
    validate_counter(counter)

    for i, existing in enumerate(counters):
        if existing.type != counter.type:
            continue
        if existing.count < counter.count:
            raise EntityValidationError("Cannot remove more counters than exist")
        remaining = existing.count - counter.count
        if remaining == 0:
            return counters[:i] + counters[i + 1:]
        return counters[:i] + (Counter(type=counter.type, count=remaining),) + counters[i + 1:]

    raise EntityValidationError("Cannot remove counters that do not exist")


def get_counter_count(counters: tuple[Counter, ...], counter_type: str) -> int:
    """Count of counter_type, 0 if absent."""
    for counter in counters:
        if counter.type == counter_type:
            return counter.count
    return 0


def total_counters(counters: tuple[Counter, ...]) -> int:
    return sum(c.count for c in counters)
