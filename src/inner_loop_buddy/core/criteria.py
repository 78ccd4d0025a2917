# src/inner_loop_buddy/core/criteria.py

"""Deep-subset matching of task descriptors against criteria rules."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from ..tasks.task_models import TaskDescriptor


def _json_equal(actual: Any, expected: Any) -> bool:
    """Equality without Python's bool/int crossover (True == 1)."""
    if isinstance(actual, bool) or isinstance(expected, bool):
        return type(actual) is type(expected) and actual == expected
    if isinstance(actual, Mapping) and isinstance(expected, Mapping):
        return actual.keys() == expected.keys() and all(_json_equal(actual[k], expected[k]) for k in expected)
    if isinstance(actual, list) and isinstance(expected, list):
        return len(actual) == len(expected) and all(_json_equal(a, e) for a, e in zip(actual, expected))
    return actual == expected


def is_subset_match(candidate: Any, rule: Any) -> bool:
    """
    True when every field in `rule` is present in `candidate` with an equal value.

    Nested mappings recurse; lists must be equal as a whole.
    A rule that is not a mapping never matches.
    """
    if not isinstance(rule, Mapping) or not isinstance(candidate, Mapping):
        return False

    for key, expected in rule.items():
        if key not in candidate:
            return False
        actual = candidate[key]
        if isinstance(expected, Mapping):
            if not is_subset_match(actual, expected):
                return False
        elif not _json_equal(actual, expected):
            return False
    return True


def matches(task: TaskDescriptor | Mapping[str, Any], rules: Iterable[Any]) -> bool:
    """True iff at least one rule matches. Stops at the first match."""
    candidate = task.to_dict() if isinstance(task, TaskDescriptor) else task
    return any(is_subset_match(candidate, rule) for rule in rules)
