# -*- test-case-name: peerguard.test.test_ruleset -*-
# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
An ordered, append-only list of rules which is safe to read from any thread.
"""

from threading import Lock
from typing import Iterable, Iterator, Tuple

from peerguard._rules import Rule

__all__ = ["RuleSet"]


class RuleSet:
    """
    Rules in the order they were appended.

    Every change replaces the whole tuple of rules with a new one, so a
    reader holding the result of L{snapshot} keeps a consistent view
    however the set changes afterwards.  Changes are serialized with a lock;
    reading takes no lock.
    """

    def __init__(self, rules: Iterable[Rule] = ()) -> None:
        self._rules: Tuple[Rule, ...] = tuple(rules)
        self._lock = Lock()

    def snapshot(self) -> Tuple[Rule, ...]:
        """
        @return: The rules as they are now.
        """
        return self._rules

    def append(self, rule: Rule) -> None:
        with self._lock:
            self._rules = self._rules + (rule,)

    def extend(self, rules: Iterable[Rule]) -> None:
        """
        Append several rules at once; readers see either none or all of them.
        """
        added = tuple(rules)
        with self._lock:
            self._rules = self._rules + added

    def clear(self) -> int:
        """
        Remove every rule.

        @return: How many rules were removed.
        """
        with self._lock:
            removed = len(self._rules)
            self._rules = ()
        return removed

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __repr__(self) -> str:
        return f"<RuleSet {list(self._rules)!r}>"
