"""Regular-expression rules matched against host names."""

from __future__ import annotations

import re
from typing import Iterator, Optional


class RuleError(Exception):
    """Raised when a rule is given bad arguments or a bad pattern."""


class Rule:
    """A single pattern rule; the regex is compiled on demand."""

    def __init__(self, pattern: Optional[str] = None) -> None:
        self.pattern = pattern
        self._regex: Optional[re.Pattern[str]] = None

    def __repr__(self) -> str:
        return f"Rule({self.pattern!r})"

    def accept_arg(self, arg: str) -> None:
        """Take ``arg`` as the pattern; a rule accepts only one argument."""
        if self.pattern is not None:
            raise RuleError(f"Unexpected table rule argument: {arg}")
        self.pattern = arg

    def compile(self) -> None:
        """Compile the pattern if it has not been compiled yet."""
        if self._regex is not None:
            return
        if self.pattern is None:
            raise RuleError("Rule has no pattern")
        try:
            self._regex = re.compile(self.pattern)
        except re.error as exc:
            raise RuleError(
                f'Regex compilation of "{self.pattern}" failed: {exc.msg}, offset {exc.pos}'
            ) from exc

    def matches(self, name: Optional[str]) -> bool:
        """Tell whether the pattern matches anywhere in ``name``."""
        self.compile()
        assert self._regex is not None
        return self._regex.search(name or "") is not None


class RuleSet:
    """An ordered collection of rules searched first to last."""

    def __init__(self) -> None:
        self._rules: list[Rule] = []

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def add(self, rule: Rule) -> None:
        """Append ``rule`` to the end of the set."""
        self._rules.append(rule)

    def lookup(self, name: Optional[str]) -> Optional[Rule]:
        """Return the first rule matching ``name``, or None."""
        return next((rule for rule in self._rules if rule.matches(name)), None)

    def remove(self, rule: Rule) -> None:
        """Remove ``rule`` from the set."""
        self._rules.remove(rule)