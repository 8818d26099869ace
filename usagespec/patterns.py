"""The pattern tree built from usage text and matched against arguments."""

from __future__ import annotations

import abc
import re
from collections import Counter, deque
from collections.abc import Callable, Iterable, Sequence

from .textutil import split
from .value import Value

_OPTION_PART = re.compile(r"(-{1,2})?(.*?)([,= ]|\Z)")
_DEFAULT = re.compile(r"\[default: (.*)\]", re.IGNORECASE)

MatchResult = tuple[bool, list, list]


def _as_predicate(predicate) -> Callable[[Pattern], bool]:
    if predicate is None:
        return lambda pattern: isinstance(pattern, LeafPattern)
    if isinstance(predicate, type):
        return lambda pattern: isinstance(pattern, predicate)
    return predicate


class Pattern(abc.ABC):
    """A node of a usage pattern tree."""

    @abc.abstractmethod
    def flat(self, predicate=None) -> list[Pattern]:
        """Return the nodes accepted by ``predicate``, not descending below them.

        ``predicate`` is a callable or a class; by default leaves are taken.
        """

    def leaves(self) -> list[LeafPattern]:
        """Return every leaf below (or at) this node, left to right."""
        return self.flat(LeafPattern)

    @abc.abstractmethod
    def match(self, left: Sequence[Pattern], collected=None) -> MatchResult:
        """Try to consume patterns from ``left``.

        Returns ``(matched, left, collected)``; on failure the given
        ``left`` and ``collected`` come back unchanged.
        """

    def has_value(self) -> bool:
        return False

    @abc.abstractmethod
    def _key(self) -> tuple:
        """A structural identity of this node."""

    def __eq__(self, other):
        if not isinstance(other, Pattern):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash(self._key())


class LeafPattern(Pattern):
    """A pattern with a name and a value and no children."""

    def __init__(self, name: str, value=None):
        self.name = name
        self.value = Value(value)

    def flat(self, predicate=None) -> list[Pattern]:
        return [self] if _as_predicate(predicate)(self) else []

    def has_value(self) -> bool:
        return bool(self.value)

    @abc.abstractmethod
    def single_match(self, left: Sequence[Pattern]) -> tuple[int, LeafPattern] | None:
        """Find the position in ``left`` this leaf matches and the matched leaf."""

    def match(self, left: Sequence[Pattern], collected=None) -> MatchResult:
        left = list(left)
        collected = list(collected or [])
        found = self.single_match(left)
        if found is None:
            return False, left, collected
        index, matched = found
        remaining = left[:index] + left[index + 1:]
        same_name = next((p for p in collected if p.name == self.name), None)

        if self.value.is_long():
            if same_name is None:
                matched.value = Value(1)
                return True, remaining, collected + [matched]
            if same_name.value.is_long():
                same_name.value = Value(same_name.value.as_long() + 1)
            else:
                same_name.value = Value(1)
            return True, remaining, collected

        if self.value.is_string_list():
            if matched.value.is_string():
                items = [matched.value.as_string()]
            elif matched.value.is_string_list():
                items = matched.value.as_string_list()
            else:
                items = []
            if same_name is None:
                matched.value = Value(items)
                return True, remaining, collected + [matched]
            if same_name.value.is_string_list():
                same_name.value = Value(same_name.value.as_string_list() + items)
            else:
                same_name.value = Value(items)
            return True, remaining, collected

        return True, remaining, collected + [matched]

    def _key(self) -> tuple:
        return (type(self), self.name, self.value)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, {self.value!r})"


class Argument(LeafPattern):
    """A positional argument such as ``<file>`` or ``FILE``."""

    def single_match(self, left: Sequence[Pattern]) -> tuple[int, LeafPattern] | None:
        for index, pattern in enumerate(left):
            if isinstance(pattern, Argument):
                return index, Argument(self.name, pattern.value)
        return None


class Command(Argument):
    """A literal word that must appear as the next positional argument."""

    def __init__(self, name: str, value=False):
        super().__init__(name, value)

    def single_match(self, left: Sequence[Pattern]) -> tuple[int, LeafPattern] | None:
        for index, pattern in enumerate(left):
            if isinstance(pattern, Argument):
                if pattern.value == Value(self.name):
                    return index, Command(self.name, True)
                return None
        return None


class Option(LeafPattern):
    """A short and/or long option, possibly taking one argument."""

    def __init__(self, short: str = "", long: str = "", argcount: int = 0, value=False):
        value = Value(value)
        if argcount and value.is_bool() and not value.as_bool():
            value = Value(None)
        super().__init__(long or short, value)
        self.short = short
        self.long = long
        self.argcount = argcount

    @classmethod
    def parse(cls, description: str) -> Option:
        """Build an option from one entry of an ``options:`` section."""
        short = long = ""
        argcount = 0
        value: object = False

        end = description.find("  ")
        if end == -1:
            end = len(description)
        spec = description[:end]

        pos = 0
        while True:
            match = _OPTION_PART.search(spec, pos)
            if match is None or match.end() == match.start():
                break
            dashes, body, delimiter = match.groups()
            if dashes is not None:
                if len(dashes) == 1:
                    short = "-" + body
                else:
                    long = "--" + body
            elif body:
                argcount = 1
            if not delimiter:
                break
            pos = match.end()

        if argcount:
            default = _DEFAULT.search(description, end)
            if default is not None:
                value = default.group(1)

        return cls(short, long, argcount, value)

    def single_match(self, left: Sequence[Pattern]) -> tuple[int, LeafPattern] | None:
        for index, pattern in enumerate(left):
            if isinstance(pattern, LeafPattern) and pattern.name == self.name:
                return index, pattern
        return None

    def _key(self) -> tuple:
        return super()._key() + (self.short, self.long, self.argcount)

    def __repr__(self) -> str:
        return (
            f"Option({self.short!r}, {self.long!r}, {self.argcount!r}, {self.value!r})"
        )


class BranchPattern(Pattern):
    """A pattern made of child patterns."""

    def __init__(self, children: Iterable[Pattern] = ()):
        self.children = list(children)

    def flat(self, predicate=None) -> list[Pattern]:
        accept = _as_predicate(predicate)
        if accept(self):
            return [self]
        return [node for child in self.children for node in child.flat(accept)]

    def fix(self) -> BranchPattern:
        """Share equal nodes and give repeated leaves counting or list values."""
        self.fix_identities()
        self.fix_repeating_arguments()
        return self

    def fix_identities(self, seen: dict | None = None) -> None:
        """Replace children equal to an earlier node with that node."""
        if seen is None:
            seen = {}
        self.children = [self._unique(child, seen) for child in self.children]

    @staticmethod
    def _unique(child: Pattern, seen: dict) -> Pattern:
        if isinstance(child, BranchPattern):
            child.fix_identities(seen)
        return seen.setdefault(child._key(), child)

    def fix_repeating_arguments(self) -> None:
        """Make leaves that may occur more than once count or collect."""
        for group in transform(self.children):
            counts = Counter(id(pattern) for pattern in group)
            repeated = {id(p): p for p in group if counts[id(p)] > 1}
            for leaf in repeated.values():
                if not isinstance(leaf, LeafPattern):
                    continue
                counts_up = isinstance(leaf, Command) or (
                    isinstance(leaf, Option) and not leaf.argcount
                )
                if counts_up:
                    leaf.value = Value(0)
                elif not leaf.value.is_string_list():
                    words = split(leaf.value.as_string()) if leaf.value.is_string() else []
                    leaf.value = Value(words)

    def _key(self) -> tuple:
        return (type(self), tuple(child._key() for child in self.children))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.children!r})"


class Required(BranchPattern):
    """All children must match, in order."""

    def match(self, left: Sequence[Pattern], collected=None) -> MatchResult:
        left = list(left)
        collected = list(collected or [])
        current_left, current_collected = left, collected
        for child in self.children:
            matched, current_left, current_collected = child.match(
                current_left, current_collected
            )
            if not matched:
                return False, left, collected
        return True, current_left, current_collected


class Optional(BranchPattern):
    """Children match if they can; the pattern itself always matches."""

    def match(self, left: Sequence[Pattern], collected=None) -> MatchResult:
        left = list(left)
        collected = list(collected or [])
        for child in self.children:
            _, left, collected = child.match(left, collected)
        return True, left, collected


class OptionsShortcut(Optional):
    """The ``[options]`` placeholder, filled with options from the options section."""


class OneOrMore(BranchPattern):
    """Its single child must match at least once."""

    def match(self, left: Sequence[Pattern], collected=None) -> MatchResult:
        if len(self.children) != 1:
            raise ValueError("OneOrMore needs exactly one child")
        left = list(left)
        collected = list(collected or [])
        child = self.children[0]
        current_left, current_collected = left, collected
        times = 0
        previous = None
        matched = True
        while matched:
            matched, current_left, current_collected = child.match(
                current_left, current_collected
            )
            if matched:
                times += 1
            if previous is not None and current_left == previous:
                break
            previous = current_left
        if times == 0:
            return False, left, collected
        return True, current_left, current_collected


class Either(BranchPattern):
    """The child that leaves the fewest patterns unconsumed wins."""

    def match(self, left: Sequence[Pattern], collected=None) -> MatchResult:
        left = list(left)
        collected = list(collected or [])
        outcomes = []
        for child in self.children:
            matched, child_left, child_collected = child.match(left, collected)
            if matched:
                outcomes.append((child_left, child_collected))
        if not outcomes:
            return False, left, collected
        best_left, best_collected = min(outcomes, key=lambda outcome: len(outcome[0]))
        return True, best_left, best_collected


def transform(children: Iterable[Pattern]) -> list[list[Pattern]]:
    """Expand branches into the flat alternatives of leaves they allow."""
    result: list[list[Pattern]] = []
    groups: deque[list[Pattern]] = deque([list(children)])
    while groups:
        group = groups.popleft()
        branch = next((p for p in group if isinstance(p, BranchPattern)), None)
        if branch is None:
            result.append(group)
            continue
        position = next(i for i, p in enumerate(group) if p is branch)
        rest = group[:position] + group[position + 1:]
        if isinstance(branch, Either):
            groups.extend([choice] + rest for choice in branch.children)
        elif isinstance(branch, OneOrMore):
            groups.append(branch.children * 2 + rest)
        else:
            groups.append(branch.children + rest)
    return result