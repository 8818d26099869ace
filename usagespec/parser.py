"""Read usage text into a pattern tree and match command-line arguments to it."""

from __future__ import annotations

import copy
import re
import sys
from collections.abc import Iterable

from .errors import (
    DocoptArgumentError,
    DocoptExitHelp,
    DocoptExitVersion,
    DocoptLanguageError,
)
from .patterns import (
    Argument,
    Command,
    Either,
    OneOrMore,
    Option,
    Optional,
    OptionsShortcut,
    Pattern,
    Required,
)
from .textutil import partition, regex_split, split, trim
from .value import Value

_SEPARATORS = re.compile(r"\s*([\[\]()|]|\.\.\.)")
_STRINGS = re.compile(r"\s*(\S*<.*?>|[^<>\s]+)")
_OPTION_DELIMITER = re.compile(r"(?:^|\n)[ \t]*(?=-{1,2})")


class _OptionError(ValueError):
    """An option was given in a way that cannot be resolved."""


class Tokens:
    """A cursor over a list of words, from usage text or from ``argv``."""

    def __init__(self, tokens: Iterable[str], parsing_argv: bool = True):
        self._tokens = list(tokens)
        self._index = 0
        self.parsing_argv = parsing_argv

    @classmethod
    def from_pattern(cls, source: str) -> Tokens:
        """Split usage text into brackets, bars, ellipses and words."""
        tokens: list[str] = []
        last = 0
        for match in _SEPARATORS.finditer(source):
            prefix = source[last:match.start()]
            if prefix:
                tokens.extend(m.group(1) for m in _STRINGS.finditer(prefix))
            tokens.append(match.group(1))
            last = match.end()
        tail = source[last:]
        if tail:
            tokens.extend(m.group(1) for m in _STRINGS.finditer(tail))
        return cls(tokens, parsing_argv=False)

    def __bool__(self) -> bool:
        return self._index < len(self._tokens)

    def current(self) -> str:
        """The next word, or an empty string when none is left."""
        return self._tokens[self._index] if self else ""

    def the_rest(self) -> str:
        """The words not yet consumed, joined by spaces."""
        return " ".join(self._tokens[self._index:])

    def pop(self) -> str:
        """Consume and return the next word."""
        if not self:
            raise IndexError("no tokens left")
        token = self._tokens[self._index]
        self._index += 1
        return token


def parse_section(name: str, source: str) -> list[str]:
    """Return each line holding ``name`` together with the indented lines after it."""
    pattern = re.compile(
        r"(?:^|\n)([^\n]*" + re.escape(name) + r"[^\n]*(?=\n?)(?:\n[ \t].*?(?=\n|\Z))*)",
        re.IGNORECASE,
    )
    return [trim(match.group(1)) for match in pattern.finditer(source)]


def parse_defaults(doc: str) -> list[Option]:
    """Read every option described in the ``options:`` sections of ``doc``."""
    defaults: list[Option] = []
    for section in parse_section("options:", doc):
        body = section[section.find(":") + 1:]
        defaults.extend(
            Option.parse(entry)
            for entry in regex_split(body, _OPTION_DELIMITER)
            if entry.startswith("-")
        )
    return defaults


def formal_usage(section: str) -> str:
    """Turn a usage section into one expression of alternatives."""
    parts = split(section, section.find(":") + 1)
    if not parts:
        return "( )"
    program, words = parts[0], parts[1:]
    pieces = ["("]
    for word in words:
        pieces.append(") | (" if word == program else word)
    pieces.append(")")
    return " ".join(pieces)


def _same_option(option: Option) -> Option:
    return copy.copy(option)


def parse_long(tokens: Tokens, options: list[Option]) -> list[Pattern]:
    """Consume one ``--long[=value]`` token, adding unknown options to ``options``."""
    long_opt, equal, raw = partition(tokens.pop(), "=")
    value = Value(raw) if equal else Value(None)

    similar = [option for option in options if option.long == long_opt]
    if tokens.parsing_argv and not similar:
        similar = [
            option for option in options
            if option.long and option.long.startswith(long_opt)
        ]

    if len(similar) > 1:
        names = ", ".join(option.long for option in similar)
        raise _OptionError(f"'{long_opt}' is not a unique prefix: {names}")

    if not similar:
        argcount = 1 if equal else 0
        options.append(Option("", long_opt, argcount))
        option = _same_option(options[-1])
        if tokens.parsing_argv:
            option.value = value if argcount else Value(True)
        return [option]

    option = _same_option(similar[0])
    if option.argcount == 0:
        if value:
            raise _OptionError(f"{option.long} must not have an argument")
    elif not value:
        token = tokens.current()
        if token in ("", "--"):
            raise _OptionError(f"{option.long} requires an argument")
        value = Value(tokens.pop())
    if tokens.parsing_argv:
        option.value = value if value else Value(True)
    return [option]


def parse_short(tokens: Tokens, options: list[Option]) -> list[Pattern]:
    """Consume one ``-abc`` token, adding unknown options to ``options``."""
    token = tokens.pop()
    rest = token[1:]
    result: list[Pattern] = []
    while rest:
        short_opt, rest = "-" + rest[0], rest[1:]
        similar = [option for option in options if option.short == short_opt]

        if len(similar) > 1:
            raise _OptionError(
                f"{short_opt} is specified ambiguously {len(similar)} times"
            )

        if not similar:
            options.append(Option(short_opt, "", 0))
            option = _same_option(options[-1])
            if tokens.parsing_argv:
                option.value = Value(True)
            result.append(option)
            continue

        option = _same_option(similar[0])
        value = Value(None)
        if option.argcount:
            if not rest:
                following = tokens.current()
                if following in ("", "--"):
                    raise _OptionError(f"{short_opt} requires an argument")
                value = Value(tokens.pop())
            else:
                value, rest = Value(rest), ""
        if tokens.parsing_argv:
            option.value = value if value else Value(True)
        result.append(option)
    return result


def _is_argument_spec(token: str) -> bool:
    if not token:
        return False
    if token.startswith("<") and token.endswith(">"):
        return True
    return all("A" <= char <= "Z" for char in token)


def _parse_atom(tokens: Tokens, options: list[Option]) -> list[Pattern]:
    token = tokens.current()
    if token in ("[", "("):
        tokens.pop()
        expr = _parse_expr(tokens, options)
        closing = "]" if token == "[" else ")"
        trailing = tokens.pop() if tokens else ""
        if trailing != closing:
            raise DocoptLanguageError(f"Mismatched '{token}'")
        return [Optional(expr) if token == "[" else Required(expr)]
    if token == "options":
        tokens.pop()
        return [OptionsShortcut()]
    if token.startswith("--") and token != "--":
        return parse_long(tokens, options)
    if token.startswith("-") and token not in ("-", "--"):
        return parse_short(tokens, options)
    if _is_argument_spec(token):
        return [Argument(tokens.pop())]
    return [Command(tokens.pop())]


def _parse_seq(tokens: Tokens, options: list[Option]) -> list[Pattern]:
    result: list[Pattern] = []
    while tokens and tokens.current() not in ("]", ")", "|"):
        atom = _parse_atom(tokens, options)
        if tokens.current() == "...":
            result.append(OneOrMore(atom))
            tokens.pop()
        else:
            result.extend(atom)
    return result


def _collapse(seq: list[Pattern], wrapper) -> Pattern:
    return seq[0] if len(seq) == 1 else wrapper(seq)


def _parse_expr(tokens: Tokens, options: list[Option]) -> list[Pattern]:
    seq = _parse_seq(tokens, options)
    if tokens.current() != "|":
        return seq
    alternatives = [_collapse(seq, Required)]
    while tokens.current() == "|":
        tokens.pop()
        alternatives.append(_collapse(_parse_seq(tokens, options), Required))
    return [_collapse(alternatives, Either)]


def parse_pattern(source: str, options: list[Option]) -> Required:
    """Parse a formal usage expression into a pattern tree."""
    tokens = Tokens.from_pattern(source)
    result = _parse_expr(tokens, options)
    if tokens:
        raise DocoptLanguageError(f"Unexpected ending: '{tokens.the_rest()}'")
    return Required(result)


def parse_argv(tokens, options: list[Option], options_first: bool = False) -> list[Pattern]:
    """Turn command-line words into options and positional arguments."""
    if not isinstance(tokens, Tokens):
        tokens = Tokens(tokens)
    result: list[Pattern] = []
    while tokens:
        token = tokens.current()
        if token == "--" or (options_first and not token.startswith("-")) or (
            options_first and token == "-"
        ):
            while tokens:
                result.append(Argument("", tokens.pop()))
        elif token.startswith("--"):
            result.extend(parse_long(tokens, options))
        elif token.startswith("-") and token != "-":
            result.extend(parse_short(tokens, options))
        else:
            result.append(Argument("", tokens.pop()))
    return result


def _is_option_set(patterns: list[Pattern], *names: str) -> bool:
    wanted = {name for name in names if name}
    return any(
        getattr(pattern, "name", None) in wanted and pattern.has_value()
        for pattern in patterns
    )


def _create_pattern_tree(doc: str) -> tuple[Required, list[Option]]:
    usage_sections = parse_section("usage:", doc)
    if not usage_sections:
        raise DocoptLanguageError("'usage:' (case-insensitive) not found.")
    if len(usage_sections) > 1:
        raise DocoptLanguageError("More than one 'usage:' (case-insensitive).")

    options = parse_defaults(doc)
    pattern = parse_pattern(formal_usage(usage_sections[0]), options)
    in_pattern = set(pattern.flat(Option))

    for shortcut in pattern.flat(OptionsShortcut):
        doc_options = dict.fromkeys(
            option for option in parse_defaults(doc) if option not in in_pattern
        )
        shortcut.children = [_same_option(option) for option in doc_options]
    return pattern, options


def docopt_parse(
    doc: str,
    argv: Iterable[str],
    help: bool = True,
    version: bool = True,
    options_first: bool = False,
) -> dict[str, Value]:
    """Match ``argv`` against the usage text ``doc``.

    Returns a mapping from each option, argument and command name to its
    value, sorted by name.
    """
    argv = list(argv)
    try:
        pattern, options = _create_pattern_tree(doc)
    except _OptionError as error:
        raise DocoptLanguageError(str(error)) from None

    try:
        argv_patterns = parse_argv(Tokens(argv), options, options_first)
    except _OptionError as error:
        raise DocoptArgumentError(str(error)) from None

    if help and _is_option_set(argv_patterns, "-h", "--help"):
        raise DocoptExitHelp()
    if version and _is_option_set(argv_patterns, "--version"):
        raise DocoptExitVersion()

    matched, left, collected = pattern.fix().match(argv_patterns, [])
    if matched and not left:
        result = {leaf.name: leaf.value for leaf in pattern.leaves()}
        result.update((leaf.name, leaf.value) for leaf in collected)
        return dict(sorted(result.items()))
    if matched:
        raise DocoptArgumentError("Unexpected argument: " + ", ".join(argv))
    raise DocoptArgumentError("Arguments did not match expected patterns")


def docopt(
    doc: str,
    argv: Iterable[str] | None = None,
    help: bool = True,
    version: str | None = None,
    options_first: bool = False,
) -> dict[str, Value]:
    """Like :func:`docopt_parse`, but print and exit on help, version or errors."""
    if argv is None:
        argv = sys.argv[1:]
    try:
        return docopt_parse(doc, argv, help, bool(version), options_first)
    except DocoptExitHelp:
        print(doc)
        sys.exit(0)
    except DocoptExitVersion:
        print(version)
        sys.exit(0)
    except DocoptLanguageError as error:
        print("Docopt usage string could not be parsed", file=sys.stderr)
        print(error, file=sys.stderr)
        sys.exit(-1)
    except DocoptArgumentError as error:
        print(error, end="", file=sys.stderr)
        print()
        print(doc)
        sys.exit(-1)