# usagespec

Describe your program's command line the way you would write it in a help
message, and let `usagespec` turn the actual arguments into a dictionary.

The usage text is the specification. A `Usage:` section lists the accepted
forms. An optional `Options:` section describes options, their arguments and
their defaults.

## Installation

```
pip install usagespec
```

## Example

```python
from usagespec.parser import docopt_parse

USAGE = """Naval Fate.

Usage:
  naval_fate ship new <name>...
  naval_fate ship <name> move <x> <y> [--speed=<kn>]
  naval_fate -h | --help
  naval_fate --version

Options:
  -h --help     Show this screen.
  --version     Show version.
  --speed=<kn>  Speed in knots [default: 10].
"""

args = docopt_parse(USAGE, ["ship", "Guardian", "move", "10", "50"])
print(args["<name>"])          # ["Guardian"]
print(args["--speed"])         # "10"
print(args["move"].as_bool())  # True
```

The result is a dictionary sorted by name. It has an entry for every option,
argument and command in the usage pattern.

## Values

Every value in the result is a `usagespec.value.Value`. It holds one of the
following: nothing, a boolean, an integer, a string, or a list of strings. The
`kind` property gives a `usagespec.value.Kind`.

- To see what a value holds, use `is_bool()`, `is_long()`, `is_string()` and `is_string_list()`.
- To read it, use `as_bool()`, `as_long()`, `as_string()` and `as_string_list()`.
- A read of the wrong kind raises `TypeError`.
- `as_long()` also converts a string that holds a whole number. It raises `ValueError` for any other string.
- An empty value is false in a boolean context.
- `str(value)` gives one of `true`, `false`, the number, a quoted string, a bracketed list of quoted strings, or `null`.

What a value holds depends on how the usage text is written:

- An option without an argument gives `True` or `False`. Its default is `False`.
- An option with an argument gives its string, or its `[default: ...]`, or nothing.
- A positional argument gives its string, or nothing.
- A command gives `True` or `False`.
- An element that may appear more than once gives a different value:
  - an argument, or an option that takes an argument, gives a list of strings;
  - a command, or an option without an argument, gives a count.

## Usage patterns

- `<arg>` or `ARG`: a positional argument
- `word`: a command, which must appear literally
- `-o`, `--option`, `--option=<value>`: options
- `[ ... ]`: optional elements
- `( ... )`: required groups
- `a | b`: alternatives. The one that consumes the most arguments wins.
- `...`: one or more repetitions
- `[options]`: any option from the `Options:` section that is not named elsewhere in the pattern
- `--` in the arguments: everything after it is taken as positional arguments

Long options given on the command line may be shortened to any unique prefix.
Short options may be stacked, as in `-abc`. A short option's argument may be
attached, as in `-ofile`, or given as the next word.

## Two entry points

Both live in `usagespec.parser`.

### docopt_parse

`docopt_parse(doc, argv, help=True, version=True, options_first=False)`
raises exceptions from `usagespec.errors`:

- `DocoptLanguageError`: the usage text itself is malformed. Examples are a missing or repeated `usage:` section, or unbalanced brackets.
- `DocoptArgumentError`: the arguments do not match the usage. Examples are an unknown option prefix that is ambiguous, a missing option argument, or leftover arguments.
- `DocoptExitHelp`: `-h` or `--help` was given and `help` is true.
- `DocoptExitVersion`: `--version` was given and `version` is true.

### docopt

`docopt(doc, argv=None, help=True, version=None, options_first=False)`
reads `sys.argv[1:]` when `argv` is `None`. It handles the exceptions above
for you:

- On help, it prints the usage text and exits with status 0.
- When `version` is a non-empty string and `--version` is given, it prints `version` and exits with status 0.
- On a language error, it prints the error to standard error and exits with a failure status.
- On an argument error, it prints the error to standard error and the usage text to standard output, then exits with a failure status.

### options_first

With `options_first=True`, the first positional argument ends option parsing.
Everything after it is passed through as arguments. This is useful for
programs that dispatch to subcommands.

## Lower-level pieces

`usagespec.parser` also exposes the steps that `docopt_parse` is built from:

- `parse_section`, `parse_defaults` and `formal_usage` read the text.
- `parse_pattern` builds the pattern tree.
- `parse_argv` turns words into options and arguments.
- `Tokens` is the cursor the parsers consume.

The tree itself is made of the classes in `usagespec.patterns`: `Required`,
`Optional`, `OptionsShortcut`, `OneOrMore`, `Either`, `Argument`, `Command`
and `Option`. Each has a `match(left, collected)` method that returns
`(matched, left, collected)`.

## What it does not do

`usagespec` is a library only. It installs no command of its own, and it
does not generate usage text. You write the text, and the package reads it.

## Running the tests

```
pip install usagespec[test]
pytest
```