import pytest

from usagespec.errors import (
    DocoptArgumentError,
    DocoptExitHelp,
    DocoptExitVersion,
    DocoptLanguageError,
)
from usagespec.parser import (
    Tokens,
    docopt,
    docopt_parse,
    formal_usage,
    parse_argv,
    parse_defaults,
    parse_long,
    parse_pattern,
    parse_section,
    parse_short,
)
from usagespec.patterns import Argument, Option, Required
from usagespec.value import Value

OPTIONS_DOC = """Usage: prog [options]

Options:
  -h --help     Show help.
  -o FILE       Output [default: out.txt].
"""


def test_tokens_from_pattern_splits_delimiters():
    tokens = Tokens.from_pattern("( [-a] <x y>... | cmd )")
    words = []
    while tokens:
        words.append(tokens.pop())
    assert words == ["(", "[", "-a", "]", "<x y>", "...", "|", "cmd", ")"]


def test_tokens_cursor():
    tokens = Tokens(["a", "b", "c"])
    assert tokens.current() == "a"
    assert tokens.pop() == "a"
    assert tokens.the_rest() == "b c"
    tokens.pop()
    tokens.pop()
    assert not tokens
    assert tokens.current() == ""
    assert tokens.the_rest() == ""
    with pytest.raises(IndexError):
        tokens.pop()


def test_tokens_from_pattern_is_not_argv():
    assert Tokens.from_pattern("( a )").parsing_argv is False
    assert Tokens(["a"]).parsing_argv is True


def test_parse_section():
    doc = "Usage: prog\n  prog x\n\nother"
    assert parse_section("usage:", doc) == ["Usage: prog\n  prog x"]
    assert parse_section("options:", doc) == []


def test_formal_usage():
    assert formal_usage("Usage: prog a\n  prog b") == "( a ) | ( b )"


def test_parse_defaults():
    options = parse_defaults(OPTIONS_DOC)
    assert [(o.short, o.long, o.argcount) for o in options] == [
        ("-h", "--help", 0),
        ("-o", "", 1),
    ]
    assert options[1].value == Value("out.txt")


def test_parse_long_known_option_with_value():
    options = [Option("", "--speed", 1)]
    result = parse_long(Tokens(["--speed=10"]), options)
    assert len(result) == 1
    assert result[0].name == "--speed"
    assert result[0].value == Value("10")
    assert len(options) == 1


def test_parse_long_unknown_option_is_added():
    options = []
    result = parse_long(Tokens(["--new"]), options)
    assert [o.long for o in options] == ["--new"]
    assert result[0].value == Value(True)


def test_parse_long_ambiguous_prefix():
    options = [Option("", "--verbose"), Option("", "--version")]
    with pytest.raises(ValueError, match="not a unique prefix"):
        parse_long(Tokens(["--ver"]), options)


def test_parse_short_stacked_and_attached_value():
    options = [Option("-a"), Option("-o", "", 1)]
    result = parse_short(Tokens(["-aoFILE"]), options)
    assert [p.name for p in result] == ["-a", "-o"]
    assert result[0].value == Value(True)
    assert result[1].value == Value("FILE")


def test_parse_short_requires_argument():
    with pytest.raises(ValueError, match="requires an argument"):
        parse_short(Tokens(["-o"]), [Option("-o", "", 1)])


def test_parse_pattern_unexpected_ending():
    with pytest.raises(DocoptLanguageError, match="Unexpected ending"):
        parse_pattern("( a ) )", [])


def test_parse_pattern_returns_required():
    pattern = parse_pattern("( <x> )", [])
    assert isinstance(pattern, Required)
    assert [leaf.name for leaf in pattern.leaves()] == ["<x>"]


def test_parse_argv_double_dash():
    result = parse_argv(Tokens(["--", "-x"]), [], False)
    assert all(isinstance(p, Argument) for p in result)
    assert [p.value for p in result] == [Value("--"), Value("-x")]


def test_options_section_defaults_and_override():
    assert docopt_parse(OPTIONS_DOC, []) == {
        "--help": Value(False),
        "-o": Value("out.txt"),
    }
    assert docopt_parse(OPTIONS_DOC, ["-o", "x.txt"])["-o"] == Value("x.txt")


def test_help_and_version():
    with pytest.raises(DocoptExitHelp):
        docopt_parse(OPTIONS_DOC, ["--help"])
    with pytest.raises(DocoptExitVersion):
        docopt_parse("Usage: prog [--version]", ["--version"])
    result = docopt_parse("Usage: prog [--version]", ["--version"], version=False)
    assert result == {"--version": Value(True)}


def test_commands_arguments_and_long_option():
    doc = "Usage: prog ship <name> [--speed=<kn>]"
    result = docopt_parse(doc, ["ship", "Guardian", "--speed=10"])
    assert result == {
        "--speed": Value("10"),
        "<name>": Value("Guardian"),
        "ship": Value(True),
    }
    assert list(result) == sorted(result)


def test_repeated_arguments_collect():
    result = docopt_parse("Usage: prog <file>...", ["a", "b"])
    assert result == {"<file>": Value(["a", "b"])}


def test_repeated_flags_count():
    result = docopt_parse("Usage: prog -v...", ["-vvv"])
    assert result["-v"] == Value(3)


def test_either():
    assert docopt_parse("Usage: prog (go|stop)", ["stop"]) == {
        "go": Value(False),
        "stop": Value(True),
    }


def test_options_first():
    doc = "Usage: prog [-v] <args>..."
    first = docopt_parse(doc, ["a", "-v"], options_first=True)
    assert first["<args>"] == Value(["a", "-v"])
    assert first["-v"] == Value(False)
    mixed = docopt_parse(doc, ["a", "-v"])
    assert mixed["<args>"] == Value(["a"])
    assert mixed["-v"] == Value(True)


def test_unique_prefix_is_accepted():
    result = docopt_parse("Usage: prog [--verbose]", ["--verb"])
    assert result == {"--verbose": Value(True)}


@pytest.mark.parametrize(
    "doc, message",
    [
        ("prog", "'usage:' (case-insensitive) not found."),
        ("Usage: a\n\nusage: b", "More than one 'usage:' (case-insensitive)."),
        ("Usage: prog [a", "Mismatched '['"),
        ("Usage: prog a ]", "Mismatched '('"),
        ("Usage: prog a )", "Unexpected ending: ')'"),
    ],
)
def test_language_errors(doc, message):
    with pytest.raises(DocoptLanguageError) as info:
        docopt_parse(doc, [])
    assert str(info.value) == message


def test_ambiguous_short_option_in_usage():
    doc = "Usage: prog -a\n\nOptions:\n  -a  A.\n  -a FOO  B.\n"
    with pytest.raises(DocoptLanguageError, match="-a is specified ambiguously 2 times"):
        docopt_parse(doc, [])


@pytest.mark.parametrize(
    "doc, argv, message",
    [
        ("Usage: prog go", ["stop"], "Arguments did not match expected patterns"),
        ("Usage: prog [go]", ["go", "x"], "Unexpected argument: go, x"),
        ("Usage: prog --speed=<kn>", ["--speed"], "--speed requires an argument"),
        ("Usage: prog [--verbose]", ["--verbose=1"], "--verbose must not have an argument"),
        (
            "Usage: prog [--verbose] [--version]",
            ["--ver"],
            "'--ver' is not a unique prefix: --verbose, --version",
        ),
    ],
)
def test_argument_errors(doc, argv, message):
    with pytest.raises(DocoptArgumentError) as info:
        docopt_parse(doc, argv, version=False)
    assert str(info.value) == message


def test_docopt_prints_help_and_exits(capsys):
    with pytest.raises(SystemExit) as info:
        docopt(OPTIONS_DOC, ["-h"])
    assert info.value.code == 0
    assert OPTIONS_DOC in capsys.readouterr().out


def test_docopt_prints_version(capsys):
    with pytest.raises(SystemExit) as info:
        docopt("Usage: prog [--version]", ["--version"], version="1.2")
    assert info.value.code == 0
    assert capsys.readouterr().out == "1.2\n"


def test_docopt_argument_error_exits(capsys):
    with pytest.raises(SystemExit) as info:
        docopt("Usage: prog go", ["stop"])
    assert info.value.code == -1
    captured = capsys.readouterr()
    assert captured.err == "Arguments did not match expected patterns"
    assert "Usage: prog go" in captured.out


def test_docopt_language_error_exits(capsys):
    with pytest.raises(SystemExit) as info:
        docopt("prog", [])
    assert info.value.code == -1
    assert "Docopt usage string could not be parsed" in capsys.readouterr().err


def test_docopt_returns_result():
    assert docopt("Usage: prog <x>", ["v"]) == {"<x>": Value("v")}