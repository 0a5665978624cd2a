import pytest

from minishell.environment import Environment
from minishell.model import ParseError
from minishell.words import (
    expand_variables,
    is_special_char,
    parse_word,
    remove_quotes,
    skip_quoted,
    skip_spaces,
)


@pytest.fixture
def env():
    return Environment(["USER=bob", "A=1", "B=2"])


@pytest.mark.parametrize("char", [" ", "|", ">", "<"])
def test_special_chars(char):
    assert is_special_char(char) is True


@pytest.mark.parametrize("char", ["a", "'", '"', "$", "-"])
def test_ordinary_chars(char):
    assert is_special_char(char) is False


def test_skip_spaces():
    text = "   ls"
    assert text[skip_spaces(text, 0):] == "ls"
    assert skip_spaces("ls", 0) == 0
    assert skip_spaces("  ", 0) == 2


def test_skip_quoted_finds_closing_quote():
    text = "'a b' c"
    close = skip_quoted(text, 0)
    assert text[close] == "'"
    assert text[: close + 1] == "'a b'"


def test_skip_quoted_raises_when_unclosed():
    with pytest.raises(ParseError):
        skip_quoted('"abc', 0)


def test_expand_simple_variable(env):
    assert expand_variables("$USER", env) == "bob"
    assert expand_variables("hi$USER!", env) == "hibob!"


def test_expand_missing_variable_is_empty(env):
    assert expand_variables("x$NOPE", env) == "x"


def test_expand_inside_double_quotes(env):
    assert expand_variables('"$USER"', env) == '"bob"'


def test_no_expansion_inside_single_quotes(env):
    assert expand_variables("'$USER'", env) == "'$USER'"


def test_expand_exit_status(env):
    env.exit_value = 3
    assert expand_variables("$?", env) == str(env.exit_value)


def test_lone_dollar_is_kept(env):
    assert expand_variables("$", env) == "$"
    assert expand_variables("$-", env) == "$-"


def test_character_after_substitution_is_passed_over(env):
    assert expand_variables("$A$B", env) == "1$B"


def test_remove_quotes():
    assert remove_quotes("'a b'") == "a b"
    assert remove_quotes('"x"y') == "xy"
    assert remove_quotes("plain") == "plain"
    assert remove_quotes("'it\"s'") == 'it"s'


def test_parse_word_returns_word_and_next_position(env):
    text = "  echo hi"
    word, pos = parse_word(text, 0, env)
    assert word == "echo"
    assert text[pos:] == "hi"


def test_parse_word_keeps_quoted_spaces(env):
    word, pos = parse_word("'a b' c", 0, env)
    assert word == "a b"
    assert pos == 6


def test_parse_word_expands_and_unquotes(env):
    word, _ = parse_word('"$USER is" here', 0, env)
    assert word == "bob is"


@pytest.mark.parametrize("operator", [">", ">>", "<", "<<"])
def test_parse_word_reads_redirection_operator(env, operator):
    text = f"{operator} out"
    word, pos = parse_word(text, 0, env)
    assert word == operator
    assert text[pos:] == "out"


def test_parse_word_keeps_trailing_operator(env):
    word, _ = parse_word("hi>out", 0, env)
    assert word == "hi>"


@pytest.mark.parametrize("text", ["", "   ", "| ls"])
def test_parse_word_without_word(env, text):
    word, _ = parse_word(text, 0, env)
    assert word is None


def test_parse_word_unclosed_quote_raises(env):
    with pytest.raises(ParseError):
        parse_word("'unclosed", 0, env)