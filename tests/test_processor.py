"""Tests for command registration and the three dispatch policies."""

import re

import pytest

from flexcmd.commands import Command, CommandProcessor, ProcessResult
from flexcmd.errors import ValidationError, DuplicateCommandError, AmbiguousCommandError


SPECIFIC = Command("Command 1", "Specific command", re.compile(r"^This is\s(.*)\.$"), lambda m: m[1])
CATCH_ALL = Command("Command 2", "Catch all command", re.compile(r"^.*test.*$"), lambda m: m[0])
GOOD_COMMANDS = [SPECIFIC, CATCH_ALL]

_MISSING = "Command must have name, description, pattern and handler."

BAD_COMMANDS = {
    "missing name": (
        {"description": "Description", "pattern": re.compile(r"^.*$"), "handler": lambda m: m},
        _MISSING),
    "missing description": (
        {"name": "Command", "pattern": re.compile(r"^.*$"), "handler": lambda m: m},
        _MISSING),
    "missing pattern": (
        {"name": "Command", "description": "Description", "handler": lambda m: m},
        _MISSING),
    "missing handler": (
        {"name": "Command", "description": "Description", "pattern": re.compile(r"^.*$")},
        _MISSING),
    "empty name": (
        Command("", "Description", re.compile(r"^.*$"), lambda m: m),
        _MISSING),
    "non-regex pattern": (
        {"name": "Command", "description": "Description", "pattern": "^.*$", "handler": lambda m: m},
        "Command pattern must be a compiled regular expression."),
    "non-callable handler": (
        {"name": "Command", "description": "Description", "pattern": re.compile(r"^.*$"),
         "handler": "lambda m: m"},
        "Command handler must be callable."),
}


@pytest.fixture
def processor():
    return CommandProcessor(GOOD_COMMANDS)


def _recording_command(name, pattern, calls):
    """A command whose handler appends its name to calls and returns it."""
    def handler(m):
        calls.append(name)
        return name
    return Command(name, f"records {name}", re.compile(pattern), handler)


# --- Construction and registration ---

@pytest.mark.parametrize("cmds", [None, [], [SPECIFIC], GOOD_COMMANDS],
                         ids=["none", "empty", "one", "two"])
def test_construct_with_valid_commands(cmds):
    p = CommandProcessor(cmds)
    assert p.count_commands() == len(cmds or [])
    assert len(p) == p.count_commands()


def test_construct_with_duplicate_names():
    with pytest.raises(DuplicateCommandError, match='Duplicate command name "Command 1".'):
        CommandProcessor([SPECIFIC, SPECIFIC])


@pytest.mark.parametrize("case", list(BAD_COMMANDS), ids=list(BAD_COMMANDS))
def test_construct_with_invalid_command(case):
    cmd, error = BAD_COMMANDS[case]
    with pytest.raises(ValidationError, match=re.escape(error)):
        CommandProcessor([cmd])


def test_add_command_counts():
    p = CommandProcessor()
    assert p.count_commands() == 0
    p.add_command(SPECIFIC)
    assert p.count_commands() == 1
    p.add_command(CATCH_ALL)
    assert p.count_commands() == 2
    assert p.names() == ["Command 1", "Command 2"]
    assert list(p) == GOOD_COMMANDS


def test_add_command_accepts_mapping():
    p = CommandProcessor()
    stored = p.add_command({
        "name": "echo", "description": "Echo", "pattern": re.compile(r"echo (\w+)"),
        "handler": lambda m: m[1],
    })
    assert isinstance(stored, Command)
    assert p.process_first("please echo hello").value == "hello"


def test_add_duplicate_leaves_count_unchanged():
    p = CommandProcessor()
    p.add_command(SPECIFIC)
    with pytest.raises(DuplicateCommandError) as exc_info:
        p.add_command(SPECIFIC)
    assert exc_info.value.name == "Command 1"
    assert isinstance(exc_info.value, ValidationError)
    assert p.count_commands() == 1


def test_duplicate_names_are_case_sensitive():
    p = CommandProcessor([SPECIFIC])
    p.add_command(Command("command 1", "lower case", re.compile("x"), lambda m: m))
    assert p.count_commands() == 2


@pytest.mark.parametrize("case", list(BAD_COMMANDS), ids=list(BAD_COMMANDS))
def test_add_invalid_command(case):
    cmd, error = BAD_COMMANDS[case]
    p = CommandProcessor()
    with pytest.raises(ValidationError, match=re.escape(error)):
        p.add_command(cmd)
    assert p.count_commands() == 0


def test_add_non_command_object():
    with pytest.raises(ValidationError):
        CommandProcessor().add_command("not a command")


# --- process_all ---

def test_process_all_only_matching(processor):
    assert processor.process_all("A test, this is.") == ["A test, this is."]


def test_process_all_every_match_in_order(processor):
    assert processor.process_all("This is a test.") == ["a test", "This is a test."]


def test_process_all_no_match(processor):
    assert processor.process_all("An example") == []


def test_handler_sees_unmatched_optional_group_as_none():
    p = CommandProcessor([
        Command("opt", "optional group", re.compile(r"^go( now)?(!)?$"), lambda m: (m[0], m[1], m[2])),
    ])
    assert p.process_all("go!") == [("go!", None, "!")]


def test_patterns_are_searched_not_anchored():
    p = CommandProcessor([
        Command("timer", "timer", re.compile(r"timer for (\d+)"), lambda m: int(m[1])),
    ])
    assert p.process_all("set a timer for 5 minutes") == [5]


# --- process_first ---

def test_process_first_only_first_match(processor):
    result = processor.process_first("A test, this is.")
    assert result == ProcessResult(True, "A test, this is.", "Command 2")

    result = processor.process_first("This is a test.")
    assert result.matched
    assert result.value == "a test"
    assert result.command == "Command 1"


def test_process_first_no_match(processor):
    result = processor.process_first("An example")
    assert result.matched is False
    assert result.value is None
    assert not result


def test_process_first_never_runs_second_handler():
    calls = []
    p = CommandProcessor([
        _recording_command("a", r"test", calls),
        _recording_command("b", r"test", calls),
    ])
    assert p.process_first("a test").value == "a"
    assert calls == ["a"]


# --- process_one ---

def test_process_one_exactly_one(processor):
    result = processor.process_one("A test, this is.")
    assert result.matched
    assert result.value == "A test, this is."


def test_process_one_ambiguous(processor):
    with pytest.raises(AmbiguousCommandError,
                       match=re.escape('Ambiguous command "This is a test." '
                                       'could be "Command 1" or "Command 2".')) as exc_info:
        processor.process_one("This is a test.")
    assert exc_info.value.message == "This is a test."
    assert exc_info.value.names == ("Command 1", "Command 2")


def test_process_one_no_match(processor):
    result = processor.process_one("An example")
    assert result.matched is False
    assert result.value is None


def test_process_one_runs_first_handler_before_detecting_ambiguity():
    calls = []
    p = CommandProcessor([
        _recording_command("skip", r"nope", calls),
        _recording_command("first", r"test", calls),
        _recording_command("second", r"test", calls),
        _recording_command("third", r"test", calls),
    ])
    with pytest.raises(AmbiguousCommandError) as exc_info:
        p.process_one("a test")
    assert calls == ["first"]
    assert exc_info.value.names == ("first", "second")


def test_processing_does_not_mutate_registry(processor):
    before = list(processor)
    processor.process_all("This is a test.")
    processor.process_first("This is a test.")
    assert list(processor) == before
