"""Command processor: matches input against registered regex commands and runs handlers.

Each command must provide:
    name         unique string identifier
    description  informational text
    pattern      compiled regex; searched against the input
    handler      handler(match) -> result, where match[0] is the full match
                 and match[1:] are the capture groups (None if unmatched)

Three selection policies are offered: process_all runs every matching
handler, process_first runs only the first, and process_one insists on a
single match and raises AmbiguousCommandError otherwise.
"""

import logging
import re
from collections.abc import Mapping

from flexcmd.commands.result import Command, ProcessResult, NO_MATCH
from flexcmd.errors import ValidationError, DuplicateCommandError, AmbiguousCommandError

logger = logging.getLogger("flexcmd.commands.processor")


def _log_request(message, matched_names):
    """Log a compact one-line entry for a processed message."""
    if not matched_names:
        logger.debug("%r -> none", message)
    else:
        logger.debug("%r -> %s", message, ", ".join(matched_names))


class CommandProcessor:
    """An ordered registry of commands. Registration order decides precedence."""

    def __init__(self, commands=None):
        self._commands = []
        for cmd in commands or ():
            self.add_command(cmd)

    def __len__(self):
        return len(self._commands)

    def __iter__(self):
        return iter(self._commands)

    def __repr__(self):
        return f"CommandProcessor({self.names()!r})"

    def _validate_command(self, cmd):
        if not (cmd.name and cmd.description and cmd.pattern and cmd.handler):
            raise ValidationError("Command must have name, description, pattern and handler.")

        if not isinstance(cmd.pattern, re.Pattern):
            raise ValidationError("Command pattern must be a compiled regular expression.")

        if not callable(cmd.handler):
            raise ValidationError("Command handler must be callable.")

        for c in self._commands:
            if c.name == cmd.name:
                raise DuplicateCommandError(cmd.name)

    def add_command(self, cmd):
        """Validate a command (Command or mapping) and append it. Returns the stored Command."""
        if isinstance(cmd, Mapping):
            cmd = Command.from_mapping(cmd)
        elif not isinstance(cmd, Command):
            raise ValidationError(f"Command must be a Command or a mapping, not {type(cmd).__name__}.")
        try:
            self._validate_command(cmd)
        except ValidationError as e:
            logger.warning("Rejected command %r: %s", cmd.name, e)
            raise
        self._commands.append(cmd)
        logger.debug("Registered command %r (%s)", cmd.name, cmd.pattern.pattern)
        return cmd

    def count_commands(self):
        return len(self._commands)

    def names(self):
        return [c.name for c in self._commands]

    def process_all(self, message):
        """Run every command whose pattern matches message, in order.

        Returns:
            List of handler results, empty when nothing matched.
        """
        results = []
        matched = []
        for c in self._commands:
            m = c.pattern.search(message)
            if m is not None:
                matched.append(c.name)
                results.append(c.handler(m))
        _log_request(message, matched)
        return results

    def process_first(self, message):
        """Run only the first matching command.

        Returns:
            ProcessResult; matched is False and value None when nothing matched.
        """
        for c in self._commands:
            m = c.pattern.search(message)
            if m is not None:
                _log_request(message, [c.name])
                return ProcessResult(True, c.handler(m), c.name)
        _log_request(message, [])
        return NO_MATCH

    def process_one(self, message):
        """Run the single matching command, failing if the input is ambiguous.

        The first match's handler runs as soon as it is found, so by the
        time a second match raises AmbiguousCommandError that handler has
        already executed.

        Returns:
            ProcessResult; matched is False and value None when nothing matched.

        Raises:
            AmbiguousCommandError: two or more commands matched.
        """
        result = NO_MATCH
        for c in self._commands:
            m = c.pattern.search(message)
            if m is None:
                continue
            if not result.matched:
                result = ProcessResult(True, c.handler(m), c.name)
            else:
                logger.warning("Ambiguous command %r: %r or %r", message, result.command, c.name)
                raise AmbiguousCommandError(message, result.command, c.name)
        _log_request(message, [result.command] if result.matched else [])
        return result
