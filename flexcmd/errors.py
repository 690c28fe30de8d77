"""Exceptions raised by the command processor and the flex time parser.

Every failure is raised straight to the caller; nothing here retries or
recovers. Input that matches no command is not an error.
"""


class FlexCmdError(Exception):
    """Base class for all flexcmd errors."""


class ValidationError(FlexCmdError, ValueError):
    """A command definition is malformed (missing field, wrong type)."""


class DuplicateCommandError(ValidationError):
    """A command with the same name is already registered."""

    def __init__(self, name):
        self.name = name
        super().__init__(f'Duplicate command name "{name}".')


class AmbiguousCommandError(FlexCmdError):
    """More than one command matched input that expected exactly one."""

    def __init__(self, message, first_name, second_name):
        self.message = message
        self.names = (first_name, second_name)
        super().__init__(
            f'Ambiguous command "{message}" could be "{first_name}" or "{second_name}".')


class InvalidTimeStringError(FlexCmdError, ValueError):
    """A time string does not follow the flex time grammar."""

    def __init__(self, text):
        self.text = text
        super().__init__(f'Invalid time string "{text}".')


class InvalidInitializerError(FlexCmdError, TypeError):
    """A FlexTime was built from a value it cannot be built from."""

    def __init__(self, value, reason=None):
        self.value = value
        msg = f"Illegal flex time initializer {value!r}"
        if reason:
            msg += f" ({reason})"
        super().__init__(msg + ".")
