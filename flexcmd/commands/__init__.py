from flexcmd.commands.result import Command, ProcessResult, NO_MATCH
from flexcmd.commands.processor import CommandProcessor

__all__ = [
    "Command", "ProcessResult", "NO_MATCH", "CommandProcessor",
]
