"""Records for the command system.

A Command pairs a compiled regex with a handler. The processor hands each
matching handler the re.Match, and process_first / process_one wrap the
handler's return value in a ProcessResult.
"""

from dataclasses import dataclass
from typing import Any, Callable, Optional


@dataclass(frozen=True)
class Command:
    name: str = None          # unique within a processor, e.g. "set_timer"
    description: str = None   # informational only
    pattern: Any = None       # compiled re.Pattern, checked on registration
    handler: Callable = None  # handler(match) -> anything

    @classmethod
    def from_mapping(cls, mapping):
        """Build a Command from a dict with name/description/pattern/handler keys."""
        return cls(
            name=mapping.get("name"),
            description=mapping.get("description"),
            pattern=mapping.get("pattern"),
            handler=mapping.get("handler"),
        )


@dataclass(frozen=True)
class ProcessResult:
    matched: bool
    value: Any = None
    command: Optional[str] = None  # name of the command that produced value

    def __bool__(self):
        return self.matched


NO_MATCH = ProcessResult(matched=False)
