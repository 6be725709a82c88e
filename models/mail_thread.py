from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Mapping, Optional, Set


@dataclass(slots=True, frozen=True)
class ThreadMessage:
    """A single Gmail message as seen inside a thread."""

    id: str
    thread_id: str
    headers: Mapping[str, str] = field(default_factory=dict)
    label_ids: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        # Header names are case-insensitive; the first occurrence of a name wins.
        normalized: dict[str, str] = {}
        for name, value in self.headers.items():
            normalized.setdefault(name.lower(), value)
        object.__setattr__(self, "headers", normalized)

    def header(self, name: str) -> Optional[str]:
        return self.headers.get(name.lower())


@dataclass(slots=True)
class MailThread:
    """A conversation thread with its messages in chronological order."""

    id: str
    messages: List[ThreadMessage]
    label_ids: Set[str] = field(default_factory=set)

    @property
    def last_message(self) -> ThreadMessage:
        return self.messages[-1]


@dataclass(slots=True, frozen=True)
class ThreadSummary:
    id: str
    snippet: str = ""


@dataclass(slots=True, frozen=True)
class Label:
    id: str
    name: str
