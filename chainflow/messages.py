"""Conversation data model threaded between pipeline steps.

Everything here is immutable. A step receives a ``ConversationState``,
returns a ``Generation`` and the pipeline builds the next state from that
generation's messages only.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union


class Role(str, Enum):
    """Closed set of message roles."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class FilePart:
    """Reference to a file the model should look at."""

    uri: str
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class DataPart:
    """Opaque inline payload."""

    data: bytes
    mime_type: Optional[str] = None


Part = Union[TextPart, FilePart, DataPart]


@dataclass(frozen=True)
class Message:
    """A role-tagged unit of content."""

    role: Role
    parts: Tuple[Part, ...] = ()

    @property
    def text(self) -> str:
        """Concatenated text of the text parts, other parts ignored."""
        return "".join(p.text for p in self.parts if isinstance(p, TextPart))


def user_message(text: str) -> Message:
    return Message(Role.USER, (TextPart(text),))


def system_message(text: str) -> Message:
    return Message(Role.SYSTEM, (TextPart(text),))


def assistant_message(text: str) -> Message:
    return Message(Role.ASSISTANT, (TextPart(text),))


@dataclass(frozen=True)
class ConversationState:
    """Ordered, immutable message history handed to a step."""

    messages: Tuple[Message, ...] = ()

    @classmethod
    def from_text(cls, text: str) -> "ConversationState":
        """Single user message state."""
        return cls((user_message(text),))

    @classmethod
    def from_messages(cls, messages: Iterable[Message]) -> "ConversationState":
        return cls(tuple(messages))

    @property
    def is_empty(self) -> bool:
        return not self.messages

    @property
    def has_content(self) -> bool:
        """True if some message carries non-blank text or a file/data part."""
        return any(
            m.text.strip() or any(not isinstance(p, TextPart) for p in m.parts)
            for m in self.messages
        )

    def __len__(self) -> int:
        return len(self.messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def __str__(self) -> str:
        return "\n".join(m.text for m in self.messages)


@dataclass(frozen=True)
class Generation:
    """Output of one step: resulting messages plus provider metadata."""

    messages: Tuple[Message, ...] = ()
    model: Optional[str] = None
    usage: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def text(self) -> str:
        """Text of the newest assistant message, or empty string."""
        for message in reversed(self.messages):
            if message.role == Role.ASSISTANT:
                return message.text
        return ""

    def to_state(self) -> ConversationState:
        """Input for the next step, built from this generation alone."""
        return ConversationState(self.messages)
