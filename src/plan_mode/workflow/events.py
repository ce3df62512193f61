"""Messages and decisions returned to the host by the mode coordinator."""

from dataclasses import dataclass


@dataclass
class InjectedMessage:
    """A note added to the conversation before an automated turn.

    Attributes:
        custom_type: Host-level message type used to recognise the note
        content: Text shown to the model
        display: Whether the host should show the note to the user
    """

    custom_type: str
    content: str
    display: bool = False


@dataclass
class ToolCallDecision:
    """Outcome of the tool-call gate."""

    block: bool = False
    reason: str | None = None

