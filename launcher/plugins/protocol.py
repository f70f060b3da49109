"""Line protocol spoken between the launcher and plugin processes.

Every message is a single-line JSON object. Events travel launcher -> plugin and
are tagged by ``event``; responses travel plugin -> launcher and are tagged by
``kind``. Decoding never raises: anything that is not a recognised message
collapses to ``None``.
"""

import logging
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)


class _Message(BaseModel):
    model_config = ConfigDict(frozen=True)


# ============================================================================
# Responses (plugin -> launcher)
# ============================================================================


class Selection(_Message):
    """One candidate a plugin offers for a query.

    ``id`` is only meaningful within the response that carried it; a later
    ``submit`` refers back to it.
    """

    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None
    content_type: Optional[str] = None


class QueriedResponse(_Message):
    kind: Literal["queried"] = "queried"
    selections: List[Selection] = Field(default_factory=list)


class FillResponse(_Message):
    kind: Literal["fill"] = "fill"
    text: str


class CloseResponse(_Message):
    kind: Literal["close"] = "close"


Response = Annotated[
    Union[QueriedResponse, FillResponse, CloseResponse],
    Field(discriminator="kind"),
]


# ============================================================================
# Events (launcher -> plugin)
# ============================================================================


class QueryEvent(_Message):
    event: Literal["query"] = "query"
    value: str


class CompleteEvent(_Message):
    event: Literal["complete"] = "complete"


class SubmitEvent(_Message):
    event: Literal["submit"] = "submit"
    id: int


class QuitEvent(_Message):
    event: Literal["quit"] = "quit"


Event = Annotated[
    Union[QueryEvent, CompleteEvent, SubmitEvent, QuitEvent],
    Field(discriminator="event"),
]

_response_adapter = TypeAdapter(Response)
_event_adapter = TypeAdapter(Event)


def encode(event: Event) -> str:
    """Serialize an event to one JSON line (without the trailing newline)."""
    return event.model_dump_json()


def decode(line: Optional[str]) -> Optional[Response]:
    """Parse one line received from a plugin.

    Returns:
        The structured response, or None for malformed JSON, a missing or
        unknown ``kind``, or a payload that does not fit its kind
    """
    if not line or not line.strip():
        return None

    try:
        return _response_adapter.validate_json(line)
    except ValidationError as e:
        logger.debug(f"Discarding unrecognised plugin response {line!r}: {e.error_count()} error(s)")
        return None


def encode_response(response: Response) -> str:
    """Serialize a response to one JSON line; used by plugin implementations."""
    return response.model_dump_json(exclude_none=True)


def decode_event(line: Optional[str]) -> Optional[Event]:
    """Parse one event line on the plugin side. Unrecognised input yields None."""
    if not line or not line.strip():
        return None

    try:
        return _event_adapter.validate_json(line)
    except ValidationError:
        logger.debug(f"Ignoring unrecognised launcher event {line!r}")
        return None
