"""
Ingestion boundary: validation of raw producer payloads.

Producers may hand the engine either a constructed event model or a raw mapping
(e.g. decoded JSON). Raw mappings are validated here against the closed event
union. Anything that does not validate is rejected with DataValidationError
before it can touch engine state.
"""

import logging
from typing import Any, Iterable, List, Mapping, Tuple

from pydantic import TypeAdapter, ValidationError

from src.core.exceptions import DataValidationError
from src.data.schema import EVENT_TYPES, Event

logger = logging.getLogger(__name__)

_EVENT_ADAPTER: TypeAdapter = TypeAdapter(Event)


def parse_event(raw: Mapping[str, Any]) -> Event:
    """
    Validate a raw mapping into a typed event.

    Args:
        raw: Mapping with a ``category`` tag and the category's payload fields

    Returns:
        LoginEvent, NetworkEvent or FileTransferEvent

    Raises:
        DataValidationError: If the category is unknown or a required field is
            missing or ill-typed
    """
    if not isinstance(raw, Mapping):
        raise DataValidationError(
            f"Event payload must be a mapping, got {type(raw).__name__}"
        )

    try:
        return _EVENT_ADAPTER.validate_python(dict(raw))
    except ValidationError as exc:
        errors = exc.errors(include_url=False)
        fields = ", ".join(".".join(str(p) for p in err["loc"]) or "<root>" for err in errors)
        logger.warning(f"Rejected malformed event {raw.get('id', '<no id>')!r}: {fields}")
        raise DataValidationError(f"Malformed event: {fields}", errors=errors) from exc


def coerce_event(event: Any) -> Event:
    """
    Accept an already-built event model or a raw mapping.

    Raises:
        DataValidationError: If the input is neither a known event model nor a
            mapping that validates as one
    """
    if isinstance(event, EVENT_TYPES):
        return event
    return parse_event(event)


def parse_events(raw_events: Iterable[Mapping[str, Any]]) -> Tuple[List[Event], int]:
    """
    Validate a batch of raw mappings, skipping malformed entries.

    Returns:
        (valid events in input order, number of rejected entries)
    """
    events: List[Event] = []
    rejected = 0

    for raw in raw_events:
        try:
            events.append(parse_event(raw))
        except DataValidationError:
            rejected += 1

    if rejected:
        logger.warning(f"Rejected {rejected} malformed events in batch")

    return events, rejected
