import logging
from typing import Any

from domain.constants import INCREMENT_REACTION_FN, REACTIONS
from domain.models import SessionRecord
from services.backend import Backend, BackendError

logger = logging.getLogger(__name__)


def _server_count(result: Any) -> Any:
    """The increment function may return a bare count or a one-row result."""
    if isinstance(result, list):
        result = result[0] if result else None
    if isinstance(result, dict):
        result = next(iter(result.values()), None)
    if isinstance(result, bool) or result is None:
        return None
    try:
        return int(result)
    except (TypeError, ValueError):
        return None


def react(record: SessionRecord, kind: str, backend: Backend) -> int:
    """Add one reaction of `kind` to `record` optimistically and reconcile with the server.

    The local count is bumped first. If the call fails the previous value is restored
    and the BackendError is re-raised; if the server answers with a different count
    that count wins. Returns the final local count.
    """
    if kind not in REACTIONS:
        raise ValueError(f"Unknown reaction kind: {kind}")
    had_key = kind in record.reactions
    previous = record.reactions.get(kind, 0)
    record.reactions[kind] = previous + 1
    try:
        result = backend.rpc(INCREMENT_REACTION_FN, {'log_id': record.id, 'reaction_type': kind})
    except BackendError:
        if had_key:
            record.reactions[kind] = previous
        else:
            del record.reactions[kind]
        logger.warning("Reaction %s on %s rolled back", kind, record.id)
        raise
    authoritative = _server_count(result)
    if authoritative is not None and authoritative >= 0 and authoritative != record.reactions[kind]:
        logger.debug("Reconciled %s on %s: %s -> %s", kind, record.id,
                     record.reactions[kind], authoritative)
        record.reactions[kind] = authoritative
    return record.reactions[kind]
