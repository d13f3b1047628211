"""
Batch bookkeeping shared by the synchronous and asynchronous adapters.

Both adapters dispatch every entry, join, and only then hand the settled
outcomes to ``settle``, which walks the entries in their original order.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from ..exceptions import ClientError
from ..models import BatchPolicy, BatchRequest, Err, Ok, Result
from .adapter import Exchange, to_raw_response

logger = logging.getLogger("raw_http.http.batch")

Batch = Union[Mapping[Any, BatchRequest], Iterable[BatchRequest]]
Outcome = Union[Exchange, BaseException]


def collect_entries(entries: Batch) -> List[Tuple[Any, BatchRequest]]:
    """
    Pair every entry with its identifier, keeping the caller's order.

    Mapping keys are identifiers; for other iterables the entry's ``id`` is
    used, falling back to its position.

    Raises:
        ValueError: If two entries share an identifier
    """
    if isinstance(entries, Mapping):
        items = list(entries.items())
    else:
        items = [
            (entry.id if entry.id is not None else position, entry)
            for position, entry in enumerate(entries)
        ]

    seen = set()
    for entry_id, _ in items:
        if entry_id in seen:
            raise ValueError(f"Duplicate batch request id: {entry_id!r}")
        seen.add(entry_id)

    return items


def settle(
    items: Sequence[Tuple[Any, BatchRequest]],
    outcomes: Sequence[Outcome],
    policy: BatchPolicy,
) -> Dict[Any, Result]:
    """
    Attach settled outcomes to their entries.

    Args:
        items: (id, entry) pairs from ``collect_entries``
        outcomes: One exchange tuple or exception per entry, same order
        policy: ABORT raises on the first failure, COLLECT records it

    Returns:
        Mapping of entry id to Ok/Err

    Raises:
        ClientError: First failure in entry order under BatchPolicy.ABORT
    """
    results: Dict[Any, Result] = {}

    for (entry_id, entry), outcome in zip(items, outcomes):
        try:
            if isinstance(outcome, ClientError):
                raise outcome
            if isinstance(outcome, BaseException):
                raise ClientError.from_exception(outcome) from outcome
            entry.response = to_raw_response(*outcome)
        except ClientError as e:
            if policy is BatchPolicy.ABORT:
                logger.warning("Batch aborted at entry %r: %s", entry_id, e.message)
                raise
            entry.error = e
            results[entry_id] = Err(e)
        else:
            results[entry_id] = Ok(entry.response)

    return results
