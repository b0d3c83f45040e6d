import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Union

logger = logging.getLogger(__name__)

Payload = Dict[str, Any]


@dataclass(frozen=True)
class Remote:
    payload: Payload = field(default_factory=dict)
    source = "remote"


@dataclass(frozen=True)
class Local:
    payload: Payload = field(default_factory=dict)
    source = "local"


Result = Union[Remote, Local]


def execute(remote_op: Callable[[], Payload], local_op: Callable[[], Payload]) -> Result:
    """Run ``remote_op``; if it raises anything, run ``local_op`` instead.

    Errors raised by ``local_op`` reach the caller untouched.
    """
    try:
        payload = remote_op()
    except Exception as exc:
        logger.info("Remote operation failed (%s); using local store", exc)
        return Local(local_op() or {})
    return Remote(payload or {})
