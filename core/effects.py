"""
Background effects.

Secondary work triggered by a request (notifications, embedding refreshes)
is wrapped in a BackgroundEffect instead of being called inline. Effects run
after the surrounding transaction commits, and a failing effect is logged
and dropped; it never fails or rolls back the request that scheduled it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Tuple

from django.db import transaction

logger = logging.getLogger(__name__)


@dataclass
class BackgroundEffect:
    """A deferred, failure-tolerant call."""

    name: str
    func: Callable[..., Any]
    args: Tuple = ()
    kwargs: Dict[str, Any] = field(default_factory=dict)

    def run(self) -> bool:
        """Execute the effect, returning False when it failed."""
        try:
            self.func(*self.args, **self.kwargs)
        except Exception as e:
            logger.warning(f"Background effect '{self.name}' failed: {e}")
            return False
        return True

    def schedule(self) -> 'BackgroundEffect':
        """Run once the current transaction commits (immediately outside one)."""
        transaction.on_commit(self.run)
        return self


def defer(name: str, func: Callable[..., Any], *args, **kwargs) -> BackgroundEffect:
    """Build and schedule a BackgroundEffect in one call."""
    return BackgroundEffect(name=name, func=func, args=args, kwargs=kwargs).schedule()
