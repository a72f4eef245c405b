"""Handler Registry — explicit routing from action name to handler descriptor.

Invariants:
    - Every action->handler mapping is visible — no getattr magic, no auto-discovery
    - Descriptors are built at registration (startup), never during dispatch
    - Registering the same action twice is an error
    - Unknown actions return None from get(); the dispatcher turns that into a 404 envelope
"""

import logging
from collections.abc import Callable, Iterator
from typing import Any

from api_dispatch.core.handler_descriptor import ArgumentSpec, HandlerDescriptor

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Routes action -> HandlerDescriptor. Explicit registration only."""

    def __init__(self):
        self._handlers: dict[str, HandlerDescriptor] = {}
        self._whitelist: set[str] = set()

    def register(
        self,
        action: str,
        func: Callable[..., Any],
        arguments: list[ArgumentSpec] | None = None,
        whitelist: bool = False,
    ) -> HandlerDescriptor:
        """Register func under action. arguments overrides signature introspection."""
        if action in self._handlers:
            raise ValueError(f"Action '{action}' is already registered.")
        if arguments is None:
            descriptor = HandlerDescriptor.from_callable(action, func)
        else:
            descriptor = HandlerDescriptor(action, func, tuple(arguments))
        self._handlers[action] = descriptor
        if whitelist:
            self._whitelist.add(action)
        logger.debug(
            f"Registered action '{action}'",
            extra={"action": action},
        )
        return descriptor

    def action(
        self, name: str | None = None, whitelist: bool = False,
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of register(); defaults to the function name."""
        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(name or func.__name__, func, whitelist=whitelist)
            return func
        return decorator

    def get(self, action: str) -> HandlerDescriptor | None:
        return self._handlers.get(action)

    @property
    def whitelist(self) -> frozenset[str]:
        return frozenset(self._whitelist)

    def __contains__(self, action: str) -> bool:
        return action in self._handlers

    def __iter__(self) -> Iterator[str]:
        return iter(self._handlers)

    def __len__(self) -> int:
        return len(self._handlers)
