"""Plugin registry — ordered, arity-checked, asynchronous handler chains.

Handlers are registered against an event name and invoked strictly in
registration order.  Each handler receives the current argument tuple and
may return:

    None                  -> arguments unchanged
    value (arity 1)       -> new single argument
    N-sequence (arity N)  -> new argument tuple

Anything else raises :class:`ArityMismatchError` and stops the chain.
Handlers may be plain functions or coroutines; every result is awaited
before the next handler runs, so handlers of one chain never overlap.

The registry is an explicit value: a build constructs one and hands it to
everything that fires or registers events.

"""

from __future__ import annotations

import inspect
import time
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from mews._errors import ArityMismatchError, HandlerSignatureError
from mews.plugin.events import get_spec

if TYPE_CHECKING:
    from mews._types import EventName, Handler
    from mews.observability.collector import BuildCollector


def _describe(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return f"{type(value).__name__} of length {len(value)}"
    return type(value).__name__


def _check_signature(event_name: str, handler: Handler, arity: int) -> None:
    """Raise HandlerSignatureError if *handler* cannot take *arity* positionals."""
    try:
        sig = inspect.signature(handler)
    except (TypeError, ValueError):
        # Builtins and some C callables expose no signature; defer to call time.
        return
    try:
        sig.bind(*([None] * arity))
    except TypeError as exc:
        name = getattr(handler, "__qualname__", repr(handler))
        msg = (
            f"Handler {name} cannot be registered for {event_name!r}: "
            f"it must accept {arity} positional argument{'s' if arity != 1 else ''} ({exc})"
        )
        raise HandlerSignatureError(msg) from exc


class PluginRegistry:
    """Registry of named handler chains.

    Args:
        collector: Optional collector that receives an ``EventProcessed``
            record for every chain that invokes at least one handler.

    """

    __slots__ = ("_collector", "_handlers")

    def __init__(self, collector: BuildCollector | None = None) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._collector = collector

    def add_handler(self, event_name: EventName, handler: Handler) -> None:
        """Append *handler* to the chain for *event_name*.

        Built-in events validate the handler's signature against the
        event's declared arity.

        Raises:
            HandlerSignatureError: If the handler cannot accept the
                built-in event's arguments.
            TypeError: If *handler* is not callable.

        """
        if not callable(handler):
            msg = f"Handler for {event_name!r} must be callable, got {type(handler).__name__}"
            raise TypeError(msg)

        key = str(event_name)
        spec = get_spec(key)
        if spec is not None:
            _check_signature(key, handler, spec.arity)

        self._handlers.setdefault(key, []).append(handler)

    def on(self, event_name: EventName) -> Any:
        """Decorator form of :meth:`add_handler`.

        Usage::

            @registry.on(Event.FILE_AFTER_RENDER)
            def minify(content):
                return content.strip()

        """
        def decorator(handler: Handler) -> Handler:
            self.add_handler(event_name, handler)
            return handler

        return decorator

    def handlers(self, event_name: EventName) -> tuple[Handler, ...]:
        """Return the handlers registered for *event_name*, in order."""
        return tuple(self._handlers.get(str(event_name), ()))

    def has_handlers(self, event_name: EventName) -> bool:
        return bool(self._handlers.get(str(event_name)))

    def clear(self) -> None:
        """Remove every handler."""
        self._handlers.clear()

    async def process_event(self, event_name: EventName, *args: Any) -> Any:
        """Run the handler chain for *event_name* over *args*.

        Returns:
            The final argument, unwrapped, when one argument was given;
            otherwise the final argument list.

        Raises:
            ArityMismatchError: If a handler returns the wrong shape.

        """
        key = str(event_name)
        chain = self.handlers(key)
        arity = len(args)

        if not chain:
            return args[0] if arity == 1 else list(args)

        t0 = time.perf_counter()
        current: list[Any] = list(args)
        for handler in chain:
            result = handler(*current)
            if inspect.isawaitable(result):
                result = await result
            current = self._apply_result(key, current, result)

        if self._collector is not None:
            self._collector.record_event(
                key,
                handlers=len(chain),
                duration_ms=(time.perf_counter() - t0) * 1000,
            )

        return current[0] if arity == 1 else current

    @staticmethod
    def _apply_result(event_name: str, current: list[Any], result: Any) -> list[Any]:
        """Fold one handler result into the running argument tuple."""
        if result is None:
            return current

        arity = len(current)
        if arity == 1:
            return [result]

        if isinstance(result, Sequence) and not isinstance(result, (str, bytes)):
            if len(result) == arity:
                return list(result)

        raise ArityMismatchError(event_name, arity, _describe(result))

    def __len__(self) -> int:
        return sum(len(chain) for chain in self._handlers.values())

    def __repr__(self) -> str:
        events = ", ".join(f"{name}={len(chain)}" for name, chain in self._handlers.items())
        return f"PluginRegistry({events})"
