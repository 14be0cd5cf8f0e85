"""In-process async event bus.

Submission code publishes domain events; logging and any later consumers
subscribe without the publisher knowing about them. Handlers registered for
a base class (``Event`` itself, for example) receive every subclass event.
A failing handler is logged and never reaches the publisher.
"""

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from bakeline.core.events.events import Event

EventHandler = Callable[[Event], Awaitable[None]]

logger = structlog.get_logger(__name__)


class EventBus:
    """Publish-subscribe dispatcher keyed by event class.

    Example:
        >>> bus = EventBus()
        >>> async def on_submitted(event: RecordSubmittedEvent):
        ...     print(f"record {event.record_id} stored")
        >>> bus.subscribe(RecordSubmittedEvent, on_submitted)
        >>> await bus.publish_and_wait(RecordSubmittedEvent(...))

    Thread Safety:
        Single event loop only.
    """

    def __init__(self) -> None:
        self._handlers: dict[type[Event], list[EventHandler]] = {}
        self._pending: set[asyncio.Task[Exception | None]] = set()

    def subscribe(self, event_type: type[Event], handler: EventHandler) -> None:
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            "handler_subscribed",
            handler=handler.__name__,
            event_type=event_type.__name__,
        )

    def unsubscribe(self, event_type: type[Event], handler: EventHandler) -> None:
        """Remove a handler; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers and handler in handlers:
            handlers.remove(handler)

    def handlers_for(self, event: Event) -> list[EventHandler]:
        """Handlers for the event's class and its bases, most specific first."""
        matched: list[EventHandler] = []
        for cls in type(event).__mro__:
            matched.extend(self._handlers.get(cls, []))
        return matched

    async def publish(self, event: Event) -> None:
        """Schedule every matching handler and return immediately."""
        for handler in self.handlers_for(event):
            task = asyncio.create_task(self._safe_invoke(handler, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def publish_and_wait(self, event: Event) -> list[Exception]:
        """Run every matching handler to completion.

        Returns:
            Exceptions raised by failed handlers (empty if all succeeded)
        """
        handlers = self.handlers_for(event)
        results = await asyncio.gather(
            *(self._safe_invoke(handler, event) for handler in handlers)
        )
        errors = [r for r in results if r is not None]
        if errors:
            logger.warning(
                "handlers_failed",
                failed=len(errors),
                total=len(handlers),
                event_type=type(event).__name__,
            )
        return errors

    async def _safe_invoke(self, handler: EventHandler, event: Event) -> Exception | None:
        try:
            await handler(event)
        except Exception as e:
            logger.error(
                "event_handler_failed",
                handler=handler.__name__,
                event_type=type(event).__name__,
                error=str(e),
                exc_info=True,
            )
            return e
        return None

    async def shutdown(self) -> None:
        """Wait for scheduled handlers to finish."""
        if self._pending:
            logger.info("draining_event_handlers", count=len(self._pending))
            await asyncio.gather(*self._pending)

    def get_handler_count(self, event_type: type[Event]) -> int:
        return len(self._handlers.get(event_type, []))

    def clear_handlers(self, event_type: type[Event] | None = None) -> None:
        if event_type is None:
            self._handlers.clear()
        else:
            self._handlers.pop(event_type, None)
