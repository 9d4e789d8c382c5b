from collections import Counter, defaultdict
from typing import Callable, List, Tuple, Any


class EventManager:
    """
    Hook registry connecting the tick loop, the detection strategy, the
    recorder and the display.

    Callbacks registered for an event run in priority order whenever the
    event is triggered.
    """

    def __init__(self):
        self.hooks: dict[str, List[Tuple[int, Callable]]] = defaultdict(list)
        # Callbacks that raised, per event
        self.failures: Counter = Counter()

    def register_hook(self, event_name: str, callback: Callable, priority: int = 0) -> None:
        """
        Register a callback for an event.

        Args:
            event_name: Event to listen for ('tick', 'steps_detected', ...)
            callback: Function to call when the event is triggered
            priority: Execution priority (higher numbers run first)
        """
        self.hooks[event_name].append((priority, callback))
        self.hooks[event_name].sort(key=lambda x: x[0], reverse=True)

    def unregister_hook(self, event_name: str, callback: Callable) -> bool:
        """
        Remove a callback from an event.

        Returns:
            True if callback was found and removed, False otherwise
        """
        if event_name not in self.hooks:
            return False

        for i, (priority, cb) in enumerate(self.hooks[event_name]):
            if cb == callback:
                self.hooks[event_name].pop(i)
                return True
        return False

    def trigger_event(self, event_name: str, *args, **kwargs) -> List[Any]:
        """
        Run every callback registered for an event.

        A failing callback is reported and skipped so the tick loop keeps going.

        Returns:
            List of return values (None for callbacks that raised)
        """
        results = []

        for priority, callback in self.hooks[event_name]:
            try:
                results.append(callback(*args, **kwargs))
            except Exception as e:
                print(f"Error in event callback for '{event_name}': {e}")
                self.failures[event_name] += 1
                results.append(None)

        return results

    def has_listeners(self, event_name: str) -> bool:
        return len(self.hooks[event_name]) > 0

    def clear_all(self) -> None:
        """Remove all registered callbacks for all events."""
        self.hooks.clear()

    def trigger_event_chain(self, event_name: str, initial_context: dict, *args, **kwargs) -> dict:
        """
        Run callbacks in sequence, passing an accumulated context along.

        Each callback receives the context and may return a dict that is merged
        into it, e.g. the next free line for status text on the display.

        Args:
            event_name: Event to trigger
            initial_context: Context handed to the first callback
            *args: Additional positional arguments for callbacks
            **kwargs: Additional keyword arguments for callbacks

        Returns:
            Context after all callbacks have run
        """
        context = initial_context.copy()

        for priority, callback in self.hooks[event_name]:
            try:
                result = callback(context, *args, **kwargs)
                if isinstance(result, dict):
                    context.update(result)
            except Exception as e:
                print(f"Error in event callback for '{event_name}': {e}")
                self.failures[event_name] += 1

        return context

    def failure_count(self, event_name: str) -> int:
        """Number of callbacks that raised while handling an event."""
        return self.failures[event_name]
