from abc import ABC, abstractmethod
from typing import Any, Optional
from counter.event_manager import EventManager


class BaseDetectionStrategy(ABC):
    """
    Base class for anything that turns an input source into step counts.

    Subclasses hook themselves into the tick loop in register_hooks() and
    publish the outcome of every tick through update_results().
    """

    def __init__(self, event_manager: EventManager):
        """
        Args:
            event_manager: Hub the strategy registers its hooks on
        """
        self.event_manager = event_manager
        self.current_results: Optional[Any] = None
        self.last_update_time: Optional[float] = None
        self.results_published = 0
        self.is_active = False
        self.register_hooks()

    @abstractmethod
    def register_hooks(self) -> None:
        """
        Hook into the tick loop, typically:
        - 'setup': acquire the input source
        - 'tick': process input gathered since the previous tick
        - 'cleanup': release the input source
        """

    def get_current_results(self) -> Optional[Any]:
        return self.current_results

    def update_results(self, results: Any, timestamp: Optional[float] = None) -> None:
        """Keep the latest tick outcome for the display and status queries."""
        self.current_results = results
        self.last_update_time = timestamp
        self.results_published += 1

    def activate(self) -> None:
        self.is_active = True

    def deactivate(self) -> None:
        """Stop processing ticks and forget the last outcome."""
        self.is_active = False
        self.current_results = None

    def is_strategy_active(self) -> bool:
        return self.is_active

    def get_strategy_name(self) -> str:
        return self.__class__.__name__

    def get_strategy_info(self) -> dict:
        return {
            'name': self.get_strategy_name(),
            'active': self.is_active,
            'ticks_processed': self.results_published,
            'last_update_time': self.last_update_time
        }
