"""
In-process registry of live quiz controllers, keyed by handle id
"""
import logging
from collections import OrderedDict
from typing import Callable
from uuid import UUID

from quizmaster.services.quiz_controller import QuizSessionController

logger = logging.getLogger(__name__)


class QuizNotFound(KeyError):
    """No live quiz is registered under the handle"""
    pass


class SessionRegistry:
    """
    Holds one controller per live quiz

    Oldest quizzes are evicted once `max_sessions` is reached.
    """

    def __init__(
        self,
        controller_factory: Callable[[], QuizSessionController] = QuizSessionController,
        max_sessions: int = 10000
    ):
        self.controller_factory = controller_factory
        self.max_sessions = max_sessions
        self._controllers: "OrderedDict[UUID, QuizSessionController]" = OrderedDict()

    def new_controller(self) -> QuizSessionController:
        return self.controller_factory()

    def register(self, controller: QuizSessionController) -> UUID:
        handle_id = controller.handle_id
        self._controllers[handle_id] = controller
        self._controllers.move_to_end(handle_id)

        while len(self._controllers) > self.max_sessions:
            evicted, _ = self._controllers.popitem(last=False)
            logger.info(f"Evicted quiz {evicted}")

        return handle_id

    def get(self, handle_id: UUID) -> QuizSessionController:
        controller = self._controllers.get(handle_id)
        if controller is None:
            raise QuizNotFound(handle_id)
        return controller

    def rebind(self, old_handle: UUID, controller: QuizSessionController) -> UUID:
        """Re-register a controller whose handle changed (authenticated restart)"""
        if controller.handle_id != old_handle:
            self._controllers.pop(old_handle, None)
        return self.register(controller)

    def __len__(self) -> int:
        return len(self._controllers)


# Global instance
session_registry = SessionRegistry()
