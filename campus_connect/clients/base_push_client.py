from abc import ABC, abstractmethod
from typing import Any, Dict


class BasePushClient(ABC):
    """Abstract base class for external push channels."""

    @abstractmethod
    async def trigger(self, topic: str, event: str, data: Dict[str, Any]) -> Dict[str, Any]:
        """Push one event to the subscribers of `topic`.

        Returns:
            Dict containing the raw response of the push service.
        """

    @abstractmethod
    async def aclose(self) -> None:
        """Release network resources."""
