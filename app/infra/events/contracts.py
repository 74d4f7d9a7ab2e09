from __future__ import annotations
from typing import Protocol


class MessagePublisher(Protocol):
    async def publish_message(self, routing_key: str, message: dict) -> None:
        """
        Contrat minimal pour tout publisher d'événements.
        Ne doit pas lever: un échec de publication est loggé, pas propagé.
        """
        ...
