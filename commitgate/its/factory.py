from __future__ import annotations

from typing import Callable, Optional

from commitgate.its.client import ItsFacade, RestItsClient


FacadeBuilder = Callable[[str], ItsFacade]


class ItsFacadeFactory:
    """
    Hands out a tracker facade per validation call.
    Facades are never cached on the factory, so concurrent calls do not share one.
    """

    def __init__(self, builder: Optional[FacadeBuilder] = None):
        self._builder = builder

    def get_facade(self, repository: str) -> ItsFacade:
        if self._builder is not None:
            return self._builder(repository)
        return RestItsClient()
