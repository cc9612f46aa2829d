"""Reward Harvester — интерфейс обмена наград обратно в пару vault.

Вторичный коллаборатор: сам обмен (swap по маршруту, последующий
add-liquidity) реализует адаптер. Ядро задаёт только протокол и
manager-gated маршрут.

Маршрут — список токенов-хопов:
    [reward_token, ..., token_a | token_b]
"""

import logging
from abc import abstractmethod
from typing import Protocol, Sequence

from src.core.errors import Unauthorized

logger = logging.getLogger(__name__)


class IRewardHarvester(Protocol):
    """Реинвестирование полученных наград в позицию vault."""

    @abstractmethod
    def harvest(self) -> int:
        """
        Обменять накопленные награды и вернуть их в позицию.

        Returns:
            Полученное количество pool shares
        """
        ...


class HarvestRoute:
    """Маршрут обмена reward token в токен пары (только manager меняет)."""

    def __init__(self, manager: str, reward_token: str, token_a: str, token_b: str):
        if not manager:
            raise ValueError("manager must be non-empty")
        if reward_token in (token_a, token_b):
            raise ValueError(f"reward token {reward_token} must not be a pool token")

        self._manager = manager
        self.reward_token = reward_token
        self.token_a = token_a
        self.token_b = token_b
        self._route: tuple[str, ...] = ()

    @property
    def manager(self) -> str:
        return self._manager

    @property
    def route(self) -> tuple[str, ...]:
        return self._route

    @property
    def is_configured(self) -> bool:
        return bool(self._route)

    @property
    def target_token(self) -> str:
        """Токен пары, в который ведёт маршрут."""
        if not self._route:
            raise ValueError("harvest route is not configured")
        return self._route[-1]

    def validate_route(self, route: Sequence[str]) -> tuple[str, ...]:
        """
        Проверить маршрут.

        Raises:
            ValueError: маршрут короче двух хопов, начинается не с reward
                token, заканчивается не токеном пары или содержит
                повторяющиеся подряд хопы
        """
        hops = tuple(route)
        if len(hops) < 2:
            raise ValueError(f"route must have at least 2 hops, got {len(hops)}")
        if hops[0] != self.reward_token:
            raise ValueError(f"route must start at {self.reward_token}, starts at {hops[0]}")
        if hops[-1] not in (self.token_a, self.token_b):
            raise ValueError(
                f"route must end at {self.token_a} or {self.token_b}, ends at {hops[-1]}"
            )
        for prev, nxt in zip(hops, hops[1:]):
            if prev == nxt:
                raise ValueError(f"route repeats hop {prev}")
        return hops

    def set_route(self, route: Sequence[str], *, caller: str) -> None:
        """
        Установить маршрут.

        Raises:
            Unauthorized: если caller не manager
            ValueError: если маршрут невалиден
        """
        if caller != self._manager:
            raise Unauthorized(f"{caller} is not the manager")

        hops = self.validate_route(route)
        self._route = hops
        logger.info(f"Harvest route set by {caller}: {' -> '.join(hops)}")
