"""Блокировки коллабораторов vault.

Lock принадлежит коллаборатору (пулу, token ledger, share ledger), а не
vault: все vault, делящие пул или ledger, сериализуются на одном и том же
lock. Только так snapshot()/restore() при откате одной операции не стирает
завершённую работу другого vault.

Внешний код, который пишет в общий in-process коллаборатор мимо vault
(симуляция swap'ов, начисление комиссий), должен держать lock_for(...)
того же объекта.
"""

import threading
import weakref
from contextlib import ExitStack, contextmanager
from typing import Any, Iterator, Optional

from src.core.errors import ReentrantCall


class CollaboratorLock:
    """Невозвратный lock, который знает поток-владелец."""

    def __init__(self):
        self._lock = threading.Lock()
        self._owner: Optional[int] = None

    @property
    def held_by_current_thread(self) -> bool:
        return self._owner == threading.get_ident()

    def acquire(self) -> None:
        self._lock.acquire()
        self._owner = threading.get_ident()

    def release(self) -> None:
        self._owner = None
        self._lock.release()


_REGISTRY_LOCK = threading.Lock()
_LOCKS: "weakref.WeakKeyDictionary[Any, CollaboratorLock]" = weakref.WeakKeyDictionary()


def lock_for(collaborator: Any) -> CollaboratorLock:
    """Единственный CollaboratorLock данного объекта (создаётся при первом запросе)."""
    with _REGISTRY_LOCK:
        lock = _LOCKS.get(collaborator)
        if lock is None:
            lock = CollaboratorLock()
            _LOCKS[collaborator] = lock
        return lock


@contextmanager
def hold_collaborators(*collaborators: Any) -> Iterator[None]:
    """
    Захватить locks всех коллабораторов.

    Порядок захвата фиксирован (по id lock'а), поэтому два vault с
    пересекающимися коллабораторами не взаимоблокируются.

    Raises:
        ReentrantCall: если текущий поток уже держит любой из locks
    """
    unique = {id(lock): lock for lock in (lock_for(c) for c in collaborators)}
    locks = [unique[key] for key in sorted(unique)]

    if any(lock.held_by_current_thread for lock in locks):
        raise ReentrantCall("vault operation re-entered while another is in flight")

    with ExitStack() as stack:
        for lock in locks:
            lock.acquire()
            stack.callback(lock.release)
        yield
