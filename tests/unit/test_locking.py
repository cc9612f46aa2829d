"""
Тесты для locks коллабораторов

Проверяет:
1. Один lock на объект коллаборатора
2. ReentrantCall при повторном захвате из того же потока
3. Дубликаты коллабораторов не блокируют поток сам на себя
4. Ожидание lock'а другим потоком
"""

import threading

import pytest

from src.core.errors import ReentrantCall
from src.vault.locking import CollaboratorLock, hold_collaborators, lock_for


class Collaborator:
    """Произвольный объект-коллаборатор"""


class TestLockFor:
    """Тесты реестра locks"""

    def test_same_object_same_lock(self) -> None:
        pool = Collaborator()
        assert lock_for(pool) is lock_for(pool)
        assert isinstance(lock_for(pool), CollaboratorLock)

    def test_distinct_objects_distinct_locks(self) -> None:
        pool, ledger = Collaborator(), Collaborator()
        assert lock_for(pool) is not lock_for(ledger)


class TestHoldCollaborators:
    """Тесты hold_collaborators()"""

    def test_held_only_inside(self) -> None:
        pool = Collaborator()
        with hold_collaborators(pool):
            assert lock_for(pool).held_by_current_thread
        assert not lock_for(pool).held_by_current_thread

    def test_released_on_error(self) -> None:
        pool = Collaborator()
        with pytest.raises(RuntimeError):
            with hold_collaborators(pool):
                raise RuntimeError("boom")
        assert not lock_for(pool).held_by_current_thread

    def test_reentry_rejected(self) -> None:
        pool, ledger = Collaborator(), Collaborator()
        with hold_collaborators(pool, ledger):
            with pytest.raises(ReentrantCall):
                with hold_collaborators(ledger):
                    pass

    def test_duplicate_collaborator(self) -> None:
        ledger = Collaborator()
        with hold_collaborators(ledger, ledger):
            assert lock_for(ledger).held_by_current_thread

    def test_other_thread_waits(self) -> None:
        pool = Collaborator()
        acquired = threading.Event()

        def worker() -> None:
            with hold_collaborators(pool):
                acquired.set()

        with hold_collaborators(pool):
            thread = threading.Thread(target=worker)
            thread.start()
            assert not acquired.wait(timeout=0.2)

        thread.join()
        assert acquired.is_set()
