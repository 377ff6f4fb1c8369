from typing import Hashable


class InFlightGuard:
    """Флаги «операция в процессе» по ключу сущности.

    Повторный запуск для того же ключа, пока первый не завершился, отклоняется;
    операции над разными ключами не мешают друг другу. Для одиночного флага
    ключ не передаётся.
    """

    _SINGLE = object()

    def __init__(self):
        self._pending: set = set()

    def try_acquire(self, key: Hashable = _SINGLE) -> bool:
        if key in self._pending:
            return False
        self._pending.add(key)
        return True

    def release(self, key: Hashable = _SINGLE) -> None:
        self._pending.discard(key)

    def is_pending(self, key: Hashable = _SINGLE) -> bool:
        return key in self._pending
