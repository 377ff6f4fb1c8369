"""
Unit Tests: Notifier, InFlightGuard
"""

from storefront.application.guards import InFlightGuard


class TestNotifier:

    def test_notifications_expire_after_ttl(self, notifier, clock):
        notifier.notify("Вы вышли")
        clock.now += 2.0
        notifier.error("Недостаточно прав")

        assert [n.message for n in notifier.active()] == ["Вы вышли", "Недостаточно прав"]

        clock.now += 0.5
        assert [n.message for n in notifier.active()] == ["Недостаточно прав"]

        clock.now += 2.5
        assert notifier.active() == []

    def test_expired_items_dropped_on_push(self, notifier, clock):
        for i in range(5):
            notifier.notify(f"Товар {i}")
        clock.now += 3.0

        notifier.notify("Товар удалён")

        assert len(notifier._items) == 1

    def test_error_flag(self, notifier):
        assert notifier.error("x").is_error is True
        assert notifier.notify("y").is_error is False


class TestInFlightGuard:

    def test_single_flag(self):
        guard = InFlightGuard()

        assert guard.try_acquire() is True
        assert guard.try_acquire() is False
        assert guard.is_pending()

        guard.release()
        assert not guard.is_pending()
        assert guard.try_acquire() is True

    def test_keys_are_independent(self):
        guard = InFlightGuard()

        assert guard.try_acquire(1) is True
        assert guard.try_acquire(2) is True
        assert guard.try_acquire(1) is False

        guard.release(1)
        assert not guard.is_pending(1)
        assert guard.is_pending(2)
        assert not guard.is_pending()

