"""
Tests for vaultstage.notifications module.
"""

from vaultstage.notifications import NotificationType, Notifier


class TestNotifier:
    """Tests for Notifier class."""

    def test_history_and_last(self):
        """Test notifications are recorded in order."""
        notifier = Notifier()
        assert notifier.last is None

        notifier.info("one")
        notifier.error("two")

        assert [n.message for n in notifier.history] == ["one", "two"]
        assert notifier.last.type is NotificationType.ERROR

    def test_shorthands(self):
        """Test each shorthand sets its type."""
        notifier = Notifier()
        assert notifier.success("s").type is NotificationType.SUCCESS
        assert notifier.warning("w").type is NotificationType.WARNING
        assert notifier.info("i").type is NotificationType.INFO
        assert notifier.error("e").type is NotificationType.ERROR

    def test_subscribers_receive_notifications(self):
        """Test subscribers are called for every notification."""
        notifier = Notifier()
        received = []
        notifier.subscribe(received.append)

        notifier.warning("careful")

        assert len(received) == 1
        assert received[0].message == "careful"

    def test_of_type_and_clear(self):
        """Test filtering and clearing the history."""
        notifier = Notifier()
        notifier.error("a")
        notifier.success("b")
        notifier.error("c")

        assert [n.message for n in notifier.of_type(NotificationType.ERROR)] == ["a", "c"]

        notifier.clear()
        assert notifier.history == []
