"""
Tests for WorldEvent emission and handler error isolation in engine/events.py.
"""
import io
import sys
import unittest

from engine.events import EventBus, WorldEvent, EVT_BLOCK_MINED

class TestEventBus(unittest.TestCase):
    def setUp(self):
        self.bus = EventBus()
        self.calls = []

        # Capture stderr so handler failures can be asserted on
        self.saved_stderr = sys.stderr
        self.mock_stderr = io.StringIO()
        sys.stderr = self.mock_stderr

    def tearDown(self):
        sys.stderr = self.saved_stderr

    def _first(self, event):
        self.calls.append("first")

    def _second(self, event):
        self.calls.append("second")

    def _wildcard(self, event):
        self.calls.append("wildcard")

    def _fail(self, event):
        self.calls.append("fail")
        raise ValueError("Vein collapsed")

    def test_emit_reaches_key_then_wildcard(self):
        self.bus.subscribe("*", self._wildcard)
        self.bus.subscribe(EVT_BLOCK_MINED, self._first)

        self.bus.emit(WorldEvent(event_key=EVT_BLOCK_MINED, source="test"))
        self.assertEqual(self.calls, ["first", "wildcard"])

    def test_other_keys_are_not_delivered(self):
        self.bus.subscribe(EVT_BLOCK_MINED, self._first)
        self.bus.emit(WorldEvent(event_key="world.other", source="test"))
        self.assertEqual(self.calls, [])

    def test_failing_handler_does_not_stop_emission(self):
        self.bus.subscribe("test.event", self._first)
        self.bus.subscribe("test.event", self._fail)
        self.bus.subscribe("test.event", self._second)

        self.bus.emit(WorldEvent(event_key="test.event", source="test"))
        self.assertEqual(self.calls, ["first", "fail", "second"])

    def test_handler_error_logged_to_stderr(self):
        self.bus.subscribe("test.error", self._fail)
        self.bus.emit(WorldEvent(event_key="test.error", source="test"))

        self.assertIn("[EventBus] Handler error on 'test.error': Vein collapsed", self.mock_stderr.getvalue())

    def test_unsubscribe(self):
        self.bus.subscribe("test.event", self._first)
        self.bus.subscribe("test.event", self._second)
        self.bus.unsubscribe("test.event", self._first)

        self.bus.emit(WorldEvent(event_key="test.event", source="test"))
        self.assertEqual(self.calls, ["second"])

    def test_event_defaults(self):
        event = WorldEvent(event_key="test.event", source="test")
        self.assertIsNone(event.target)
        self.assertEqual(event.data, {})

if __name__ == '__main__':
    unittest.main()
