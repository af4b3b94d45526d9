"""Tests for the interactive command line."""

import io
import unittest
from contextlib import redirect_stdout
from unittest.mock import MagicMock, patch
from datetime import datetime
import sys
from pathlib import Path

# Add src to path so we can import bustrack
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bustrack import cli
from bustrack.bus_tracker import BusTracker
from bustrack.config import STATION_ROUTES, Settings
from bustrack.models import NO_LIVE_DATA, EnrichedDeparture


def answers(*values):
    """Build an input function that returns the given answers in order."""
    return MagicMock(side_effect=list(values))


class TestPrompts(unittest.TestCase):
    """Test the prompt loops."""

    def test_ask_date_reprompts_until_valid(self):
        output = io.StringIO()
        with redirect_stdout(output):
            result = cli.ask_date(answers("2024/01/08", "2024-02-30", "tomorrow", "2024-01-08"))

        self.assertEqual(result, "2024-01-08")
        self.assertEqual(output.getvalue().count(cli.INVALID_DATE_MESSAGE), 3)

    def test_ask_time_reprompts_until_valid(self):
        output = io.StringIO()
        with redirect_stdout(output):
            result = cli.ask_time(answers("24:00", "8:00", "08:60", "23:59"))

        self.assertEqual(result, "23:59")
        self.assertEqual(output.getvalue().count(cli.INVALID_TIME_MESSAGE), 3)

    def test_ask_routes_all(self):
        with redirect_stdout(io.StringIO()):
            self.assertEqual(cli.ask_routes(STATION_ROUTES, answers("1")), STATION_ROUTES)

    def test_ask_routes_single(self):
        with redirect_stdout(io.StringIO()):
            self.assertEqual(cli.ask_routes(STATION_ROUTES, answers("2")), ["66"])
            self.assertEqual(cli.ask_routes(STATION_ROUTES, answers("7")), ["P332"])
            self.assertEqual(cli.ask_routes(STATION_ROUTES, answers("9")), ["28"])

    def test_ask_routes_rejects_out_of_range(self):
        output = io.StringIO()
        with redirect_stdout(output):
            result = cli.ask_routes(STATION_ROUTES, answers("0", "10", "abc", "-1", "3"))

        self.assertEqual(result, ["192"])
        self.assertEqual(output.getvalue().count(cli.INVALID_ROUTE_MESSAGE), 4)
        self.assertIn("1 - Show All Routes", output.getvalue())
        self.assertIn("7 - P332", output.getvalue())

    def test_ask_routes_rejects_unicode_digits(self):
        output = io.StringIO()
        with redirect_stdout(output):
            result = cli.ask_routes(STATION_ROUTES, answers("²", "٣", "2"))

        self.assertEqual(result, ["66"])
        self.assertEqual(output.getvalue().count(cli.INVALID_ROUTE_MESSAGE), 2)

    def test_ask_search_again(self):
        output = io.StringIO()
        with redirect_stdout(output):
            self.assertTrue(cli.ask_search_again(answers("YES")))
            self.assertFalse(cli.ask_search_again(answers("maybe", "n")))

        self.assertEqual(output.getvalue().count(cli.INVALID_SEARCH_MESSAGE), 1)

    def test_many_invalid_answers_do_not_recurse(self):
        bad = ["nope"] * (sys.getrecursionlimit() + 10)
        with redirect_stdout(io.StringIO()):
            self.assertEqual(cli.ask_time(answers(*bad, "08:00")), "08:00")


class TestRendering(unittest.TestCase):
    def test_render_table(self):
        departure = EnrichedDeparture(
            route_short_name="66",
            route_long_name="UQ Lakes - RBWH",
            service_id="S1",
            trip_id="T1",
            heading_sign="RBWH",
            scheduled_arrival_time="08:05:00",
            live_arrival_time="08:06:12",
        )

        table = cli.render_table([departure])

        self.assertIn("Scheduled Arrival Time", table)
        self.assertIn("08:05:00", table)
        self.assertIn("08:06:12", table)
        self.assertIn(NO_LIVE_DATA, table)

    def test_render_empty(self):
        self.assertEqual(cli.render_table([]), "No departures found")


class TestInteractiveMode(unittest.TestCase):
    """Test the query loop."""

    def setUp(self):
        self.tracker = MagicMock(spec=BusTracker)
        self.tracker.settings = Settings()
        self.tracker.get_departures.return_value = []

    def test_runs_until_user_declines(self):
        inputs = answers("2024-01-08", "08:00", "2", "y", "2024-01-09", "23:55", "1", "no")
        output = io.StringIO()
        with redirect_stdout(output):
            cli.interactive_mode(self.tracker, inputs)

        self.assertEqual(self.tracker.get_departures.call_count, 2)
        first, second = self.tracker.get_departures.call_args_list
        self.assertEqual(first.args, (datetime(2024, 1, 8, 8, 0), ["66"]))
        self.assertEqual(second.args, (datetime(2024, 1, 9, 23, 55), STATION_ROUTES))
        self.assertIn("Welcome", output.getvalue())
        self.assertIn(cli.THANKS_MESSAGE, output.getvalue())

    def test_query_errors_propagate(self):
        self.tracker.get_departures.side_effect = ConnectionError("feed unreachable")

        with redirect_stdout(io.StringIO()):
            with self.assertRaises(ConnectionError):
                cli.interactive_mode(self.tracker, answers("2024-01-08", "08:00", "1"))

    @patch("bustrack.cli.interactive_mode")
    @patch("bustrack.cli.BusTracker")
    def test_main_loads_schedule_then_runs(self, mock_tracker_cls, mock_interactive):
        cli.main(["--static-dir", "data/static", "--cache-dir", "data/cache"])

        settings = mock_tracker_cls.call_args.args[0]
        self.assertEqual(settings.static_dir, "data/static")
        self.assertEqual(settings.cache_dir, "data/cache")
        mock_tracker_cls.return_value.store.load_all.assert_called_once()
        mock_interactive.assert_called_once_with(mock_tracker_cls.return_value)
        mock_tracker_cls.return_value.close.assert_called_once()

    @patch("bustrack.cli.interactive_mode")
    @patch("bustrack.cli.BusTracker")
    def test_main_schedule_failure_is_fatal(self, mock_tracker_cls, mock_interactive):
        mock_tracker_cls.return_value.store.load_all.side_effect = FileNotFoundError("trips.txt")

        with self.assertRaises(FileNotFoundError):
            cli.main([])

        mock_interactive.assert_not_called()
        mock_tracker_cls.return_value.close.assert_called_once()


if __name__ == "__main__":
    unittest.main()
