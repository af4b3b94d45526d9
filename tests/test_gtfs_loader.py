"""Tests for the static schedule store."""

import os
import tempfile
import unittest
from unittest.mock import patch
import sys
from pathlib import Path

# Add src to path so we can import bustrack
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from bustrack.gtfs_loader import ScheduleStore

ROUTES_CSV = """route_id,route_short_name,route_long_name,route_desc,route_type
66-1,66,UQ Lakes - RBWH,,3
192-1,192,UQ Lakes - City,,3
412-1,412,UQ St Lucia - City,,3
"""

TRIPS_CSV = """route_id,service_id,trip_id,trip_headsign,direction_id
66-1,S1,T1,RBWH,0
192-1,S2,T2,City,1
"""

CALENDAR_CSV = """service_id,monday,tuesday,wednesday,thursday,friday,saturday,sunday,start_date,end_date
S1,1,1,1,1,1,0,0,20240101,20241231
S2,0,0,0,0,0,1,1,20240101,20240630
"""

STOP_TIMES_CSV = """trip_id,arrival_time,departure_time,stop_id,stop_sequence
T1,08:05:00,08:05:00,1853,1
T1,08:20:00,08:20:00,10795,2
T2,09:00:00,09:00:00,1947,1
"""


def write_static_files(directory):
    for name, content in (
        ("routes.txt", ROUTES_CSV),
        ("trips.txt", TRIPS_CSV),
        ("calendar.txt", CALENDAR_CSV),
        ("stop_times.txt", STOP_TIMES_CSV),
    ):
        with open(os.path.join(directory, name), "w", encoding="utf-8") as f:
            f.write(content)


class TestScheduleStore(unittest.TestCase):
    """Test GTFS static data loading."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        write_static_files(self._tmp.name)
        self.store = ScheduleStore(self._tmp.name, ["1853", "1878", "1882", "1947"])

    def tearDown(self):
        self._tmp.cleanup()

    def test_load_routes_filters_by_short_name(self):
        routes = self.store.load_routes(["66", "412"])

        self.assertEqual([r.route_id for r in routes], ["66-1", "412-1"])
        self.assertEqual(routes[0].route_long_name, "UQ Lakes - RBWH")

    def test_load_trips(self):
        trips = self.store.trips

        self.assertEqual(len(trips), 2)
        self.assertEqual(trips[0].trip_id, "T1")
        self.assertEqual(trips[0].route_id, "66-1")
        self.assertEqual(trips[0].service_id, "S1")
        self.assertEqual(trips[0].trip_headsign, "RBWH")

    def test_load_calendar_flags(self):
        entry = self.store.calendar[0]

        self.assertTrue(entry.runs_on("monday"))
        self.assertFalse(entry.runs_on("sunday"))
        self.assertEqual(entry.start_date, "20240101")
        self.assertTrue(entry.covers("20241231"))

    def test_stop_times_are_limited_to_station(self):
        stop_times = self.store.stop_times

        self.assertEqual([s.stop_id for s in stop_times], ["1853", "1947"])
        self.assertEqual(stop_times[0].arrival_time, "08:05:00")

    def test_tables_are_read_once(self):
        with patch.object(ScheduleStore, "_read_file", wraps=self.store._read_file) as mock_read:
            self.store.trips
            self.store.trips
            self.store.calendar
            self.store.calendar

        self.assertEqual(mock_read.call_count, 2)

    def test_routes_are_read_per_call(self):
        with patch.object(ScheduleStore, "_read_file", wraps=self.store._read_file) as mock_read:
            self.store.load_routes(["66"])
            self.store.load_routes(["192"])

        self.assertEqual(mock_read.call_count, 2)

    def test_clear_forces_reload(self):
        self.assertEqual(len(self.store.trips), 2)
        with open(os.path.join(self._tmp.name, "trips.txt"), "a", encoding="utf-8") as f:
            f.write("66-1,S1,T3,RBWH,0\n")

        self.assertEqual(len(self.store.trips), 2)
        self.store.clear()
        self.assertEqual(len(self.store.trips), 3)

    def test_missing_file_raises(self):
        store = ScheduleStore(os.path.join(self._tmp.name, "missing"), ["1853"])

        with self.assertRaises(OSError):
            store.load_all()


if __name__ == "__main__":
    unittest.main()
