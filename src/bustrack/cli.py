"""Interactive command line for the UQ Lakes bus tracker."""

import argparse
import logging
import re
from datetime import datetime
from typing import Callable, List, Optional, Sequence

import pandas as pd

from .bus_tracker import BusTracker
from .config import Settings
from .models import EnrichedDeparture

logger = logging.getLogger(__name__)

WELCOME_MESSAGE = "\nWelcome to the UQ Lakes station bus tracker!\n"
THANKS_MESSAGE = "Thanks for using the UQ Lakes station bus tracker!"

DATE_PROMPT = "What date will you depart UQ Lakes station by bus? "
INVALID_DATE_MESSAGE = "Incorrect date format. Please use YYYY-MM-DD"
TIME_PROMPT = "What time will you depart UQ Lakes station by bus? "
INVALID_TIME_MESSAGE = "Incorrect time format. Please use HH:mm"
ROUTE_PROMPT = "What bus route would you like to take? "
INVALID_ROUTE_MESSAGE = "Please enter a valid option for a bus route."
SEARCH_AGAIN_PROMPT = "Would you like to search again? "
INVALID_SEARCH_MESSAGE = "Please enter a valid option."

DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_PATTERN = re.compile(r"^([01][0-9]|2[0-3]):([0-5][0-9])$")

InputFunc = Callable[[str], str]


def ask_date(input_func: InputFunc = input) -> str:
    """Prompt until a real YYYY-MM-DD date is entered."""
    while True:
        answer = input_func(DATE_PROMPT).strip()
        if DATE_PATTERN.match(answer):
            try:
                datetime.strptime(answer, "%Y-%m-%d")
                return answer
            except ValueError:
                pass
        print(INVALID_DATE_MESSAGE)


def ask_time(input_func: InputFunc = input) -> str:
    """Prompt until a 24-hour HH:mm time is entered."""
    while True:
        answer = input_func(TIME_PROMPT).strip()
        if TIME_PATTERN.match(answer):
            return answer
        print(INVALID_TIME_MESSAGE)


def route_options(routes: Sequence[str]) -> List[str]:
    return ["1 - Show All Routes"] + [f"{index} - {route}" for index, route in enumerate(routes, start=2)]


def ask_routes(routes: Sequence[str], input_func: InputFunc = input) -> List[str]:
    """
    Prompt for a route menu option.

    Returns:
        All routes for option 1, otherwise the single chosen route.
    """
    options = route_options(routes)
    while True:
        print("\n".join(options))
        answer = input_func(ROUTE_PROMPT).strip()
        valid = {str(index): index for index in range(1, len(options) + 1)}
        if answer in valid:
            choice = valid[answer]
            return list(routes) if choice == 1 else [routes[choice - 2]]
        print(INVALID_ROUTE_MESSAGE)


def ask_search_again(input_func: InputFunc = input) -> bool:
    while True:
        answer = input_func(SEARCH_AGAIN_PROMPT).strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print(INVALID_SEARCH_MESSAGE)


def render_table(departures: Sequence[EnrichedDeparture]) -> str:
    """Render departures as a console table."""
    if not departures:
        return "No departures found"
    frame = pd.DataFrame([departure.as_row() for departure in departures])
    return frame.to_string()


def run_query(tracker: BusTracker, input_func: InputFunc = input) -> List[EnrichedDeparture]:
    """Prompt for one query, print the results and return them."""
    date = ask_date(input_func)
    time = ask_time(input_func)
    route_names = ask_routes(tracker.settings.routes, input_func)

    when = datetime.strptime(f"{date} {time}", "%Y-%m-%d %H:%M")
    departures = tracker.get_departures(when, route_names)
    print(render_table(departures))
    return departures


def interactive_mode(tracker: BusTracker, input_func: InputFunc = input) -> None:
    """Run queries until the user stops."""
    print(WELCOME_MESSAGE)
    try:
        while True:
            run_query(tracker, input_func)
            if not ask_search_again(input_func):
                break
    except KeyboardInterrupt:
        print()
    print(THANKS_MESSAGE)


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Buses departing UQ Lakes station, with live data.")
    parser.add_argument("--static-dir", help="Directory with routes.txt, trips.txt, calendar.txt, stop_times.txt")
    parser.add_argument("--cache-dir", help="Directory for cached live data")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show log messages")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    settings = Settings.from_env(static_dir=args.static_dir, cache_dir=args.cache_dir)
    tracker = BusTracker(settings)
    try:
        try:
            tracker.store.load_all()
        except (OSError, KeyError) as e:
            logger.error(f"Failed to load schedule data from {settings.static_dir}: {e}")
            raise

        interactive_mode(tracker)
    finally:
        tracker.close()


if __name__ == "__main__":
    main()
