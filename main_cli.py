#!/usr/bin/env python3
import argparse
import logging
import datetime
import json
import sys
import os

# Add the parent directory to the path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from gametime_travel.api_client import APIClient
from gametime_travel.config import Config
from gametime_travel.departure_calculator import DepartureTimeCalculator
from gametime_travel.errors import TravelError
from gametime_travel.event import EventOccurrence
from gametime_travel.planner import TravelPlanner
from gametime_travel.preferences import UserTravelPreferences
from gametime_travel.time_converter import format_12_hour, to_utc_deadline
from gametime_travel.venue_resolver import VenueResolver, resolve_venue_request
from gametime_travel.venue_store import store_from_config


def setup_logging(debug=False):
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def resolve_venue(resolver, name, league):
    """Resolve a single venue name."""
    result = resolve_venue_request(resolver, {"venue_name": name, "league": league})
    venue = result["venue"]
    if venue:
        print(f"✅ Venue resolved:")
        print(f"  🏒 {venue['canonical_name']} ({venue['league']})")
        print(f"  📍 {venue['address']}")
    else:
        print(f"❌ No venue found for: {name}")


def refresh_venues(resolver):
    """Force a venue cache refresh and report counts."""
    result = resolver.refresh_cache()
    print(f"✅ Venue cache refreshed at {result.refreshed_at.isoformat()}")
    print(f"  🏟️ Venues: {result.venue_count}")
    print(f"  🔤 Aliases: {result.alias_count}")


def route_between(origin, destination, date_str, time_str, timezone, buffer_minutes):
    """Converge on a departure time between two addresses."""
    event = EventOccurrence.from_dict({"date": date_str, "time": time_str, "venue": destination, "timezone": timezone})
    deadline = to_utc_deadline(event.local_date, event.local_time, event.timezone, buffer_minutes)

    calculator = DepartureTimeCalculator(APIClient())
    estimate = calculator.converge(origin, destination, deadline)

    print(f"✅ Departure {estimate.status.value} after {estimate.iterations} queries:")
    print(f"  🚗 From: {origin}")
    print(f"  🏁 To: {destination}")
    print(f"  ⏱️ Drive time: {estimate.duration_minutes:.1f} minutes")
    print(f"  🕒 Leave: {format_12_hour(estimate.departure_utc, event.timezone)}")
    print(f"  🕒 Arrive by: {format_12_hour(deadline, event.timezone)}")
    if estimate.disclaimer:
        print(f"  ⚠️ {estimate.disclaimer}")


def plan_games(resolver, events_file, prefs):
    """Plan departures for every game in a JSON schedule file."""
    try:
        with open(events_file, 'r') as f:
            events_data = json.load(f)
    except FileNotFoundError:
        print(f"❌ Events file not found: {events_file}")
        return
    except json.JSONDecodeError:
        print(f"❌ Invalid JSON in events file: {events_file}")
        return

    events = []
    for event_data in events_data:
        try:
            events.append(EventOccurrence.from_dict(event_data))
        except ValueError as e:
            print(f"❌ Skipping event: {e}")

    if not events:
        print("❌ No valid events found in the provided file")
        return

    print(f"📅 Planning travel for {len(events)} games...")
    planner = TravelPlanner(resolver)
    for event, outcome in planner.plan_many(events, prefs):
        print(f"\n🏒 {event.summary or event.venue_name} on {event.local_date} at {event.local_time.strftime('%H:%M')}")
        if not outcome.ok:
            print(f"  ❌ {outcome.reason.value}: {outcome.message}")
            continue
        plan = outcome.plan
        print(f"  ⏰ {plan.wake_label}: {format_12_hour(plan.wake_local, plan.timezone)}")
        print(f"  🚗 Leave: {format_12_hour(plan.leave_local, plan.timezone)}")
        print(f"  🏁 Arrive: {format_12_hour(plan.arrive_local, plan.timezone)}")
        print(f"  ⏱️ Drive time: {plan.drive_minutes:.0f} minutes")
        if plan.hotel_recommended:
            print("  🏨 Wake-up is earlier than your minimum - consider a hotel near the rink")
        if plan.disclaimer:
            print(f"  ⚠️ {plan.disclaimer}")


def main():
    parser = argparse.ArgumentParser(
        description="GameTime Travel CLI - Test and demo tool for departure planning",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Resolve a venue name from a schedule
  ./main_cli.py --venues venues.json resolve "Toyota Sports Center" --league scaha

  # Reload venues after editing the store
  ./main_cli.py refresh

  # Converge on a departure between two addresses
  ./main_cli.py route "123 Main St, Los Angeles" "555 N Nash St, El Segundo" --date 2025-10-05 --time 07:00

  # Plan every game in a schedule file
  ./main_cli.py plan games.json --home "123 Main St, Los Angeles" --min-wake 06:00
        """
    )

    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--venues', type=str, help='JSON venues file (defaults to Supabase)')

    subparsers = parser.add_subparsers(dest='command', help='Sub-command help')

    resolve_parser = subparsers.add_parser('resolve', help='Resolve a venue name')
    resolve_parser.add_argument('name', type=str, help='Venue name as written in the schedule')
    resolve_parser.add_argument('--league', type=str, default=Config.DEFAULT_LEAGUE, help='League tag')

    subparsers.add_parser('refresh', help='Reload the venue cache')

    route_parser = subparsers.add_parser('route', help='Converge on a departure between two addresses')
    route_parser.add_argument('origin', type=str, help='Starting address')
    route_parser.add_argument('destination', type=str, help='Destination address')
    route_parser.add_argument('--date', type=str, default=datetime.date.today().isoformat(), help='Event date (YYYY-MM-DD)')
    route_parser.add_argument('--time', type=str, required=True, help='Event start time (e.g., "14:30")')
    route_parser.add_argument('--timezone', type=str, default=Config.DEFAULT_TIMEZONE, help='IANA timezone or abbreviation')
    route_parser.add_argument('--buffer', type=int, default=Config.DEFAULT_ARRIVAL_BUFFER_MINUTES, help='Arrival buffer in minutes')

    plan_parser = subparsers.add_parser('plan', help='Plan departures for a schedule file')
    plan_parser.add_argument('events_file', type=str, help='JSON file with game records')
    plan_parser.add_argument('--home', type=str, help='Home address to start from')
    plan_parser.add_argument('--get-ready', type=int, default=Config.DEFAULT_GET_READY_MINUTES, help='Minutes to get ready')
    plan_parser.add_argument('--buffer', type=int, default=Config.DEFAULT_ARRIVAL_BUFFER_MINUTES, help='Arrival buffer in minutes')
    plan_parser.add_argument('--min-wake', type=str, help='Earliest acceptable wake-up time (HH:MM)')

    args = parser.parse_args()
    setup_logging(args.debug or Config.DEBUG)

    if args.command is None:
        parser.print_help()
        return

    resolver = VenueResolver(store_from_config(args.venues))

    try:
        if args.command == 'resolve':
            resolve_venue(resolver, args.name, args.league)
        elif args.command == 'refresh':
            refresh_venues(resolver)
        elif args.command == 'route':
            route_between(args.origin, args.destination, args.date, args.time, args.timezone, args.buffer)
        elif args.command == 'plan':
            prefs = UserTravelPreferences(
                home_address=args.home,
                get_ready_minutes=args.get_ready,
                arrival_buffer_minutes=args.buffer,
                min_wake_time=args.min_wake,
            )
            plan_games(resolver, args.events_file, prefs)
    except TravelError as e:
        print(f"❌ {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"❌ Invalid input: {e}")
        sys.exit(2)


if __name__ == "__main__":
    main()
