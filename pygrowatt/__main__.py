# pyGrowatt Module - Command Line
# -*- coding: utf-8 -*-
"""
 Python module to acquire live telemetry from the Growatt solar monitoring platform

 Command line:
    python -m pygrowatt fetch [-format json|text]
    python -m pygrowatt login
    python -m pygrowatt plants
    python -m pygrowatt version

 Credentials come from -username / -password or the GROWATT_USERNAME and
 GROWATT_PASSWORD environment variables (a .env file is loaded first).
"""

import argparse
import json
import os
import sys

import dotenv

# Modules
from pygrowatt import Growatt, Settings, version, set_debug


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="PyGrowatt", description=f"PyGrowatt Module v{version}")
    subparsers = p.add_subparsers(dest="command", title='commands (run <command> -h to see usage information)',
                                  required=True)

    fetch_args = subparsers.add_parser("fetch", help='Fetch current power and energy for the account')
    fetch_args.add_argument("-format", type=str, default="text", help="Output format: text, json")

    subparsers.add_parser("login", help='Test Growatt credentials')
    subparsers.add_parser("plants", help='List plants for the account')
    subparsers.add_parser("version", help='Print version information')

    for name in ("fetch", "login", "plants"):
        sub = subparsers.choices[name]
        sub.add_argument("-username", type=str, default=None, help="Growatt user name [GROWATT_USERNAME]")
        sub.add_argument("-password", type=str, default=None, help="Growatt password [GROWATT_PASSWORD]")
        sub.add_argument("-timeout", type=float, default=None,
                         help="Seconds per endpoint attempt [GROWATT_TIMEOUT]")

    # Add a global debug flag
    p.add_argument("-debug", action="store_true", default=False, help="Enable debug output")
    return p


def print_text(summary: dict):
    for item in ('status', 'currentPower', 'dailyGeneration', 'monthlyGeneration', 'totalGeneration',
                 'co2Saved', 'plantCount', 'lastUpdate', 'error'):
        if item in summary:
            print("  {:<20}{}".format(item, summary[item]))
    for plant in summary.get('plants', []):
        print("\n  Plant {} ({})".format(plant['name'], plant['plantId']))
        for item in ('currentPower', 'todayEnergy', 'totalEnergy', 'status'):
            print("    {:<18}{}".format(item, plant[item]))
    print("")


def main(argv=None) -> int:
    dotenv.load_dotenv()
    p = build_parser()
    args = p.parse_args(argv)
    command = args.command

    # Set Debug Mode
    if args.debug or Settings.from_env().debug:
        set_debug(True)

    if command == 'version':
        print("pyGrowatt [%s]" % version)
        return 0

    username = args.username or os.getenv("GROWATT_USERNAME", "")
    password = args.password or os.getenv("GROWATT_PASSWORD", "")
    if not username or not password:
        print("ERROR: Missing credentials. Set -username/-password or GROWATT_USERNAME/GROWATT_PASSWORD.")
        return 1
    gw = Growatt(username, password, timeout=args.timeout)

    if command == 'login':
        if gw.test_credentials():
            print("pyGrowatt [%s] - Login OK for %s" % (version, username))
            return 0
        print("ERROR: Login failed for %s" % username)
        return 1

    if command == 'plants':
        plants = gw.plants()
        for plant in plants:
            print("  {:<14}{:<32}{:>12.1f} kWh  {}".format(plant.plant_id, plant.name, plant.total_energy,
                                                          plant.status))
        if not plants:
            print("No plants found for %s" % username)
        return 0

    # fetch
    summary = gw.summary()
    if args.format == 'json':
        print(json.dumps(summary, indent=2))
    else:
        print(f"pyGrowatt [{version}] - Account summary for {username}\n")
        print_text(summary)
    return 1 if summary.get('error') else 0


if __name__ == '__main__':
    sys.exit(main())
