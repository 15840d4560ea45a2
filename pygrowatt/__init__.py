# pyGrowatt Module
# -*- coding: utf-8 -*-
"""
 Python module to acquire live telemetry from the Growatt solar monitoring platform

 For more information see README.md and DESIGN.md

 Features
    * Logs in with the customer's Growatt credentials, trying each login generation in turn
    * Lists the account's plants and resolves a real-time power figure per plant
    * Falls back from plant level lookups to per-device telemetry by inverter family
    * Normalizes watts / kilowatts / unit suffixed strings into kW and kWh
    * Tolerates HTML error pages, malformed JSON and missing fields - never raises for vendor anomalies
    * Processes plants (and devices within a plant) concurrently under one overall deadline

 Classes
    Growatt(username, secret, api_url, web_url, timeout, run_timeout, max_workers,
        device_workers, poolmaxsize, timezone, logger)

 Parameters
    username                  # Growatt account user name
    secret                    # Growatt account password (hashed before sending)
    api_url = None            # Open/mobile API base URL (default https://openapi.growatt.com)
    web_url = None            # Web panel base URL (default https://server.growatt.com)
    timeout = None            # Seconds per endpoint attempt (default 10)
    run_timeout = None        # Overall deadline in seconds for one fetch (default 60)
    max_workers = None        # Plants processed concurrently (default 8)
    device_workers = None     # Devices processed concurrently per plant (default 4)
    poolmaxsize = None        # HTTP connection pool size (default 10)
    timezone = None           # Timezone for lastUpdate (default America/Mexico_City)
    logger = None             # logging.Logger to receive every log line of a run

 Functions
    fetch()                   # Run one acquisition and return an AggregateResult
    summary()                 # Same as fetch() but as the output contract dict
    test_credentials()        # Return True if any login generation accepts the credentials
    plants()                  # Return the account's plants (list of Plant)
    plant_energy(plant_id, date)  # Return the plant energy payload for a date (dict or None)

 Requirements
    This module requires the following modules: requests, bs4, python-dateutil, python-dotenv, growattServer
    pip install requests beautifulsoup4 python-dateutil python-dotenv growattServer
"""
import logging
import sys
from typing import List, Optional

version_tuple = (0, 3, 0)
version = __version__ = '%d.%d.%d' % version_tuple
__author__ = 'pygrowatt'

from pygrowatt.aggregator import Aggregator, fetch_summary, parse_plant_listing
from pygrowatt.auth import Credential, Session, authenticate, hash_password
from pygrowatt.cascade import CascadeResolver
from pygrowatt.classifier import Accepted, Rejected, classify
from pygrowatt.config import Settings
from pygrowatt.endpoints import CANDIDATES, Capability
from pygrowatt.exceptions import PyGrowattError
from pygrowatt.normalize import normalize_power, parse_energy
from pygrowatt.result import AggregateResult, Plant, now_iso
from pygrowatt.transport import GrowattTransport

log = logging.getLogger(__name__)
log.debug('%s version %s', __name__, __version__)
log.debug('Python %s on %s', sys.version, sys.platform)


def set_debug(toggle=True, color=True):
    """Enable verbose logging"""
    if toggle:
        if color:
            logging.basicConfig(format='\x1b[31;1m%(levelname)s:%(message)s\x1b[0m', level=logging.DEBUG)
        else:
            logging.basicConfig(format='%(levelname)s:%(message)s', level=logging.DEBUG)
        log.setLevel(logging.DEBUG)
        log.debug("%s [%s]\n" % (__name__, __version__))
    else:
        log.setLevel(logging.NOTSET)


class Growatt(object):
    def __init__(self, username: Optional[str], secret: Optional[str], api_url=None, web_url=None, timeout=None,
                 run_timeout=None, max_workers=None, device_workers=None, poolmaxsize=None, timezone=None,
                 logger: Optional[logging.Logger] = None, settings: Optional[Settings] = None):
        """
        Represents one Growatt monitoring account.

        Unset parameters come from GROWATT_* environment variables, then the
        built-in defaults (see pygrowatt.config). A fresh login is made for
        every call; nothing is cached between calls.
        """
        self.credential = Credential(username or "", secret or "")
        if settings is None:
            settings = Settings.from_env(api_url=api_url, web_url=web_url, timeout=timeout,
                                         run_timeout=run_timeout, max_workers=max_workers,
                                         device_workers=device_workers, pool_maxsize=poolmaxsize,
                                         timezone=timezone)
        self.settings = settings
        self.log = logger or log

    def _transport(self):
        return GrowattTransport(self.settings)

    def fetch(self) -> AggregateResult:
        """Run one acquisition; run level failures are reported in result.error"""
        with self._transport() as transport:
            return Aggregator(self.credential, settings=self.settings, transport=transport, logger=self.log).run()

    def summary(self) -> dict:
        return self.fetch().to_dict()

    def test_credentials(self) -> bool:
        """Return True if any login generation accepts the credentials"""
        with self._transport() as transport:
            try:
                authenticate(self.credential, transport, self.settings, logger=self.log)
                return True
            except PyGrowattError as exc:
                self.log.debug(f"Credential test failed: {exc}")
                return False

    def plants(self) -> List[Plant]:
        """Return the account's plants, empty list if login or listing fails"""
        with self._transport() as transport:
            try:
                session = authenticate(self.credential, transport, self.settings, logger=self.log)
            except PyGrowattError as exc:
                self.log.debug(f"Unable to list plants: {exc}")
                return []
            resolver = CascadeResolver(transport, session, self.settings, logger=self.log)
            outcome = resolver.resolve(CANDIDATES[Capability.PLANT_LIST], extract=parse_plant_listing)
            return list(outcome.value.plants) if outcome else []

    def plant_energy(self, plant_id: str, date: Optional[str] = None) -> Optional[dict]:
        """
        Return the vendor's energy payload for plant_id on date (YYYY-MM-DD,
        default today in the configured timezone) or None.
        """
        date = date or now_iso(self.settings.timezone)[:10]
        with self._transport() as transport:
            try:
                session = authenticate(self.credential, transport, self.settings, logger=self.log)
            except PyGrowattError as exc:
                self.log.debug(f"Unable to fetch plant energy: {exc}")
                return None
            resolver = CascadeResolver(transport, session, self.settings, logger=self.log)
            outcome = resolver.resolve(CANDIDATES[Capability.PLANT_ENERGY], {'plant_id': plant_id, 'date': date})
            return outcome.payload if outcome else None
