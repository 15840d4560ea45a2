# pyGrowatt - Plant/Account Aggregator
# -*- coding: utf-8 -*-
"""
 Orchestrate one acquisition run for a Growatt account.

    START -> AUTHENTICATED -> PLANTS_LISTED
          -> per plant: (plant level power | DEVICES_LISTED -> TELEMETRY_COLLECTED)
          -> MERGED -> DONE

 Plants run concurrently on a thread pool and each returns its own
 PlantSummary; the merge is a plain sum. Inside a plant the plant level
 power lookup is evaluated before any device is touched, and a nonzero
 plant figure skips the device pass. Only authentication failure and an
 exhausted plant list end a run early; every other failure contributes 0.
"""
import logging
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, List, NamedTuple, Optional

from pygrowatt.auth import Credential, authenticate
from pygrowatt.cascade import CascadeResolver
from pygrowatt.config import Settings
from pygrowatt.devices import Device, TelemetryReading, extract_power, locate_reading, parse_devices
from pygrowatt.endpoints import CANDIDATES, Capability
from pygrowatt.exceptions import PlantListUnavailable, PyGrowattError
from pygrowatt.normalize import normalize_power, parse_energy, parse_number
from pygrowatt.result import OFFLINE, ONLINE, AggregateResult, Plant, PlantSummary, assemble, failed
from pygrowatt.transport import GrowattTransport

log = logging.getLogger(__name__)

UNNAMED_PLANT = "Unnamed plant"
DEVICE_SOURCE = "devices"
PLANT_LIST_SOURCE = "plant-list"


class PlantListing(NamedTuple):
    plants: List[Plant]
    totals: dict
    co2: float


def parse_plant(record: Any) -> Optional[Plant]:
    if not isinstance(record, dict):
        return None
    plant_id = record.get('plantId') or record.get('id')
    if plant_id in (None, ''):
        return None
    status = str(record.get('status', '')).strip().lower()
    return Plant(
        plant_id=str(plant_id),
        name=record.get('plantName') or record.get('name') or UNNAMED_PLANT,
        today_energy=parse_energy(record.get('todayEnergy', record.get('eToday'))),
        total_energy=parse_energy(record.get('totalEnergy', record.get('eTotal'))),
        status=ONLINE if status in ('1', 'online') else OFFLINE,
        co2=parse_number(record.get('co2Saved', record.get('co2Reduction'))),
        current_power=extract_power(record),
    )


def parse_plant_listing(payload: Any) -> Optional[PlantListing]:
    """PlantListing from any plant-list payload shape, None when none is recognised."""
    records = None
    total_data = {}
    if isinstance(payload, list):
        records = payload
    elif isinstance(payload, dict):
        back = payload.get('back') if isinstance(payload.get('back'), dict) else {}
        obj = payload.get('obj') if isinstance(payload.get('obj'), dict) else {}
        for source, key in ((back, 'data'), (payload, 'data'), (obj, 'datas'), (payload, 'PlantList'),
                            (payload, 'plantList')):
            if isinstance(source.get(key), list):
                records = source[key]
                break
        total_data = back.get('totalData') or payload.get('totalData') or {}
    if records is None:
        return None
    plants = [plant for plant in (parse_plant(record) for record in records) if plant is not None]
    totals = {}
    co2 = 0.0
    if isinstance(total_data, dict):
        totals = {'today': parse_energy(total_data.get('todayEnergySum')),
                  'total': parse_energy(total_data.get('totalEnergySum')),
                  'power': (normalize_power(total_data.get('currentPowerSum'))
                            or normalize_power(total_data.get('pSum')))}
        co2 = parse_number(total_data.get('CO2Sum'))
    return PlantListing(plants=plants, totals=totals, co2=co2)


class Aggregator:
    """
    One acquisition run for one credential.

        settings   = Settings (timeouts, workers, URLs); defaults when None
        transport  = GrowattTransport; created and closed by the run when None
        logger     = logging.Logger used by every component of the run
    """

    def __init__(self, credential: Credential, settings: Optional[Settings] = None, transport=None,
                 logger: Optional[logging.Logger] = None):
        self.credential = credential
        self.settings = settings or Settings()
        self.transport = transport
        self.log = logger or log

    def run(self) -> AggregateResult:
        """Run the acquisition; never raises."""
        owns_transport = self.transport is None
        transport = self.transport or GrowattTransport(self.settings)
        try:
            return self._run(transport)
        except PyGrowattError as exc:
            self.log.error(f"Acquisition failed for {self.credential.username}: {exc}")
            return failed(str(exc))
        except Exception as exc:
            self.log.error(f"Unexpected error during acquisition for {self.credential.username}: {exc}")
            self.log.debug("Traceback", exc_info=True)
            return failed(f"unexpected error: {exc}")
        finally:
            if owns_transport:
                transport.close()

    def _run(self, transport) -> AggregateResult:
        deadline = time.monotonic() + self.settings.run_timeout
        session = authenticate(self.credential, transport, self.settings, logger=self.log)
        resolver = CascadeResolver(transport, session, self.settings, deadline=deadline, logger=self.log)
        listing = self.list_plants(resolver)
        self.log.info(f"Listed {len(listing.plants)} plant(s) for {self.credential.username}")
        summaries, unresolved = self.collect(resolver, listing.plants, deadline)
        if unresolved:
            self.log.warning(f"Run deadline exceeded - {len(unresolved)} plant(s) unresolved: {unresolved}")
        result = assemble(summaries, timezone=self.settings.timezone, co2_saved=listing.co2,
                          totals=listing.totals, unresolved=unresolved)
        self.log.info(f"Run complete for {self.credential.username}: {result.current_power:.3f} kW, "
                      f"{result.plant_count} plant(s), {result.status}")
        return result

    def list_plants(self, resolver: CascadeResolver) -> PlantListing:
        outcome = resolver.resolve(CANDIDATES[Capability.PLANT_LIST], extract=parse_plant_listing)
        if not outcome:
            self.log.warning(f"Plant list exhausted: {list(outcome.attempts)}")
            raise PlantListUnavailable()
        return outcome.value

    def collect(self, resolver: CascadeResolver, plants: List[Plant], deadline: float):
        """Resolve every plant concurrently; plants pending at the deadline read 0 kW."""
        if not plants:
            return [], []
        executor = ThreadPoolExecutor(max_workers=min(len(plants), self.settings.max_workers),
                                      thread_name_prefix="pygrowatt")
        futures = [(plant, executor.submit(self.resolve_plant, resolver, plant)) for plant in plants]
        done, _ = wait([future for _, future in futures], timeout=max(0.0, deadline - time.monotonic()))
        executor.shutdown(wait=False, cancel_futures=True)
        summaries = []
        unresolved = []
        for plant, future in futures:
            if future in done:
                summaries.append(future.result())
            else:
                summaries.append(PlantSummary(plant))
                unresolved.append(plant.plant_id)
        return summaries, unresolved

    def resolve_plant(self, resolver: CascadeResolver, plant: Plant) -> PlantSummary:
        """Plant list figure, then plant level lookups, device pass only when both yield nothing."""
        if plant.current_power:
            self.log.debug(f"Plant {plant.plant_id} = {plant.current_power:.3f} kW from the plant list")
            return PlantSummary(plant, current_power=plant.current_power, source=PLANT_LIST_SOURCE, resolved=True)
        context = {'plant_id': plant.plant_id}
        try:
            outcome = resolver.resolve(CANDIDATES[Capability.PLANT_POWER], context, extract=extract_power)
            if outcome:
                self.log.debug(f"Plant {plant.plant_id} = {outcome.value:.3f} kW via {outcome.strategy.name}")
                return PlantSummary(plant, current_power=outcome.value, source=outcome.strategy.name,
                                    resolved=True)
            devices = resolver.resolve(CANDIDATES[Capability.DEVICE_LIST], context, extract=parse_devices)
            if not devices:
                self.log.debug(f"Plant {plant.plant_id} has no resolvable power or device list")
                return PlantSummary(plant)
            readings = self.read_devices(resolver, plant, devices.value)
            for device, reading in zip(devices.value, readings):
                self.log.debug(f"Plant {plant.plant_id} device {device.serial_number}: {reading.power_kw:.3f} kW "
                               f"({reading.confidence}, {reading.source or 'unresolved'})")
            power = sum(reading.power_kw for reading in readings)
            return PlantSummary(plant, current_power=power, source=DEVICE_SOURCE,
                                resolved=any(reading.power_kw for reading in readings),
                                readings=tuple((device.serial_number, reading)
                                               for device, reading in zip(devices.value, readings)))
        except Exception as exc:
            self.log.debug(f"Plant {plant.plant_id} failed: {exc}", exc_info=True)
            return PlantSummary(plant)

    def read_devices(self, resolver: CascadeResolver, plant: Plant, devices: List[Device]) -> List[TelemetryReading]:
        self.log.debug(f"Plant {plant.plant_id}: reading {len(devices)} device(s)")
        if len(devices) == 1:
            return [locate_reading(resolver, plant.plant_id, devices[0], logger=self.log)]
        workers = min(len(devices), self.settings.device_workers)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pygrowatt-dev") as executor:
            return list(executor.map(lambda device: locate_reading(resolver, plant.plant_id, device,
                                                                   logger=self.log), devices))


def fetch_summary(username: Optional[str], secret: Optional[str], settings: Optional[Settings] = None,
                  transport=None, logger: Optional[logging.Logger] = None) -> AggregateResult:
    """Run one acquisition for username/secret and return its AggregateResult."""
    return Aggregator(Credential(username or "", secret or ""), settings=settings, transport=transport,
                      logger=logger).run()
