# pyGrowatt - Device Telemetry Locator
# -*- coding: utf-8 -*-
"""
 Find a real-time power reading for one inverter device.

 Each inverter family exposes telemetry through its own endpoint family, so
 the device type tag reported by the platform selects a strategy set:

    DeviceType.HYBRID   - battery hybrids (storage, mix, sph, spa)
    DeviceType.STRING   - string inverters (inverter, tlx, min, mod, mid)
    DeviceType.MICRO    - micro inverters
    DeviceType.CENTRAL  - central / MAX inverters
    DeviceType.GENERIC  - unknown tags, generic strategies only

 The type specific candidates are tried first, then the type agnostic device
 queries. The first response carrying a nonzero normalized power wins.
 locate_reading() never raises: an unresolved device reads 0 kW.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Iterator, Optional

from pygrowatt.cascade import API, WEB, Auth, Candidate, CascadeResolver
from pygrowatt.classifier import Generation
from pygrowatt.endpoints import CANDIDATES, Capability
from pygrowatt.normalize import normalize_power

log = logging.getLogger(__name__)

EXACT = "exact"
FALLBACK = "fallback"

# Power-bearing fields in the order they are trusted: direct, AC, PV, active, output
POWER_FIELDS = ('power', 'currentPower', 'pac', 'ppv', 'activePower', 'outputPower',
                'nowPower', 'powerValue', 'pacToUser', 'pOutput')


class DeviceType(enum.Enum):
    HYBRID = "hybrid"
    STRING = "string"
    MICRO = "micro"
    CENTRAL = "central"
    GENERIC = "generic"

    @classmethod
    def from_tag(cls, tag: Any) -> "DeviceType":
        if tag is None:
            return cls.GENERIC
        return DEVICE_TAGS.get(str(tag).strip().lower(), cls.GENERIC)


DEVICE_TAGS = {
    'storage': DeviceType.HYBRID,
    'mix': DeviceType.HYBRID,
    'sph': DeviceType.HYBRID,
    'spa': DeviceType.HYBRID,
    'hybrid': DeviceType.HYBRID,
    'inverter': DeviceType.STRING,
    'tlx': DeviceType.STRING,
    'min': DeviceType.STRING,
    'mod': DeviceType.STRING,
    'mid': DeviceType.STRING,
    'string': DeviceType.STRING,
    'micro': DeviceType.MICRO,
    'microinverter': DeviceType.MICRO,
    'mic': DeviceType.MICRO,
    'max': DeviceType.CENTRAL,
    'central': DeviceType.CENTRAL,
}


STRATEGIES = {
    DeviceType.HYBRID: (
        Candidate("mix-system-status", "GET", API, "newMixApi.do",
                  params=(("op", "getSysStatusData"), ("mixId", "{serial}"), ("plantId", "{plant_id}"))),
        Candidate("storage-system-status", "GET", API, "newStorageAPI.do",
                  params=(("op", "getSystemStatusData"), ("storageId", "{serial}"), ("plantId", "{plant_id}"))),
    ),
    DeviceType.STRING: (
        Candidate("tlx-system-status", "GET", API, "newTlxApi.do",
                  params=(("op", "getSystemStatus_KW"), ("id", "{serial}"), ("plantId", "{plant_id}"))),
        Candidate("inverter-detail", "GET", API, "newInverterAPI.do",
                  params=(("op", "getInverterDetailData_two"), ("inverterId", "{serial}"))),
    ),
    DeviceType.MICRO: (
        Candidate("micro-detail", "GET", API, "newTwoDeviceAPI.do",
                  params=(("op", "getMicroDetailData"), ("id", "{serial}"))),
        Candidate("micro-status-panel", "POST", WEB, "panel/micro/getMicroStatusData",
                  body=(("plantId", "{plant_id}"), ("microSn", "{serial}")),
                  auth=Auth.COOKIE, generation=Generation.WEB_PANEL),
    ),
    DeviceType.CENTRAL: (
        Candidate("max-detail", "GET", API, "newMaxApi.do",
                  params=(("op", "getMaxDetailData"), ("id", "{serial}"))),
        Candidate("max-status-panel", "POST", WEB, "panel/max/getMAXStatusData",
                  body=(("plantId", "{plant_id}"), ("maxSn", "{serial}")),
                  auth=Auth.COOKIE, generation=Generation.WEB_PANEL),
    ),
    DeviceType.GENERIC: (),
}


@dataclass(frozen=True)
class Device:
    serial_number: str
    device_type: DeviceType = DeviceType.GENERIC
    tag: str = ""


@dataclass(frozen=True)
class TelemetryReading:
    power_kw: float = 0.0
    source: Optional[str] = None
    confidence: str = FALLBACK


UNRESOLVED = TelemetryReading()


def _containers(payload: Any) -> Iterator[dict]:
    """Yield the dicts a power field may live in, outermost first."""
    if isinstance(payload, list):
        for item in payload[:1]:
            yield from _containers(item)
        return
    if not isinstance(payload, dict):
        return
    yield payload
    for key in ('back', 'obj', 'data', 'plantData', 'deviceData', 'storageDetailBean', 'mixDetailBean'):
        inner = payload.get(key)
        if isinstance(inner, dict):
            yield from _containers(inner)
        elif isinstance(inner, list) and inner and isinstance(inner[0], dict):
            yield inner[0]


def extract_power(payload: Any) -> float:
    """First nonzero normalized power found in payload, else 0."""
    for container in _containers(payload):
        for field_name in POWER_FIELDS:
            if field_name in container:
                value = normalize_power(container[field_name])
                if value:
                    return value
    return 0.0


def parse_device(record: Any) -> Optional[Device]:
    if not isinstance(record, dict):
        return None
    serial = record.get('deviceSn') or record.get('sn') or record.get('serialNum') or record.get('deviceAilas')
    if not serial:
        return None
    tag = record.get('deviceType') or record.get('type') or record.get('deviceTypeName') or ''
    return Device(serial_number=str(serial), device_type=DeviceType.from_tag(tag), tag=str(tag))


def parse_devices(payload: Any) -> list:
    """Device list from any of the device-list payload shapes."""
    records = None
    for container in _containers(payload):
        for key in ('deviceList', 'datas', 'devices', 'data'):
            if isinstance(container.get(key), list):
                records = container[key]
                break
        if records is not None:
            break
    if records is None and isinstance(payload, list):
        records = payload
    devices = []
    for record in records or []:
        device = parse_device(record)
        if device is not None:
            devices.append(device)
    return devices


def strategies_for(device_type: DeviceType):
    return STRATEGIES[device_type]


def locate_reading(resolver: CascadeResolver, plant_id: str, device: Device,
                   logger: Optional[logging.Logger] = None) -> TelemetryReading:
    """Return the device's power reading; unresolved devices read 0 kW (fallback)."""
    logger = logger or log
    context = {'plant_id': plant_id, 'serial': device.serial_number}
    try:
        for confidence, candidates in ((EXACT, strategies_for(device.device_type)),
                                       (FALLBACK, CANDIDATES[Capability.DEVICE_GENERIC])):
            outcome = resolver.resolve(candidates, context, extract=extract_power)
            if outcome:
                logger.debug(f"Device {device.serial_number} ({device.device_type.value}) "
                             f"= {outcome.value:.3f} kW via {outcome.strategy.name}")
                return TelemetryReading(power_kw=outcome.value, source=outcome.strategy.name,
                                        confidence=confidence)
    except Exception as exc:
        logger.debug(f"Device {device.serial_number} telemetry failed: {exc}", exc_info=True)
        return UNRESOLVED
    logger.debug(f"Device {device.serial_number} ({device.device_type.value}) unresolved")
    return UNRESOLVED
