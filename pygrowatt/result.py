# pyGrowatt - Result Assembler
# -*- coding: utf-8 -*-
"""
 Map the aggregator's per-plant results into the stable output contract.

 The public shape (AggregateResult.to_dict()):

    {
        "status": "online" | "offline",
        "currentPower": kW,
        "dailyGeneration": kWh,
        "monthlyGeneration": kWh (always 0, not provided by the vendor),
        "totalGeneration": kWh,
        "co2Saved": tons,
        "plantCount": int,
        "plants": [{name, plantId, todayEnergy, totalEnergy, currentPower, status}],
        "lastUpdate": ISO 8601 string | None,
        "error": str (only for run level failures)
    }
"""
import datetime
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from dateutil import tz

log = logging.getLogger(__name__)

ONLINE = "online"
OFFLINE = "offline"


@dataclass(frozen=True)
class Plant:
    plant_id: str
    name: str
    today_energy: float = 0.0   # kWh, from the plant list
    total_energy: float = 0.0   # kWh, from the plant list
    status: str = OFFLINE
    co2: float = 0.0
    current_power: float = 0.0  # kW, live figure carried by the plant list itself


@dataclass(frozen=True)
class PlantSummary:
    plant: Plant
    current_power: float = 0.0
    source: Optional[str] = None
    resolved: bool = False
    # (serial, TelemetryReading) per device when the plant was resolved device by device
    readings: Tuple[Tuple[str, Any], ...] = ()

    def to_dict(self) -> dict:
        return {
            'name': self.plant.name,
            'plantId': self.plant.plant_id,
            'todayEnergy': self.plant.today_energy,
            'totalEnergy': self.plant.total_energy,
            'currentPower': self.current_power,
            'status': self.plant.status,
        }


@dataclass
class AggregateResult:
    status: str = OFFLINE
    current_power: float = 0.0
    daily_energy: float = 0.0
    monthly_energy: float = 0.0
    total_energy: float = 0.0
    co2_saved: float = 0.0
    plants: List[PlantSummary] = field(default_factory=list)
    last_update: Optional[str] = None
    error: Optional[str] = None
    partial: bool = False
    unresolved_plants: List[str] = field(default_factory=list)

    @property
    def plant_count(self) -> int:
        return len(self.plants)

    def to_dict(self) -> dict:
        output = {
            'status': self.status,
            'currentPower': self.current_power,
            'dailyGeneration': self.daily_energy,
            'monthlyGeneration': self.monthly_energy,
            'totalGeneration': self.total_energy,
            'co2Saved': self.co2_saved,
            'plantCount': self.plant_count,
            'plants': [summary.to_dict() for summary in self.plants],
            'lastUpdate': self.last_update,
        }
        if self.error:
            output['error'] = self.error
        return output


def now_iso(timezone: str) -> str:
    zone = tz.gettz(timezone) or tz.UTC
    return datetime.datetime.now(zone).isoformat()


def assemble(summaries: List[PlantSummary], timezone: str = "UTC", co2_saved: float = 0.0,
             totals: Optional[dict] = None, unresolved: Optional[List[str]] = None) -> AggregateResult:
    """
    Build the AggregateResult of a completed (or deadline cut) run.

    totals carries the plant list's account level sums (today and total in
    kWh, power in kW) and each is only used when the per-plant sum is 0.
    status is online iff there is at least one plant and the merged
    cumulative energy is nonzero.
    """
    current_power = sum(summary.current_power for summary in summaries)
    daily = sum(summary.plant.today_energy for summary in summaries)
    total = sum(summary.plant.total_energy for summary in summaries)
    if totals:
        if not current_power:
            current_power = totals.get('power', 0.0)
        if not daily:
            daily = totals.get('today', 0.0)
        if not total:
            total = totals.get('total', 0.0)
    online = bool(summaries) and total > 0
    if not co2_saved:
        co2_saved = sum(summary.plant.co2 for summary in summaries)
    unresolved = list(unresolved or [])
    return AggregateResult(
        status=ONLINE if online else OFFLINE,
        current_power=current_power,
        daily_energy=daily,
        monthly_energy=0.0,
        total_energy=total,
        co2_saved=co2_saved,
        plants=list(summaries),
        last_update=now_iso(timezone),
        partial=bool(unresolved),
        unresolved_plants=unresolved,
    )


def failed(error: str) -> AggregateResult:
    """Structurally valid all-zero result for a run level failure."""
    log.debug(f"Assembling failed result: {error}")
    return AggregateResult(status=OFFLINE, error=error, last_update=None)
