"""Battery level constraint using psutil."""

from collections.abc import Callable
from dataclasses import dataclass

import psutil

from smart_fridge.services.scheduling import ConstraintChecker


@dataclass
class BatteryConstraint(ConstraintChecker):
    """Satisfied unless the device runs on a critically low battery."""

    min_percent: int = 15
    sensor: Callable[[], object | None] = psutil.sensors_battery

    def satisfied(self) -> bool:
        """Return True on mains power, without a battery, or above the minimum."""
        battery = self.sensor()
        if battery is None:
            return True
        if getattr(battery, "power_plugged", False):
            return True
        return float(getattr(battery, "percent", 100.0)) > self.min_percent
