# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0
"""Rate units found in benchmark tool output, grouped into families."""

import re
from dataclasses import dataclass

__all__ = [
    "BIT_RATE",
    "BYTE_RATE",
    "PACKET_RATE",
    "RateMeasurement",
    "UnitFamily",
    "find_first",
    "normalize_bandwidth",
]


@dataclass(frozen=True, slots=True)
class RateMeasurement:
    """A number with a recognized unit.

    Attributes:
        value: Number as printed by the tool
        unit: Unit suffix as printed
        key: Lower-case metric key suffix for the native unit (e.g. "mbps")
        base_value: Value in the family's base unit (bits/s or packets/s)
        end: Offset just after the match in the scanned text
    """

    value: float
    unit: str
    key: str
    base_value: float
    end: int


class UnitFamily:
    """A set of units measuring the same quantity, with their scale to the base unit."""

    def __init__(self, name: str, units: dict[str, tuple[str, float]]) -> None:
        self.name = name
        self.units = units
        alternatives = "|".join(
            re.escape(unit) for unit in sorted(units, key=len, reverse=True)
        )
        self.pattern = re.compile(
            rf"(?<![\w.])(\d+(?:\.\d+)?)\s*({alternatives})(?![\w/])"
        )

    def measure(self, value: float, unit: str, end: int = 0) -> RateMeasurement:
        key, scale = self.units[unit]
        return RateMeasurement(
            value=value, unit=unit, key=key, base_value=value * scale, end=end
        )


# Base unit: bits per second. Byte rates are converted to bits.
BIT_RATE = UnitFamily(
    "bit-rate",
    {
        "bits/sec": ("bps", 1.0),
        "Kbits/sec": ("kbps", 1e3),
        "Mbits/sec": ("mbps", 1e6),
        "Gbits/sec": ("gbps", 1e9),
        "Tbits/sec": ("tbps", 1e12),
        "Kb/sec": ("kbps", 1e3),
        "Mb/sec": ("mbps", 1e6),
        "Gb/sec": ("gbps", 1e9),
        "Kbps": ("kbps", 1e3),
        "Mbps": ("mbps", 1e6),
        "Gbps": ("gbps", 1e9),
    },
)

BYTE_RATE = UnitFamily(
    "byte-rate",
    {
        "KB/sec": ("kbytes_per_sec", 8e3),
        "MB/sec": ("mbytes_per_sec", 8e6),
        "GB/sec": ("gbytes_per_sec", 8e9),
        "KBytes/sec": ("kbytes_per_sec", 8e3),
        "MBytes/sec": ("mbytes_per_sec", 8e6),
        "GBytes/sec": ("gbytes_per_sec", 8e9),
    },
)

# Base unit: packets per second.
PACKET_RATE = UnitFamily(
    "packet-rate",
    {
        "pps": ("pps", 1.0),
        "Kpps": ("kpps", 1e3),
        "Mpps": ("mpps", 1e6),
        "Gpps": ("gpps", 1e9),
    },
)


def find_first(text: str, family: UnitFamily) -> RateMeasurement | None:
    """Return the first measurement of a family in text, or None."""
    match = family.pattern.search(text)
    if match is None:
        return None
    return family.measure(float(match.group(1)), match.group(2), end=match.end())


def normalize_bandwidth(
    metrics: dict, prefix: str, measurement: RateMeasurement
) -> None:
    """Store a bandwidth measurement under its native key and in bits per second.

    For example "934 Mbits/sec" with prefix "bandwidth" stores
    ``bandwidth_mbps = 934.0`` and ``bandwidth_bps = 934000000.0``.
    """
    metrics[f"{prefix}_{measurement.key}"] = measurement.value
    metrics[f"{prefix}_bps"] = measurement.base_value
