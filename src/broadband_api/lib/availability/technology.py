"""BDC technology codes, display metadata, and speed presentation helpers."""

from dataclasses import dataclass
from enum import IntEnum


class TechCode(IntEnum):
    """FCC BDC technology codes for fixed broadband."""

    OTHER = 0
    DSL = 10
    CABLE = 40
    FIBER = 50
    SATELLITE_GSO = 60
    SATELLITE_NGSO = 61
    FIXED_WIRELESS_UNLICENSED = 70
    FIXED_WIRELESS_LICENSED = 71
    FIXED_WIRELESS_BY_RULE = 72


@dataclass(frozen=True)
class TechMeta:
    """Display metadata for a technology code."""

    label: str
    color: str
    bg: str


_FIXED_WIRELESS = TechMeta(label="Fixed Wireless", color="#f97316", bg="#fff7ed")
_SATELLITE = TechMeta(label="Satellite", color="#a855f7", bg="#faf5ff")

TECH_META: dict[int, TechMeta] = {
    TechCode.FIBER: TechMeta(label="Fiber", color="#22c55e", bg="#f0fdf4"),
    TechCode.CABLE: TechMeta(label="Cable", color="#3b82f6", bg="#eff6ff"),
    TechCode.FIXED_WIRELESS_UNLICENSED: _FIXED_WIRELESS,
    TechCode.FIXED_WIRELESS_LICENSED: _FIXED_WIRELESS,
    TechCode.FIXED_WIRELESS_BY_RULE: _FIXED_WIRELESS,
    TechCode.DSL: TechMeta(label="DSL", color="#6b7280", bg="#f9fafb"),
    TechCode.SATELLITE_GSO: _SATELLITE,
    TechCode.SATELLITE_NGSO: _SATELLITE,
    TechCode.OTHER: TechMeta(label="Other", color="#6b7280", bg="#f9fafb"),
}


def tech_meta(code: int) -> TechMeta:
    """Return display metadata for a technology code, falling back to Other."""
    return TECH_META.get(code, TECH_META[TechCode.OTHER])


def speed_tier(download_mbps: float) -> str:
    """Classify a download speed into a consumer-facing tier.

    Args:
        download_mbps: Maximum advertised download speed in Mbps.

    Returns:
        One of "Gigabit+", "Very Fast", "Fast", "Good", or "Basic".
    """
    if download_mbps >= 1000:
        return "Gigabit+"
    if download_mbps >= 500:
        return "Very Fast"
    if download_mbps >= 100:
        return "Fast"
    if download_mbps >= 25:
        return "Good"
    return "Basic"


def format_speed(mbps: float) -> str:
    """Format a speed for display, switching to Gbps at 1000 Mbps.

    Examples:
        >>> format_speed(1000)
        '1 Gbps'
        >>> format_speed(2500)
        '2.5 Gbps'
        >>> format_speed(300)
        '300 Mbps'
    """
    if mbps >= 1000:
        gbps = mbps / 1000
        return f"{gbps:.0f} Gbps" if gbps.is_integer() else f"{gbps:.1f} Gbps"
    return f"{mbps:g} Mbps"
