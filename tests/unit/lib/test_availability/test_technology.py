"""Unit tests for technology metadata and speed presentation."""

import pytest

from broadband_api.lib.availability import TechCode, format_speed, speed_tier, tech_meta


class TestTechMeta:
    """Tests for tech_meta()."""

    def test_known_codes(self) -> None:
        assert tech_meta(TechCode.FIBER).label == "Fiber"
        assert tech_meta(40).label == "Cable"
        assert tech_meta(10).label == "DSL"

    def test_variants_share_labels(self) -> None:
        assert tech_meta(60).label == tech_meta(61).label == "Satellite"
        assert tech_meta(70).label == tech_meta(71).label == tech_meta(72).label == "Fixed Wireless"

    def test_unknown_code_falls_back_to_other(self) -> None:
        assert tech_meta(999) == tech_meta(TechCode.OTHER)
        assert tech_meta(999).label == "Other"


class TestSpeedTier:
    """Tests for speed_tier()."""

    @pytest.mark.parametrize(
        ("mbps", "tier"),
        [
            (2000, "Gigabit+"),
            (1000, "Gigabit+"),
            (999.9, "Very Fast"),
            (500, "Very Fast"),
            (100, "Fast"),
            (25, "Good"),
            (24.9, "Basic"),
            (0, "Basic"),
        ],
    )
    def test_tiers(self, mbps: float, tier: str) -> None:
        assert speed_tier(mbps) == tier


class TestFormatSpeed:
    """Tests for format_speed()."""

    @pytest.mark.parametrize(
        ("mbps", "text"),
        [
            (1000, "1 Gbps"),
            (2500, "2.5 Gbps"),
            (300, "300 Mbps"),
            (0.2, "0.2 Mbps"),
        ],
    )
    def test_format(self, mbps: float, text: str) -> None:
        assert format_speed(mbps) == text
