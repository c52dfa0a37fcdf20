"""Unit tests for collapsing provider observations."""

from broadband_api.lib.availability import ProviderAvailability, collapse_observations


def _obs(provider_id: str = "1", tech: int = 50, down: float = 100.0, up: float = 10.0, **kw) -> ProviderAvailability:
    return ProviderAvailability(
        provider_id=provider_id,
        provider_name=kw.get("name", f"Provider {provider_id}"),
        technology_code=tech,
        max_download_speed=down,
        max_upload_speed=up,
        low_latency=kw.get("low_latency", True),
    )


class TestCollapseObservations:
    """Tests for collapse_observations()."""

    def test_duplicates_keep_max_speed_regardless_of_order(self) -> None:
        slow = _obs(down=100.0, up=20.0)
        fast = _obs(down=250.0, up=10.0)

        for rows in ([slow, fast], [fast, slow]):
            result = collapse_observations(rows)
            assert len(result) == 1
            assert result[0].max_download_speed == 250.0
            assert result[0].max_upload_speed == 20.0

    def test_low_latency_is_or_of_group(self) -> None:
        result = collapse_observations([_obs(low_latency=False), _obs(low_latency=True)])
        assert result[0].low_latency is True

        result = collapse_observations([_obs(low_latency=False), _obs(low_latency=False)])
        assert result[0].low_latency is False

    def test_same_provider_different_technology_kept_separate(self) -> None:
        result = collapse_observations([_obs(tech=50, down=500.0), _obs(tech=40, down=200.0)])
        assert [(p.technology_code, p.max_download_speed) for p in result] == [(50, 500.0), (40, 200.0)]

    def test_ordered_by_descending_download(self) -> None:
        rows = [
            _obs(provider_id="2", tech=40, down=200.0, up=10.0),
            _obs(provider_id="3", tech=10, down=25.0, up=3.0),
            _obs(provider_id="1", tech=50, down=500.0, up=500.0),
        ]
        result = collapse_observations(rows)
        assert [p.provider_id for p in result] == ["1", "2", "3"]

    def test_ties_broken_by_name(self) -> None:
        rows = [_obs(provider_id="b", name="Zeta", down=100.0), _obs(provider_id="a", name="Alpha", down=100.0)]
        assert [p.provider_name for p in collapse_observations(rows)] == ["Alpha", "Zeta"]

    def test_empty(self) -> None:
        assert collapse_observations([]) == []
