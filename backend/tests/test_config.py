from datetime import datetime

import pytest

from config import Configuration
from utils import mask_secret, time_of_day_bucket


def test_from_env_reads_variables(monkeypatch) -> None:
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "AIzaSyExampleKey1234")
    monkeypatch.setenv("FAIRNESS_RATIO", "1.5")
    monkeypatch.setenv("MAX_PER_BRAND", "3")
    monkeypatch.setenv("SEARCH_RADIUS_M", "8000")

    cfg = Configuration.from_env()

    assert cfg.google_maps_api_key == "AIzaSyExampleKey1234"
    assert cfg.fairness_ratio == 1.5
    assert cfg.max_per_brand == 3
    assert cfg.search_radius_m == 8000
    assert cfg.min_rating_count == 30


def test_overrides_win_over_environment(monkeypatch) -> None:
    monkeypatch.setenv("FAIRNESS_RATIO", "1.5")
    cfg = Configuration.from_env({"fairness_ratio": 3.0, "lang_default": None})
    assert cfg.fairness_ratio == 3.0
    assert cfg.lang_default == "en"


def test_require_places_api_key(monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_MAPS_API_KEY", raising=False)
    with pytest.raises(ValueError, match="GOOGLE_MAPS_API_KEY"):
        Configuration.from_env().require_places_api_key()


def test_log_summary_masks_key() -> None:
    summary = Configuration(google_maps_api_key="AIzaSyExampleKey1234").log_summary()
    assert "AIzaSyExampleKey1234" not in summary
    assert "AIza...1234" in summary


def test_mask_secret() -> None:
    assert mask_secret(None) == "unset"
    assert mask_secret("short") == "*****"


@pytest.mark.parametrize("hour,bucket", [(0, "morning"), (11, "morning"), (12, "afternoon"), (17, "afternoon"), (18, "evening")])
def test_time_of_day_bucket(hour: int, bucket: str) -> None:
    assert time_of_day_bucket(datetime(2024, 5, 1, hour, 0)) == bucket
