#!/usr/bin/env python3
"""
Tests for configuration loading and validation.
"""

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError
from sqlalchemy.engine import make_url

from core.config_loader import (
    AppConfig,
    FactorWeights,
    MatchingConfig,
    ScoringConfig,
    load_config,
)


class TestScoringConfig:

    def test_default_weights_sum_to_100(self):
        weights = FactorWeights()
        total = (weights.location + weights.skill + weights.experience
                 + weights.availability + weights.rating + weights.keyword)
        assert total == 100

    def test_weights_must_sum_to_100(self):
        with pytest.raises(ValidationError):
            FactorWeights(location=50)

    def test_default_bonus_tables(self):
        config = ScoringConfig()
        assert config.work_status_bonus == {
            'RUSHING': 15, 'IDLE': 5, 'BOOKED': 0, 'IN_SERVICE': -5, 'OFF_DUTY': -100
        }
        assert config.membership_bonus == {'DIAMOND': 10, 'GOLD': 5, 'SILVER': 2, 'STANDARD': 0}
        assert config.max_total_score == 100

    def test_bonus_keys_are_uppercased(self):
        config = ScoringConfig(work_status_bonus={'rushing': 20}, membership_bonus={'gold': '7'})
        assert config.work_status_bonus == {'RUSHING': 20.0}
        assert config.membership_bonus == {'GOLD': 7.0}

    def test_scoring_config_is_immutable(self):
        config = ScoringConfig()
        with pytest.raises(ValidationError):
            config.max_total_score = 50


class TestMatchingConfig:

    def test_thresholds(self):
        config = MatchingConfig()
        assert config.min_match_score == 35
        assert config.rushing_min_score == 25

    def test_custom_offset(self):
        config = MatchingConfig(min_match_score=50, rushing_score_offset=5)
        assert config.rushing_min_score == 45

    def test_limits(self):
        config = MatchingConfig()
        assert config.default_search_limit == 20
        assert config.max_search_limit == 100
        assert config.match_list_limit == 50
        assert config.pending_notification_limit == 100


class TestLoadConfig:

    @pytest.fixture(autouse=True)
    def _clear_env(self, monkeypatch):
        for name in ("DATABASE_URL", "REDIS_URL", "WEB_HOST", "WEB_PORT"):
            monkeypatch.delenv(name, raising=False)

    def test_load_from_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            'database': {'url': 'postgresql://u:p@db:5432/matching'},
            'matching': {
                'min_match_score': 40,
                'scorer': {'membership_bonus': {'DIAMOND': 12}},
            },
            'schedule': {'rushing_sweep_interval_seconds': 60},
        }))

        config = load_config(str(path))

        assert isinstance(config, AppConfig)
        assert config.database.url == 'postgresql://u:p@db:5432/matching'
        assert config.matching.min_match_score == 40
        assert config.matching.rushing_min_score == 30
        assert config.matching.scorer.membership_bonus == {'DIAMOND': 12.0}
        assert config.schedule.rushing_sweep_interval_seconds == 60
        assert config.notifications.enabled is False

    def test_env_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("database:\nweb:\n  port: 9000\n")
        monkeypatch.setenv("DATABASE_URL", "postgresql://env/db")
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
        monkeypatch.setenv("WEB_PORT", "8181")

        config = load_config(str(path))

        assert config.database.url == "postgresql://env/db"
        assert config.notifications.redis_url == "redis://cache:6379/1"
        assert config.web.port == 8181

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        config = load_config(str(path))

        assert config.matching.min_match_score == 35
        assert config.schedule.rushing_sweep_interval_seconds == 300
        assert config.web.port == 8080

    def test_invalid_weights_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            'matching': {'scorer': {'weights': {'location': 90}}}
        }))

        with pytest.raises(ValidationError):
            load_config(str(path))

    def test_default_urls_name_the_psycopg2_driver(self):
        project_config = Path(__file__).parents[4] / "config.yaml"

        for url in (AppConfig().database.url, load_config(str(project_config)).database.url):
            assert make_url(url).get_driver_name() == "psycopg2"
