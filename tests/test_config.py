"""Tests for configuration loading and discovery."""

import yaml

from coop_assessment.config import (
    AssessmentConfig,
    find_config_file,
    get_config,
    load_config,
    reset_config,
    save_default_config,
)


class TestDefaults:

    def test_default_values(self):
        config = get_config()
        assert config.taxonomy_path is None
        assert config.recommendations.low_tier_max == 2.5
        assert config.recommendations.mid_tier_max == 3.5
        assert [k.keyword for k in config.recommendations.axis_keywords] == [
            "Marketing", "Opérationnel", "Stratégique",
        ]
        assert config.interpretation.out_of_range_label == "Hors échelle"
        assert config.scoring.overall_precision == 2
        assert config.scoring.cooperative_score_factor == 20

    def test_get_config_is_shared(self):
        assert get_config() is get_config()


class TestLoadConfig:

    def test_partial_file_keeps_defaults(self, tmp_path):
        path = tmp_path / "assessment-config.yaml"
        path.write_text(
            "recommendations:\n  low_tier_max: 2.0\ntaxonomy_path: /data/taxonomy.json\n",
            encoding="utf-8",
        )
        config = load_config(path)
        assert config.recommendations.low_tier_max == 2.0
        assert config.recommendations.mid_tier_max == 3.5
        assert config.taxonomy_path == "/data/taxonomy.json"
        assert get_config() is config

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path) == AssessmentConfig()

    def test_reset(self, tmp_path):
        path = tmp_path / "c.yaml"
        path.write_text("scoring:\n  overall_precision: 1\n", encoding="utf-8")
        load_config(path)
        reset_config()
        assert get_config().scoring.overall_precision == 2


class TestSaveDefaultConfig:

    def test_round_trips(self, tmp_path):
        path = tmp_path / "nested" / "assessment-config.yaml"
        save_default_config(path)

        text = path.read_text(encoding="utf-8")
        assert text.startswith("# Cooperative Assessment Configuration")
        assert "Opérationnel" in text
        assert AssessmentConfig.model_validate(yaml.safe_load(text)) == AssessmentConfig()


class TestFindConfigFile:

    def test_env_variable_wins(self, tmp_path, monkeypatch):
        path = tmp_path / "custom.yaml"
        path.write_text("{}", encoding="utf-8")
        monkeypatch.setenv("COOP_ASSESSMENT_CONFIG", str(path))
        assert find_config_file() == path

    def test_current_directory(self, tmp_path, monkeypatch):
        monkeypatch.delenv("COOP_ASSESSMENT_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / "assessment-config.yml").write_text("{}", encoding="utf-8")
        assert find_config_file().name == "assessment-config.yml"

    def test_none_found(self, tmp_path, monkeypatch):
        monkeypatch.delenv("COOP_ASSESSMENT_CONFIG", raising=False)
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("HOME", str(tmp_path))
        assert find_config_file() is None
