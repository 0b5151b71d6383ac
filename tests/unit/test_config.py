"""
Tests for configuration loading and PipelineConfig.
"""

import pytest
import yaml

from readerfirst.core.pipeline import PipelineConfig
from readerfirst.utils.cache import TRANSLATIONS
from readerfirst.utils.config_loader import get_default_config, load_config, merge_config, save_config


class TestLoadConfig:

    def test_yaml_layered_over_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({"translation": {"provider": "deepl"}}), encoding="utf-8")

        config = load_config(str(path))

        assert config["translation"]["provider"] == "deepl"
        assert config["translation"]["target_lang"] == "pt-BR"
        assert config["retry"] == {"retries": 3, "base_delay": 0.5}

    def test_environment_overrides(self, tmp_path, monkeypatch):
        path = tmp_path / "config.yaml"
        path.write_text("{}", encoding="utf-8")
        monkeypatch.setenv("DEEPL_API_KEY", "dl-env")
        monkeypatch.setenv("TRANSLATION_PROVIDER", "deepl")
        monkeypatch.setenv("AI_MODEL", "gpt-4o")

        config = load_config(str(path))

        assert config["api_keys"]["deepl"] == "dl-env"
        assert config["translation"]["provider"] == "deepl"
        assert config["translation"]["model"] == "gpt-4o"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "nope.yaml"))

    def test_save_and_reload(self, tmp_path):
        path = tmp_path / "nested" / "config.yaml"
        config = get_default_config()
        config["cache"]["use_disk"] = False

        save_config(config, str(path))

        assert load_config(str(path))["cache"]["use_disk"] is False

    def test_merge_is_recursive(self):
        merged = merge_config({"a": {"x": 1, "y": 2}}, {"a": {"y": 3}, "b": 4})
        assert merged == {"a": {"x": 1, "y": 3}, "b": 4}


class TestPipelineConfig:

    def test_defaults_are_valid(self):
        config = PipelineConfig()
        assert config.validate() == []
        assert config.max_concurrency == 1
        assert config.cache_namespace == TRANSLATIONS

    def test_validation_issues(self):
        config = PipelineConfig(provider="google", max_concurrency=0, retries=0, base_delay=-1)
        assert len(config.validate()) == 4

    def test_other_target_language_gets_own_namespace(self):
        assert PipelineConfig(target_lang="es").cache_namespace == "translations-es"

    def test_from_dict(self, tmp_path):
        config = get_default_config()
        config["translation"].update({"provider": "deepl", "max_concurrency": 4})
        config["api_keys"] = {"openai": "sk-test", "deepl": "dl-test"}
        config["cache"]["directory"] = str(tmp_path)

        settings = PipelineConfig.from_dict(config)

        assert settings.provider == "deepl"
        assert settings.api_key == "dl-test"
        assert settings.enhancement_api_key == "sk-test"
        assert settings.max_concurrency == 4
        assert settings.cache_dir == tmp_path
        assert settings.provider_config.model is None
        assert settings.retry_policy.delay_for(1) == 1.0
