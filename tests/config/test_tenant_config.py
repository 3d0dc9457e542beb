"""Tests for tenant configuration: schema validation, YAML loading, active config."""

import pytest
import yaml

from ledger_config import (
    CONFIG_PATH_ENV,
    DeliveryConfig,
    ReportingConfig,
    TenantConfig,
    compute_checksum,
    get_active_config,
    load_config,
    reset_active_config,
)
from ledger_config.loader import load_yaml_file
from ledger_kernel.exceptions import ConfigurationError

TENANT_YAML = """\
reporting:
  entity_name: RCM Hardware & Co
  alert_threshold_days: 21
  ledger_rows_per_page: 20
delivery:
  country_code: "44"
  native_max_payload_bytes: 5000000
"""


@pytest.fixture
def tenant_file(tmp_path):
    path = tmp_path / "tenant.yaml"
    path.write_text(TENANT_YAML)
    return path


class TestDefaults:
    def test_reporting_defaults(self):
        config = TenantConfig.with_defaults().reporting
        assert config.alert_threshold_days == 15
        assert config.dashboard_alert_days == 10
        assert config.ledger_rows_per_page == 17
        assert config.invoice_rows_per_page == 14
        assert config.stock_rows_per_page == 8
        assert config.default_narration == "TRANSACTION"

    def test_delivery_defaults(self):
        config = TenantConfig.with_defaults().delivery
        assert config.country_code == "91"
        assert config.local_number_digits == 10
        assert config.native_max_payload_bytes is None
        assert config.deep_link_template == "whatsapp://send?phone={phone}&text={text}"

    def test_frozen(self):
        config = ReportingConfig()
        with pytest.raises(AttributeError):
            config.entity_name = "Other"


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"currency": "RUPEE"},
            {"alert_threshold_days": -1},
            {"dashboard_alert_days": -5},
            {"ledger_rows_per_page": 0},
            {"invoice_rows_per_page": -3},
            {"stock_rows_per_page": 0},
        ],
    )
    def test_reporting_rejects(self, kwargs):
        with pytest.raises(ValueError):
            ReportingConfig(**kwargs)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"country_code": "+91"},
            {"local_number_digits": 0},
            {"deep_link_template": "whatsapp://send?text={text}"},
            {"native_max_payload_bytes": 0},
        ],
    )
    def test_delivery_rejects(self, kwargs):
        with pytest.raises(ValueError):
            DeliveryConfig(**kwargs)


class TestFromDict:
    def test_partial_sections_keep_defaults(self):
        config = TenantConfig.from_dict({"reporting": {"entity_name": "RCM"}})
        assert config.reporting.entity_name == "RCM"
        assert config.reporting.alert_threshold_days == 15
        assert config.delivery == DeliveryConfig()

    def test_empty_section(self):
        assert TenantConfig.from_dict({"delivery": None}) == TenantConfig()

    def test_unknown_top_level_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            TenantConfig.from_dict({"metrics": {}})
        assert exc_info.value.key == "tenant.metrics"

    def test_unknown_section_key(self):
        with pytest.raises(ConfigurationError) as exc_info:
            TenantConfig.from_dict({"reporting": {"alert_treshold_days": 20}})
        assert exc_info.value.key == "reporting.alert_treshold_days"
        assert exc_info.value.reason == "unknown key"

    def test_section_must_be_mapping(self):
        with pytest.raises(ConfigurationError) as exc_info:
            TenantConfig.from_dict({"delivery": ["91"]})
        assert exc_info.value.key == "delivery"

    def test_invalid_value_wrapped(self):
        with pytest.raises(ConfigurationError) as exc_info:
            TenantConfig.from_dict({"reporting": {"ledger_rows_per_page": 0}})
        assert exc_info.value.key == "reporting"
        assert "ledger_rows_per_page" in exc_info.value.reason

    def test_round_trip_through_to_dict(self):
        config = TenantConfig.from_dict({"reporting": {"entity_name": "RCM"}})
        assert TenantConfig.from_dict(config.to_dict()) == config


class TestLoader:
    def test_load_config(self, tenant_file):
        config = load_config(tenant_file)
        assert config.reporting.entity_name == "RCM Hardware & Co"
        assert config.reporting.alert_threshold_days == 21
        assert config.reporting.ledger_rows_per_page == 20
        assert config.delivery.country_code == "44"
        assert config.delivery.native_max_payload_bytes == 5_000_000

    def test_load_logs_checksum(self, tenant_file, captured_logs):
        config = load_config(tenant_file)
        record = next(r for r in captured_logs() if r["message"] == "tenant_config_loaded")
        assert record["checksum"] == compute_checksum(config)

    def test_empty_file_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_config(path) == TenantConfig()

    def test_non_mapping_document(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- reporting\n- delivery\n")
        with pytest.raises(ConfigurationError):
            load_yaml_file(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("reporting: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")


class TestChecksum:
    def test_deterministic(self, tenant_file):
        assert compute_checksum(load_config(tenant_file)) == compute_checksum(load_config(tenant_file))

    def test_changes_with_content(self):
        a = TenantConfig()
        b = TenantConfig(reporting=ReportingConfig(entity_name="Other"))
        assert compute_checksum(a) != compute_checksum(b)

    def test_dict_key_order_irrelevant(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})


class TestActiveConfig:
    def test_defaults_without_env(self, monkeypatch):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        assert get_active_config() == TenantConfig()

    def test_loads_from_env(self, monkeypatch, tenant_file):
        monkeypatch.setenv(CONFIG_PATH_ENV, str(tenant_file))
        assert get_active_config().reporting.alert_threshold_days == 21

    def test_cached_until_reset(self, monkeypatch, tenant_file):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        first = get_active_config()
        monkeypatch.setenv(CONFIG_PATH_ENV, str(tenant_file))
        assert get_active_config() is first

        reset_active_config()
        assert get_active_config().reporting.entity_name == "RCM Hardware & Co"

    def test_logs_source(self, monkeypatch, captured_logs):
        monkeypatch.delenv(CONFIG_PATH_ENV, raising=False)
        get_active_config()
        record = next(r for r in captured_logs() if r["message"] == "active_config_resolved")
        assert record["source"] == "defaults"
        assert record["logger"] == "ledger_kernel.config"
