"""
Tests for configuration loading and the target URI builders.
"""

import json

import pytest

from m0_converter.cli.helpers import load_config
from m0_converter.config import ConverterConfig
from m0_converter.shared.models import EntityType


@pytest.mark.unit
class TestConverterConfig:

    def test_defaults(self):
        config = ConverterConfig()
        assert config.pool_start == 1001
        assert config.pool_end == 1999
        assert config.reserved_counts == {"serie": 43, "operation": 204}
        assert config.exempt_types == ["famille"]
        assert config.series_fixed_ids == {135: "1241", 136: "1195", 137: "1284"}
        assert config.organization_overrides == {81: "Drees"}

    def test_from_dict(self):
        config = ConverterConfig.from_dict({
            "source": {"dataset": "m0.trig", "schema": "sims.csv", "msd": "msd.ttl"},
            "allocation": {"pool_start": 2001, "pool_end": 2999, "reserved": {"serie": 2}},
            "fixed_mappings": {"operation": {"12": "1010"}, "dds": {"ENQ-LOG": "1001"}},
            "organization_overrides": {"5": "Dares"},
            "geo": {"api_url": "https://api.example.org/", "code_list": "9"},
            "include_indicator_attachments": True,
        })
        assert config.dataset_path == "m0.trig"
        assert config.pool_start == 2001
        assert config.reserved_counts == {"serie": 2}
        assert config.operation_fixed_ids == {12: "1010"}
        assert config.dds_fixed_ids == {"ENQ-LOG": "1001"}
        assert config.organization_overrides == {5: "Dares"}
        assert config.geo_code_list == 9
        assert config.include_indicator_attachments

    def test_from_none(self):
        assert ConverterConfig.from_dict(None) == ConverterConfig()

    @pytest.mark.parametrize("config_dict", [
        {"allocation": {"pool_start": 0}},
        {"allocation": {"pool_start": 10, "pool_end": 5}},
        {"allocation": {"reserved": {"unknown": 3}}},
        {"allocation": {"reserved": {"serie": -1}}},
        {"allocation": {"exempt": ["unknown"]}},
        {"source": "not a section"},
    ])
    def test_invalid_values(self, config_dict):
        with pytest.raises(ValueError):
            ConverterConfig.from_dict(config_dict)

    def test_uri_builders(self):
        config = ConverterConfig()
        assert config.target_uri(1001, EntityType.SERIES) == "http://id.insee.fr/operations/serie/s1001"
        assert config.target_uri(1, EntityType.FAMILY) == "http://id.insee.fr/operations/famille/s1"
        assert config.target_uri(1003, EntityType.INDICATOR) == "http://id.insee.fr/produits/indicateur/p1003"
        assert config.report_uri(1580) == "http://id.insee.fr/qualite/rapport/1580"
        assert config.report_graph_uri(1580) == "http://rdf.insee.fr/graphes/qualite/rapport/1580"
        assert config.link_uri(54) == "http://id.insee.fr/qualite/document/54"
        assert config.unit_uri("DG75-D130") == "http://id.insee.fr/organisations/insee/DG75-D130"


@pytest.mark.unit
class TestLoadConfig:

    def test_load(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"output_dir": "out"}), encoding="utf-8")
        assert load_config(str(path)) == {"output_dir": "out"}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "config.json"))

    def test_extension(self, tmp_path):
        with pytest.raises(ValueError, match=".json extension"):
            load_config(str(tmp_path / "config.yaml"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{invalid", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_config(str(path))

    def test_not_an_object(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(ValueError, match="JSON object"):
            load_config(str(path))
