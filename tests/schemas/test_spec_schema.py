"""Tests for spec schemas and spec file loading."""

import json

import pytest
import yaml

from azorch.schemas import JobSpec, TopologySpec, flatten_config, load_spec


class TestFlattenConfig:
    def test_nested_to_dotted(self):
        assert flatten_config({"azkaban": {"project": {"flow_name": "x"}}, "command": "c"}) == {
            "azkaban.project.flow_name": "x",
            "command": "c",
        }

    def test_already_flat(self):
        assert flatten_config({"azkaban.schedule.cron": "0 0 0 ? * *"}) == {
            "azkaban.schedule.cron": "0 0 0 ? * *"
        }


class TestJobSpec:
    def test_requires_uri(self):
        with pytest.raises(ValueError, match="uri"):
            JobSpec(uri="")

    def test_from_dict_flattens(self):
        spec = JobSpec.from_dict({
            "uri": "etl-job-1",
            "version": 3,
            "config": {"azkaban": {"project": {"overwrite_if_exists": True}}},
        })

        assert spec.version == "3"
        assert spec.config == {"azkaban.project.overwrite_if_exists": True}

    def test_from_dict_missing_uri(self):
        with pytest.raises(ValueError, match="requires 'uri'"):
            JobSpec.from_dict({"version": "1"})

    def test_to_dict_round_trip(self):
        spec = JobSpec(uri="a", version="2", description="d", config={"k": "v"}, template_uri="templates/t")

        assert JobSpec.from_dict(spec.to_dict()) == spec

    def test_frozen(self):
        spec = JobSpec(uri="a")
        with pytest.raises(AttributeError):
            spec.uri = "b"


class TestLoadSpec:
    def test_yaml(self, tmp_path):
        path = tmp_path / "spec.yaml"
        path.write_text(yaml.dump({"uri": "a", "config": {"command": "c"}}))

        spec = load_spec(path)

        assert isinstance(spec, JobSpec)
        assert spec.config == {"command": "c"}

    def test_json(self, tmp_path):
        path = tmp_path / "spec.json"
        path.write_text(json.dumps({"uri": "a"}))

        assert load_spec(path) == JobSpec(uri="a")

    def test_topology(self, tmp_path):
        path = tmp_path / "t.yaml"
        path.write_text(yaml.dump({"kind": "topology", "uri": "t", "executor_uri": "azkaban://x"}))

        spec = load_spec(path)

        assert isinstance(spec, TopologySpec)
        assert spec.executor_uri == "azkaban://x"

    def test_unknown_kind(self, tmp_path):
        path = tmp_path / "x.yaml"
        path.write_text(yaml.dump({"kind": "flow", "uri": "x"}))

        with pytest.raises(ValueError, match="Unknown spec kind"):
            load_spec(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_spec(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(ValueError, match="mapping"):
            load_spec(path)
