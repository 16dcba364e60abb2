"""Tests for the spec translator."""

import pytest

from azorch.config import AzorchConfig, DEFAULT_SCHEDULE_CRON
from azorch.errors import SpecTypeError
from azorch.schemas import JobSpec, TopologySpec
from azorch.translator import (
    MAX_PROJECT_NAME_LENGTH,
    construct_project_name,
    translate,
    trim_project_name,
)

DEFAULTS = {"azkaban.server.url": "http://azkaban:8081"}


class TestConstructProjectName:
    """Tests for project name derivation."""

    def test_prefix_and_uri(self):
        assert construct_project_name("etl-job-1", "azorch") == "azorch_etl-job-1"

    def test_no_prefix(self):
        assert construct_project_name("etl-job-1", "") == "etl-job-1"

    def test_underscores_become_dashes(self):
        assert construct_project_name("flows/etl_job", "azorch") == "azorch_flows_etl-job"

    def test_invalid_chars_become_underscores(self):
        assert construct_project_name("specs://flows/a.b", "") == "specs___flows_a_b"

    def test_deterministic(self):
        """The same URI always yields the same name."""
        uri = "flows/team/nightly_export"
        assert construct_project_name(uri) == construct_project_name(uri)

    def test_long_names_trimmed_with_digest(self):
        name = construct_project_name("x" * 100, "azorch")

        assert len(name) == MAX_PROJECT_NAME_LENGTH
        assert name == construct_project_name("x" * 100, "azorch")

    def test_long_names_stay_distinct(self):
        """Names sharing a long common prefix keep distinct digests."""
        a = trim_project_name("p" * 80 + "a")
        b = trim_project_name("p" * 80 + "b")

        assert a != b
        assert a[:55] == b[:55]

    def test_short_names_untouched(self):
        assert trim_project_name("short") == "short"


class TestTranslate:
    """Tests for translate()."""

    def test_basic_descriptor(self):
        spec = JobSpec(uri="etl-job-1", version="3", description="Nightly ETL",
                       config={"command": "run-etl"})

        project = translate(spec, DEFAULTS)

        assert project.server_url == "http://azkaban:8081"
        assert project.project_name == "azorch_etl-job-1"
        assert project.description == "Nightly ETL"
        assert project.flow_name == "main"
        assert project.schedule_cron == DEFAULT_SCHEDULE_CRON
        assert project.overwrite_if_exists is False
        assert project.spec_uri == "etl-job-1"
        assert project.spec_version == "3"
        assert project.manager_url == "http://azkaban:8081/manager?project=azorch_etl-job-1"

    def test_job_properties_exclude_azkaban_namespace(self):
        spec = JobSpec(uri="a", config={
            "command": "run",
            "retries": 3,
            "notify": True,
            "azkaban.project.flow_name": "nightly",
        })

        project = translate(spec, DEFAULTS)

        assert project.flow_name == "nightly"
        assert project.job_properties == {
            "type": "command",
            "command": "run",
            "retries": "3",
            "notify": "true",
        }

    def test_type_can_be_overridden(self):
        spec = JobSpec(uri="a", config={"type": "javaprocess", "java.class": "com.example.Main"})

        project = translate(spec, DEFAULTS)

        assert project.job_properties["type"] == "javaprocess"

    def test_spec_config_overrides_defaults(self):
        spec = JobSpec(uri="a", config={"azkaban.server.url": "http://other:8443"})

        assert translate(spec, DEFAULTS).server_url == "http://other:8443"

    def test_adapter_defaults(self):
        config = AzorchConfig(
            username="u", password="p", server_url="http://az:8081",
            name_prefix="team", group_admin_users=("data-eng", "ops"), user_to_proxy="etl",
        )

        project = translate(JobSpec(uri="a"), config.spec_defaults())

        assert project.project_name == "team_a"
        assert project.group_admin_users == ("data-eng", "ops")
        assert project.user_to_proxy == "etl"

    @pytest.mark.parametrize("key", ["azkaban.schedule.cron", "job.schedule"])
    def test_schedule_keys(self, key):
        spec = JobSpec(uri="a", config={key: "0 15 10 ? * MON-FRI"})

        assert translate(spec, DEFAULTS).schedule_cron == "0 15 10 ? * MON-FRI"

    def test_invalid_cron_rejected(self):
        spec = JobSpec(uri="a", config={"azkaban.schedule.cron": "*/5 * * * *"})

        with pytest.raises(SpecTypeError, match="Quartz cron"):
            translate(spec, DEFAULTS)

    @pytest.mark.parametrize("value,expected", [
        (True, True), ("true", True), ("YES", True), (False, False), ("false", False),
    ])
    def test_overwrite_flag(self, value, expected):
        spec = JobSpec(uri="a", config={"azkaban.project.overwrite_if_exists": value})

        assert translate(spec, DEFAULTS).overwrite_if_exists is expected

    def test_malformed_overwrite_flag(self):
        spec = JobSpec(uri="a", config={"azkaban.project.overwrite_if_exists": "sometimes"})

        with pytest.raises(SpecTypeError, match="must be a boolean"):
            translate(spec, DEFAULTS)

    def test_rejects_topology_spec(self):
        with pytest.raises(SpecTypeError, match="Only JobSpec"):
            translate(TopologySpec(uri="t"), DEFAULTS)

    def test_spec_type_error_is_type_error(self):
        with pytest.raises(TypeError):
            translate({"uri": "a"}, DEFAULTS)

    def test_requires_server_url(self):
        with pytest.raises(SpecTypeError, match="server URL"):
            translate(JobSpec(uri="a"))

    def test_invalid_flow_name(self):
        spec = JobSpec(uri="a", config={"azkaban.project.flow_name": "my flow"})

        with pytest.raises(SpecTypeError, match="invalid flow name"):
            translate(spec, DEFAULTS)

    def test_description_falls_back_to_uri(self):
        assert translate(JobSpec(uri="a"), DEFAULTS).description == "Deployed by azorch from a"
