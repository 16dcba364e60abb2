"""
Spec schemas - the documents azorch deploys.

A Spec is an opaque, versioned document with a stable URI. Only the JobSpec
variant can be deployed to Azkaban; TopologySpec describes executor topology
and is rejected by the translator.

Spec config is a flat bag of dotted keys ("azkaban.project.flow_name").
Nested mappings in a spec file are flattened on load.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml


def flatten_config(data: Mapping[str, Any], prefix: str = "") -> dict[str, Any]:
    """Flatten nested mappings into dotted keys."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, Mapping):
            flat.update(flatten_config(value, prefix=f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


@dataclass(frozen=True)
class Spec:
    """
    Base spec: identity and version.

    Attributes:
        uri: Stable identifier, e.g. "flows/etl-job-1"
        version: Version of the spec document
        description: Free-form description
    """
    uri: str
    version: str = "1"
    description: str = ""

    def __post_init__(self):
        if not self.uri:
            raise ValueError("Spec uri is required")


@dataclass(frozen=True)
class JobSpec(Spec):
    """
    A job spec: a schedulable unit of work plus its config bag.

    Attributes:
        config: Flat config bag (dotted keys)
        template_uri: Optional URI of the template the spec was resolved from
    """
    config: dict[str, Any] = field(default_factory=dict)
    template_uri: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON/YAML output."""
        return {
            "kind": "job",
            "uri": self.uri,
            "version": self.version,
            "description": self.description,
            "config": dict(self.config),
            **({"template_uri": self.template_uri} if self.template_uri else {}),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "JobSpec":
        """Deserialize from dictionary, flattening nested config."""
        if "uri" not in data:
            raise ValueError("JobSpec requires 'uri'")
        return cls(
            uri=str(data["uri"]),
            version=str(data.get("version", "1")),
            description=data.get("description", ""),
            config=flatten_config(data.get("config") or {}),
            template_uri=data.get("template_uri"),
        )


@dataclass(frozen=True)
class TopologySpec(Spec):
    """Spec describing an executor topology. Not deployable as a job."""
    executor_uri: Optional[str] = None


def load_spec(path: Path) -> Spec:
    """
    Load a spec document from a YAML or JSON file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the document is not a known spec kind
    """
    if not path.exists():
        raise FileNotFoundError(f"Spec file not found: {path}")

    text = path.read_text()
    if path.suffix == ".json":
        data = json.loads(text)
    else:
        data = yaml.safe_load(text)

    if not isinstance(data, Mapping):
        raise ValueError(f"Spec file must contain a mapping: {path}")

    kind = data.get("kind", "job")
    if kind == "job":
        return JobSpec.from_dict(data)
    if kind == "topology":
        return TopologySpec(
            uri=str(data["uri"]),
            version=str(data.get("version", "1")),
            description=data.get("description", ""),
            executor_uri=data.get("executor_uri"),
        )
    raise ValueError(f"Unknown spec kind: {kind!r}")
