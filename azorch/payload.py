"""
Project payload builder.

Azkaban projects are uploaded as a zip archive. azorch generates a single
<flow_name>.job file from the descriptor's job properties; that job is the
flow's entry point, which the schedule then refers to by flow name.
"""

import io
import zipfile

from azorch.schemas import AzkabanProjectConfig

# Fixed timestamp keeps the archive bytes stable for identical specs
_ZIP_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def _escape(text: str, is_key: bool = False) -> str:
    """Escape a string for a Java-style .properties file."""
    out = text.replace("\\", "\\\\").replace("\n", "\\n").replace("\r", "\\r").replace("\t", "\\t")
    if is_key:
        out = out.replace("=", "\\=").replace(":", "\\:").replace(" ", "\\ ")
    return out


def render_job_file(properties: dict[str, str]) -> str:
    """Render job properties as a .job file, "type" first and the rest sorted."""
    lines = []
    if "type" in properties:
        lines.append(f"type={_escape(properties['type'])}")
    for key in sorted(k for k in properties if k != "type"):
        lines.append(f"{_escape(key, is_key=True)}={_escape(properties[key])}")
    return "\n".join(lines) + "\n"


def job_file_name(project: AzkabanProjectConfig) -> str:
    """Name of the generated .job file."""
    return f"{project.flow_name}.job"


def build_project_zip(project: AzkabanProjectConfig) -> bytes:
    """
    Build the zip archive uploaded to Azkaban for a project.

    Returns:
        Archive bytes containing <flow_name>.job
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        info = zipfile.ZipInfo(job_file_name(project), date_time=_ZIP_DATE_TIME)
        info.compress_type = zipfile.ZIP_DEFLATED
        archive.writestr(info, render_job_file(project.job_properties))
    return buffer.getvalue()
