"""
Report serialization.

Renders an assembled TestReport as XML, JSON or HTML. Documents are always
rendered completely in memory before anything touches the filesystem, so a
failed run never leaves a truncated report behind.
"""

import json
import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from .errors import ReportFormatError
from .models import Counts, TestReport, Timing

TEMPLATE_DIR = Path(__file__).parent / "templates"

# Characters XML 1.0 cannot carry, e.g. terminal escape sequences in test output
_XML_INVALID = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _clean(text: str) -> str:
    return _XML_INVALID.sub("", text)


def _count_attrs(counts: Counts) -> Dict[str, str]:
    return {key: str(value) for key, value in counts.to_dict().items()}


def _timing_attrs(timing: Optional[Timing]) -> Dict[str, str]:
    if timing is None:
        return {}
    return {
        "start-time": timing.start_time,
        "end-time": timing.end_time,
        "duration": timing.duration,
    }


def _add_output(parent: ET.Element, output: str) -> None:
    if output:
        ET.SubElement(parent, "output").text = _clean(output)


def render_xml(report: TestReport) -> str:
    """Render the report as an indented XML document."""
    root = ET.Element(
        "report",
        {"created": report.created.isoformat(timespec="seconds"), **_count_attrs(report.counts)},
    )

    for package in report.packages:
        attrs = {"name": _clean(package.name)}
        if package.action:
            attrs["action"] = _clean(package.action)
        attrs.update(_timing_attrs(package.timing))
        attrs.update(_count_attrs(package.counts))
        package_element = ET.SubElement(root, "package", attrs)
        _add_output(package_element, package.output)

        for unit in package.tests:
            unit_attrs = {"name": _clean(unit.name), "action": _clean(unit.action)}
            unit_attrs.update(_timing_attrs(unit.timing))
            unit_element = ET.SubElement(package_element, "test", unit_attrs)
            _add_output(unit_element, unit.output)

    ET.indent(root, space="\t")
    body = ET.tostring(root, encoding="unicode")
    return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}\n'


def render_json(report: TestReport) -> str:
    """Render the report as an indented JSON document."""
    return json.dumps(report.to_dict(), indent=2, ensure_ascii=False) + "\n"


def render_html(report: TestReport, template_dir: Optional[Path] = None) -> str:
    """Render the report as a standalone HTML page."""
    env = Environment(
        loader=FileSystemLoader(str(template_dir or TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
    )
    template = env.get_template("report.html")
    return template.render(report=report)


RENDERERS: Dict[str, Callable[[TestReport], str]] = {
    "xml": render_xml,
    "json": render_json,
    "html": render_html,
}

REPORT_FORMATS = tuple(RENDERERS)


def render_report(report: TestReport, fmt: str = "xml") -> str:
    """
    Render the report in the requested format.

    Raises:
        ReportFormatError: If the format is not one of REPORT_FORMATS
    """
    renderer = RENDERERS.get(fmt.lower())
    if renderer is None:
        raise ReportFormatError(
            f"unsupported report format {fmt!r}; expected one of {', '.join(REPORT_FORMATS)}"
        )
    return renderer(report)


def write_report(report: TestReport, path: Union[str, Path], fmt: str = "xml") -> Path:
    """
    Render the report and write it to path.

    Parent directories are created as needed, after rendering and encoding
    succeeded.

    Returns:
        The path written

    Raises:
        ReportFormatError: If the format is unknown or the report cannot be
            encoded
    """
    content = render_report(report, fmt)
    try:
        data = content.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ReportFormatError(f"{fmt} report cannot be encoded as UTF-8: {e.reason}") from e
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    logger.info("Wrote {} report to {}", fmt, path)
    return path
