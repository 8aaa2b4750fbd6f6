"""
MS Project XML export -> raw task records.
Uses stdlib xml.etree.ElementTree; tasks live under the
http://schemas.microsoft.com/project namespace.
"""

import re
from typing import List, Optional, Union
from xml.etree.ElementTree import Element, ParseError, fromstring

from loguru import logger

from tasks.models import RawTask

from .errors import IngestError

NS = "http://schemas.microsoft.com/project"
DEFAULT_HOURS_PER_DAY = 8.0

_DURATION_RE = re.compile(
    r"^P(?:(?P<days>\d+(?:\.\d+)?)D)?"
    r"(?:T(?:(?P<hours>\d+(?:\.\d+)?)H)?(?:(?P<minutes>\d+(?:\.\d+)?)M)?(?:(?P<seconds>\d+(?:\.\d+)?)S)?)?$"
)


def parse_duration_hours(text: Optional[str]) -> float:
    """ISO 8601 duration ('PT16H0M0S', 'P1DT4H') -> hours. Blank or malformed -> 0."""
    if not text:
        return 0.0
    m = _DURATION_RE.match(text.strip())
    if not m:
        logger.debug("Unrecognized duration {!r}, using 0", text)
        return 0.0
    parts = {k: float(v) if v else 0.0 for k, v in m.groupdict().items()}
    return parts["days"] * 24 + parts["hours"] + parts["minutes"] / 60 + parts["seconds"] / 3600


def _text(node: Element, tag: str) -> Optional[str]:
    return node.findtext(f"{{{NS}}}{tag}")


def parse_project_xml(xml_content: Union[str, bytes], hours_per_day: float = DEFAULT_HOURS_PER_DAY) -> List[RawTask]:
    """
    Parse <Task> elements into RawTask records (duration converted to days).
    Nameless rows are dropped; outline level is passed through unparsed so the
    builder can classify summary/invalid rows.
    """
    try:
        root = fromstring(xml_content)
    except ParseError as e:
        raise IngestError(f"Invalid project XML: {e}") from e

    records: List[RawTask] = []
    for node in root.iter(f"{{{NS}}}Task"):
        name = _text(node, "Name")
        if not name:
            continue
        pred_ids = [
            (link.text or "").strip()
            for link in node.iterfind(f"{{{NS}}}PredecessorLink/{{{NS}}}PredecessorUID")
        ]
        records.append(RawTask(
            id=_text(node, "UID"),
            name=name,
            critical=_text(node, "Critical"),
            start=_text(node, "Start"),
            finish=_text(node, "Finish"),
            duration=parse_duration_hours(_text(node, "Duration")) / hours_per_day,
            outline_level=_text(node, "OutlineLevel"),
            wbs=_text(node, "WBS") or "",
            predecessor_uids=[p for p in pred_ids if p],
        ))

    if not records:
        logger.warning("No task nodes found in XML")
    return records
