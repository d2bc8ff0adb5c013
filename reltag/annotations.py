"""
Extract check-run annotations from build logs.

Compiler errors in a captured log become structured annotations that can
be attached to a check run. Matchers are declared as data: each pattern
maps regex groups to annotation fields.
"""

import re
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Optional

MATCHERS: List[Dict[str, Any]] = [
    {
        "name": "npm",
        "severity": "error",
        "patterns": [
            # TypeScript < 3.9: file:line:col - error TS1234: message.
            {
                "regexp": re.compile(r"^(.*):([0-9]+):([0-9]+)\s-\s([\S]+)\s(.*):\s(.*)\.$"),
                "groups": {"path": 1, "line": 2, "column": 3, "severity": 4, "title": 5, "message": 6},
            },
            # TypeScript 3.9+: file(line,col): error TS1234: message.
            {
                "regexp": re.compile(r"^(.*)\(([0-9]+),([0-9]+)\):\s([\S]+)\s(.*):\s(.*)\.$"),
                "groups": {"path": 1, "line": 2, "column": 3, "severity": 4, "title": 5, "message": 6},
            },
        ],
    },
]

SEVERITY_LEVELS = {
    "error": "failure",
    "warning": "warning",
    "warn": "warning",
    "info": "notice",
    "information": "notice",
}


@dataclass(frozen=True)
class Annotation:
    """A single annotation extracted from a log line."""
    path: str
    line: Optional[int]
    column: Optional[int]
    severity: str
    title: str
    message: str
    match: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def map_severity(severity: str) -> str:
    """Map a compiler severity to a check-run level (failure, warning, notice)."""
    return SEVERITY_LEVELS.get(severity.lower(), "notice")


def _group(match: re.Match, index: Optional[int]) -> Optional[str]:
    if index is None:
        return None
    return match.group(index)


def _to_int(value: Optional[str]) -> Optional[int]:
    return int(value) if value else None


def extract_annotations(log: str, matchers: Optional[List[Dict[str, Any]]] = None) -> List[Annotation]:
    """
    Extract annotations from a captured log.

    Every line is stripped and tried against every pattern of every
    matcher; results are grouped by pattern in declaration order.
    """
    matchers = MATCHERS if matchers is None else matchers
    lines = log.split("\n")
    annotations = []

    for matcher in matchers:
        for pattern in matcher["patterns"]:
            regexp = pattern["regexp"]
            groups = pattern["groups"]
            for line in lines:
                match = regexp.search(line.strip())
                if not match:
                    continue
                severity = _group(match, groups.get("severity")) or matcher.get("severity", "error")
                annotations.append(Annotation(
                    path=_group(match, groups.get("path")) or "",
                    line=_to_int(_group(match, groups.get("line"))),
                    column=_to_int(_group(match, groups.get("column"))),
                    severity=map_severity(severity),
                    title=_group(match, groups.get("title")) or "",
                    message=_group(match, groups.get("message")) or "",
                    match=match.group(0),
                ))

    return annotations


def relative_annotation_path(path: str, home: str) -> str:
    """Strip the checkout directory prefix from an annotation path."""
    prefix = home.rstrip("/") + "/"
    return path[len(prefix):] if path.startswith(prefix) else path
