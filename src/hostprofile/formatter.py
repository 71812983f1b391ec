"""Rendering of a ProfileReport as JSON, YAML or a human-readable summary."""

import json
from typing import Any, Dict, List

import yaml

from .profile import ProfileReport


FORMATS = ('json', 'yaml', 'text')


def render_json(report: ProfileReport) -> str:
    return json.dumps(report.to_dict(), indent=2)


def render_yaml(report: ProfileReport) -> str:
    return yaml.safe_dump(report.to_dict(), default_flow_style=False, sort_keys=False)


def _format_value(value: Any) -> str:
    if value is None:
        return '-'
    if isinstance(value, list):
        return ', '.join(str(v) for v in value) if value else '-'
    return str(value)


def _format_compilers(compilers: Dict[str, Any], width: int) -> List[str]:
    lines = []
    for name, value in compilers.items():
        if not isinstance(value, list):
            lines.append(f"  {name:<{width}}  {_format_value(value or None)}")
            continue
        if not value:
            lines.append(f"  {name:<{width}}  -")
            continue
        for i, record in enumerate(value):
            label = name if i == 0 else ''
            version = record['version_number'] or '?'
            lines.append(f"  {label:<{width}}  {record['bin']}  [{record['kind']} {version}]")
    return lines


def render_text(report: ProfileReport, width: int = 60) -> str:
    """
    Format the report as aligned sections.

    Per-thread model strings are collapsed to a count, since on large
    machines they repeat the same model once per logical CPU.
    """
    data = report.to_dict()
    cpu_models = data['cpu'].get('cpu_models')
    if isinstance(cpu_models, list):
        data['cpu']['cpu_models'] = f"{len(cpu_models)} entries"

    lines = ["=" * width, "HOST PROFILE", "=" * width]
    for section, values in data.items():
        lines.append("")
        lines.append(section.upper())
        lines.append("-" * width)
        key_width = max((len(k) for k in values), default=0)
        if section == 'compiler':
            lines.extend(_format_compilers(values, key_width))
            continue
        for key, value in values.items():
            lines.append(f"  {key:<{key_width}}  {_format_value(value)}")
    return "\n".join(lines) + "\n"


def render(report: ProfileReport, fmt: str = 'json') -> str:
    """Render a report in one of FORMATS."""
    if fmt == 'json':
        return render_json(report)
    if fmt == 'yaml':
        return render_yaml(report)
    if fmt == 'text':
        return render_text(report)
    raise ValueError(f"Unknown format: {fmt} (expected one of {', '.join(FORMATS)})")
