"""
Calculation result export.

Builds a self-describing export record from a calculator's inputs and
results and renders it as CSV, JSON or plain text.
"""

import csv
import io
import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

EXPORT_HEADING = 'Engineering Calculator Export'
TEXT_HEADING = 'ENGINEERING CALCULATOR RESULTS'


def prepare_export_data(
    title: str,
    discipline: str,
    inputs: Dict[str, Any],
    results: Dict[str, Any],
    calculator_name: Optional[str] = None,
    project_name: Optional[str] = None,
    notes: Optional[str] = None,
    timestamp: Optional[datetime] = None,
) -> Dict:
    """Bundle a calculation for export. The title gains a results suffix."""
    return {
        'title': f"{title} - Calculation Results",
        'calculator_name': calculator_name or title,
        'discipline': discipline,
        'timestamp': (timestamp or datetime.now(timezone.utc)).isoformat(),
        'project_name': project_name,
        'inputs': inputs,
        'results': results,
        'notes': notes,
    }


def format_key(key: str) -> str:
    """'kvarRequired' / 'kvar_required' → 'Kvar Required'."""
    spaced = re.sub(r'([A-Z])', r' \1', key).replace('_', ' ')
    return ' '.join(word[:1].upper() + word[1:] for word in spaced.split())


def format_value(value: Any) -> str:
    if value is None:
        return 'N/A'
    if isinstance(value, bool):
        return 'Yes' if value else 'No'
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return f"{value:.3f}"
    if isinstance(value, (list, tuple)):
        return ', '.join(str(v) for v in value)
    if isinstance(value, dict):
        return json.dumps(value, default=str)
    return str(value)


def sanitize_filename(name: str) -> str:
    """Filesystem-safe download name, at most 100 characters."""
    cleaned = re.sub(r'[^a-zA-Z0-9]', '_', name)
    cleaned = re.sub(r'_{2,}', '_', cleaned).strip('_')
    return cleaned[:100] or 'export'


def export_csv(data: Dict) -> str:
    """Export as CSV with every cell quoted."""
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_ALL, lineterminator='\n')

    writer.writerow([EXPORT_HEADING])
    writer.writerow([''])
    writer.writerow(['Calculator', data['calculator_name']])
    writer.writerow(['Discipline', data['discipline']])
    writer.writerow(['Date', data['timestamp']])
    if data.get('project_name'):
        writer.writerow(['Project', data['project_name']])

    writer.writerow([''])
    writer.writerow(['INPUT PARAMETERS'])
    writer.writerow(['Parameter', 'Value'])
    for key, value in data['inputs'].items():
        writer.writerow([format_key(key), format_value(value)])

    writer.writerow([''])
    writer.writerow(['CALCULATION RESULTS'])
    writer.writerow(['Result', 'Value'])
    for key, value in data['results'].items():
        writer.writerow([format_key(key), format_value(value)])

    if data.get('notes'):
        writer.writerow([''])
        writer.writerow(['NOTES'])
        writer.writerow([data['notes']])

    return output.getvalue()


def export_json(data: Dict) -> str:
    return json.dumps(data, indent=2, default=str)


def export_text(data: Dict) -> str:
    lines = [
        TEXT_HEADING,
        '=' * 50,
        '',
        f"Calculator: {data['calculator_name']}",
        f"Discipline: {data['discipline']}",
        f"Date: {data['timestamp']}",
    ]
    if data.get('project_name'):
        lines.append(f"Project: {data['project_name']}")

    lines += ['', 'INPUT PARAMETERS', '-' * 20]
    lines += [f"{format_key(k)}: {format_value(v)}" for k, v in data['inputs'].items()]
    lines += ['', 'CALCULATION RESULTS', '-' * 20]
    lines += [f"{format_key(k)}: {format_value(v)}" for k, v in data['results'].items()]

    if data.get('notes'):
        lines += ['', 'NOTES', '-' * 10, data['notes']]

    lines += ['', '-' * 50, f"Generated by MEPCalc - {datetime.now(timezone.utc).isoformat()}"]
    return '\n'.join(lines)


EXPORTERS = {
    'csv': (export_csv, 'text/csv'),
    'json': (export_json, 'application/json'),
    'txt': (export_text, 'text/plain'),
}
