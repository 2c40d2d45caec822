"""Report builder: text and JSON output for a single comparison outcome."""

import json
from typing import Any

from screen_checker.core.types import Outcome


def format_text(outcome: Outcome) -> str:
    """Format an outcome as human-readable text."""
    mark = '✓' if outcome.passed else '✗'
    lines = [f'screen-tester: {outcome.name}  {outcome.baseline_path}', '']

    if outcome.bootstrapped:
        lines.append('  no baseline, current screen saved as baseline')
    else:
        if outcome.is_same_dimensions is False:
            lines.append('  dimensions: changed')
        if outcome.mis_match_percentage is not None:
            lines.append(f'  diff: {outcome.mis_match_percentage:.2f}% mismatch')

    for path in outcome.artifacts:
        lines.append(f'  wrote: {path}')
    for error in outcome.write_errors:
        lines.append(f'  write failed: {error}')

    lines.append('')
    lines.append(f'{"PASS" if outcome.passed else "FAIL"} {mark}')
    return '\n'.join(lines)


def format_json(outcome: Outcome) -> str:
    """Format an outcome as JSON."""
    obj: dict[str, Any] = {
        'name': outcome.name,
        'baseline': str(outcome.baseline_path),
        'pass': outcome.passed,
        'bootstrapped': outcome.bootstrapped,
        'same_dimensions': outcome.is_same_dimensions,
        'mismatch_pct': outcome.mis_match_percentage,
        'artifacts': [str(p) for p in outcome.artifacts],
    }
    if outcome.write_errors:
        obj['write_errors'] = list(outcome.write_errors)
    return json.dumps(obj, indent=2)
