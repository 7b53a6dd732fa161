"""
Priority normalization — free text in, low/medium/high out.
"""
from typing import Any

PRIORITIES = ('low', 'medium', 'high')

_PRIORITY_ALIASES = {
    'low': 'low',
    'baixa': 'low',
    'baixo': 'low',
    'medium': 'medium',
    'media': 'medium',
    'média': 'medium',
    'medio': 'medium',
    'médio': 'medium',
    'high': 'high',
    'alta': 'high',
    'alto': 'high',
}


def normalize_priority(raw: Any) -> str:
    """Map any input onto PRIORITIES; unknown or empty input is 'medium'."""
    if not isinstance(raw, str):
        return 'medium'
    return _PRIORITY_ALIASES.get(raw.strip().lower(), 'medium')
