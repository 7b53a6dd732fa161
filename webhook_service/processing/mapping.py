"""
Mapping engine — payload + field mappings → LeadData.

Both execution paths (remote primary and local fallback) consume the LeadData
built here, so required-field and default rules live in exactly one place.
"""
import logging
from typing import Any, Dict, List

from webhook_service.processing.base import FieldMapping
from webhook_service.processing.errors import NoMappingsConfigured, MissingFieldError
from webhook_service.processing.normalize import normalize_priority
from webhook_service.processing.paths import resolve

logger = logging.getLogger('processing.mapping')


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip() == ''


def seed_lead_data(defaults: Dict[str, Any]) -> Dict[str, Any]:
    """Starting LeadData: endpoint defaults with priority already normalized."""
    return {
        'status': defaults.get('status'),
        'priority': normalize_priority(defaults.get('priority')),
        'source': defaults.get('source'),
    }


def apply_mappings(
    payload: Any,
    mappings: List[FieldMapping],
    defaults: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Apply `mappings` to `payload` in list order.

    Raises:
        NoMappingsConfigured: no active mapping is left to apply.
        MissingFieldError: the first required mapping whose source path and
            default are both absent. Remaining mappings are not evaluated.
    """
    lead_data = seed_lead_data(defaults)

    active = [m for m in mappings if m.is_active]
    if not active:
        raise NoMappingsConfigured()

    for mapping in active:
        value = resolve(payload, mapping.source_field)
        if _is_absent(value):
            value = mapping.default_value

        if _is_absent(value):
            if mapping.is_required:
                logger.info("Required field missing: %s", mapping.source_field)
                raise MissingFieldError(mapping.source_field)
            continue

        if mapping.target_field == 'priority':
            value = normalize_priority(value)
        lead_data[mapping.target_field] = value

    return lead_data
