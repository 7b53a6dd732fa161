"""
Contact resolution — find-or-create a tenant contact for a lead.

Lookup order is phone, then email; the first hit wins. There is no merge logic
and no lock around find-or-create, so concurrent deliveries for the same person
can still produce two contacts.
"""
import logging
from typing import Any, Dict, Optional

from webhook_service.config import CONTACT_SOURCE

logger = logging.getLogger('processing.contacts')

IDENTIFYING_FIELDS = ('phone', 'email', 'name')


def _clean(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def resolve_contact(store, tenant_id: str, lead_data: Dict[str, Any]) -> Optional[int]:
    """
    Return the contact id for `lead_data`, creating the contact if needed.

    Returns None only when lead_data has no phone, email or name; the lead is
    then created without a contact.
    """
    phone = _clean(lead_data.get('phone'))
    email = _clean(lead_data.get('email'))
    name = _clean(lead_data.get('name'))

    if not (phone or email or name):
        return None

    if phone:
        contact_id = store.find_contact_by_phone(tenant_id, phone)
        if contact_id is not None:
            logger.info("Reusing contact %s (phone match)", contact_id)
            return contact_id

    if email:
        contact_id = store.find_contact_by_email(tenant_id, email)
        if contact_id is not None:
            logger.info("Reusing contact %s (email match)", contact_id)
            return contact_id

    contact_id = store.create_contact(
        tenant_id=tenant_id,
        name=name,
        email=email,
        phone=phone,
        source=CONTACT_SOURCE,
    )
    logger.info("Created contact %s for tenant %s", contact_id, tenant_id)
    return contact_id
