"""Tests for webhook_service.processing.contacts — find-or-create contacts."""
from unittest.mock import MagicMock

from webhook_service.processing.contacts import resolve_contact


def _store(by_phone=None, by_email=None, created=99):
    store = MagicMock()
    store.find_contact_by_phone.return_value = by_phone
    store.find_contact_by_email.return_value = by_email
    store.create_contact.return_value = created
    return store


class TestResolveContact:

    def test_no_identifying_fields(self):
        store = _store()
        assert resolve_contact(store, 't1', {'status': 'new', 'company': 'ACME'}) is None
        store.find_contact_by_phone.assert_not_called()
        store.create_contact.assert_not_called()

    def test_blank_identifying_fields(self):
        store = _store()
        assert resolve_contact(store, 't1', {'name': '  ', 'email': '', 'phone': None}) is None

    def test_phone_match_wins(self):
        store = _store(by_phone=5, by_email=6)
        assert resolve_contact(store, 't1', {'phone': '+55 11 99999', 'email': 'a@x.com'}) == 5
        store.find_contact_by_phone.assert_called_once_with('t1', '+55 11 99999')
        store.find_contact_by_email.assert_not_called()
        store.create_contact.assert_not_called()

    def test_email_match_when_phone_misses(self):
        store = _store(by_phone=None, by_email=6)
        assert resolve_contact(store, 't1', {'phone': '123', 'email': 'a@x.com'}) == 6
        store.find_contact_by_email.assert_called_once_with('t1', 'a@x.com')
        store.create_contact.assert_not_called()

    def test_email_only(self):
        store = _store(by_email=7)
        assert resolve_contact(store, 't1', {'email': 'a@x.com'}) == 7
        store.find_contact_by_phone.assert_not_called()

    def test_creates_when_no_match(self):
        store = _store(created=42)
        result = resolve_contact(store, 't1', {'name': ' Maria ', 'email': 'm@x.com', 'phone': 123})
        assert result == 42
        store.create_contact.assert_called_once_with(
            tenant_id='t1', name='Maria', email='m@x.com', phone='123', source='webhook',
        )

    def test_name_only_creates_contact(self):
        store = _store(created=8)
        assert resolve_contact(store, 't1', {'name': 'Maria'}) == 8
        store.find_contact_by_phone.assert_not_called()
        store.find_contact_by_email.assert_not_called()


class TestResolveContactAgainstStore:
    """Same rules against the SQL store."""

    def test_second_delivery_reuses_contact(self, store):
        first = resolve_contact(store, 't1', {'name': 'Ana', 'email': 'ana@x.com'})
        second = resolve_contact(store, 't1', {'name': 'Ana B.', 'email': 'ana@x.com'})
        assert first is not None
        assert first == second

    def test_contacts_are_tenant_scoped(self, store):
        first = resolve_contact(store, 't1', {'phone': '555'})
        other = resolve_contact(store, 't2', {'phone': '555'})
        assert first != other
