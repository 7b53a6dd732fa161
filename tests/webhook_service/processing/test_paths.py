"""Tests for webhook_service.processing.paths — dotted-path resolution."""
import pytest

from webhook_service.processing.paths import resolve, detect_fields


class TestResolve:
    """resolve() walks dotted paths and never raises."""

    def test_nested_value(self):
        payload = {'a': {'b': {'c': 42}}}
        assert resolve(payload, 'a.b.c') == 42

    def test_top_level_value(self):
        assert resolve({'name': 'João'}, 'name') == 'João'

    def test_returns_subtree(self):
        payload = {'lead': {'name': 'João', 'tags': ['x']}}
        assert resolve(payload, 'lead') == {'name': 'João', 'tags': ['x']}

    def test_missing_intermediate_key(self):
        assert resolve({'a': {}}, 'a.b.c') is None

    def test_missing_final_key(self):
        assert resolve({'a': {'b': {}}}, 'a.b.c') is None

    def test_null_final_value(self):
        assert resolve({'a': None}, 'a') is None

    def test_scalar_before_path_ends(self):
        assert resolve({'a': 'text'}, 'a.b') is None
        assert resolve({'a': 5}, 'a.b.c') is None

    def test_list_numeric_segment(self):
        payload = {'contacts': [{'email': 'a@x.com'}, {'email': 'b@x.com'}]}
        assert resolve(payload, 'contacts.1.email') == 'b@x.com'

    def test_list_index_out_of_range(self):
        assert resolve({'items': [1]}, 'items.3') is None

    def test_list_non_numeric_segment(self):
        assert resolve({'items': [1, 2]}, 'items.first') is None

    def test_list_negative_segment(self):
        assert resolve({'items': [1, 2]}, 'items.-1') is None

    def test_falsy_values_are_returned(self):
        payload = {'n': 0, 'b': False, 's': ''}
        assert resolve(payload, 'n') == 0
        assert resolve(payload, 'b') is False
        assert resolve(payload, 's') == ''

    def test_no_type_coercion(self):
        assert resolve({'value': '5000'}, 'value') == '5000'

    @pytest.mark.parametrize('document', [None, 0, 'text', 3.5, True, [], [None], {}])
    def test_any_document_shape(self, document):
        assert resolve(document, 'a.b') is None

    @pytest.mark.parametrize('path', [None, 5, ['a'], ''])
    def test_bad_paths(self, path):
        assert resolve({'a': 1}, path) is None

    def test_document_root_array(self):
        assert resolve([{'name': 'x'}], '0.name') == 'x'


class TestDetectFields:
    """detect_fields() lists dotted leaf paths in document order."""

    def test_flat_object(self):
        assert detect_fields({'name': 'x', 'email': 'y'}) == ['name', 'email']

    def test_nested_object(self):
        payload = {'lead': {'name': 'João', 'contact': {'phone': '1'}}, 'id': 3}
        assert detect_fields(payload) == ['lead.name', 'lead.contact.phone', 'id']

    def test_arrays_are_leaves(self):
        assert detect_fields({'tags': [{'a': 1}]}) == ['tags']

    def test_empty_object_is_leaf(self):
        assert detect_fields({'lead': {}}) == ['lead']

    def test_non_object_payload(self):
        assert detect_fields([1, 2]) == []
        assert detect_fields('text') == []
