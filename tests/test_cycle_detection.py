"""
Tests for circular reference detection.
A lookup that would revisit a key already being resolved must fail with
CircularReferenceError carrying the full key chain.
"""

import pytest

from propresolve.exceptions import CircularReferenceError, ResolutionError
from propresolve.variables import Resolver


SELF = {'a': '${a}'}
PAIR = {'a': '${b}', 'b': '${a}'}
TRIANGLE = {'a': '${b}', 'b': '${c}', 'c': '${a}'}


@pytest.mark.parametrize('entries,key', [
    (SELF, 'a'),
    (PAIR, 'a'),
    (PAIR, 'b'),
    (TRIANGLE, 'a'),
    (TRIANGLE, 'b'),
    (TRIANGLE, 'c'),
])
def test_circular_get_raises(entries, key):
    resolver = Resolver(entries)
    with pytest.raises(CircularReferenceError):
        resolver.get(key)


def test_get_or_default_does_not_swallow_cycles():
    resolver = Resolver(SELF)
    with pytest.raises(CircularReferenceError):
        resolver.get_or_default('a', 'default')


def test_error_reports_full_path():
    resolver = Resolver(TRIANGLE)
    with pytest.raises(CircularReferenceError) as exc_info:
        resolver.get('b')

    error = exc_info.value
    assert error.key == 'b'
    assert error.path == ['b', 'c', 'a', 'b']
    assert 'b -> c -> a -> b' in str(error)


def test_cycle_below_entry_key():
    resolver = Resolver({'top': 'x ${a}', 'a': '${b}', 'b': '${a}'})
    with pytest.raises(CircularReferenceError) as exc_info:
        resolver.get('top')

    assert exc_info.value.key == 'a'
    assert exc_info.value.path == ['top', 'a', 'b', 'a']


def test_cycle_found_after_literal_text_and_earlier_tokens():
    resolver = Resolver({'a': 'ok ${ok} then ${b}', 'ok': 'fine', 'b': 'loop ${a}'})
    with pytest.raises(CircularReferenceError):
        resolver.get('a')


def test_is_a_value_error():
    resolver = Resolver(SELF)
    with pytest.raises(ValueError):
        resolver.get('a')
    assert issubclass(CircularReferenceError, ResolutionError)
    assert CircularReferenceError('a').exit_code == 2


def test_failed_lookup_leaves_resolver_usable():
    entries = dict(PAIR)
    entries['plain'] = 'fine ${leaf}'
    entries['leaf'] = 'leaf'
    resolver = Resolver(entries)

    with pytest.raises(CircularReferenceError):
        resolver.get('a')

    assert resolver.get('plain') == 'fine leaf'
    with pytest.raises(CircularReferenceError):
        resolver.get('a')


def test_unreferenced_cycle_does_not_affect_other_keys():
    entries = dict(TRIANGLE)
    entries['other'] = 'independent'
    resolver = Resolver(entries)
    assert resolver.get('other') == 'independent'


def test_resolve_all_propagates_cycle():
    resolver = Resolver({'fine': 'ok', 'x': '${x}'})
    with pytest.raises(CircularReferenceError):
        resolver.resolve_all()


def test_cycle_through_missing_policy_keep_still_detected():
    resolver = Resolver(PAIR, on_missing='keep')
    with pytest.raises(CircularReferenceError):
        resolver.get('a')
