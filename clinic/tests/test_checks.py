from unittest import mock

from clinic.checks import W001, live_slot_constraint_check


def _connections(vendor):
    return {'default': mock.Mock(vendor=vendor)}


def test_mysql_backend_is_flagged():
    with mock.patch('clinic.checks.connections', _connections('mysql')):
        warnings = live_slot_constraint_check()
    assert [w.id for w in warnings] == [W001]


def test_backends_with_partial_indexes_pass():
    for vendor in ('sqlite', 'postgresql'):
        with mock.patch('clinic.checks.connections', _connections(vendor)):
            assert live_slot_constraint_check() == []
