from neighborhood_nature.http.controller import NatureController
from neighborhood_nature.transport import HTTP_OPERATIONS, OPERATION_CONTRACTS, normalize_transport_response


def test_every_contract_has_a_controller_operation():
    missing = [c.operation for c in OPERATION_CONTRACTS if not callable(getattr(NatureController, c.operation, None))]
    assert missing == []


def test_routes_are_unique():
    assert len(HTTP_OPERATIONS) == len(OPERATION_CONTRACTS)


def test_only_health_and_lookup_skip_the_session():
    unscoped = sorted(c.operation for c in OPERATION_CONTRACTS if not c.session_scoped)
    assert unscoped == ['get_health', 'lookup_species']


def test_normalize_fills_error_defaults():
    response = normalize_transport_response('op', {'success': False}, default_error_code='OP_FAILED')
    assert response['error_code'] == 'OP_FAILED'
    assert response['error']


def test_normalize_rejects_non_dict():
    response = normalize_transport_response('op', ['x'], default_error_code='OP_FAILED')
    assert response['error_code'] == 'INVALID_RESPONSE'
    assert normalize_transport_response('op', None, default_error_code='X')['error_code'] == 'EMPTY_RESPONSE'
