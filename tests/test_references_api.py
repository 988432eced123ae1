"""
Tests for the tenant reference endpoints
"""
from unittest.mock import patch

from myrentcard.models import ReferenceVerification


def test_create_and_list_references(tenant_client, create_reference):
    created = create_reference()

    assert created['name'] == 'Jane Doe'
    assert created['relationship'] == 'previous_landlord'
    assert created['isVerified'] is False
    assert created['verificationDate'] is None

    tenant_id = tenant_client.user['tenantId']
    response = tenant_client.get(f'/api/tenant/references/{tenant_id}')
    assert response.status_code == 200
    assert [r['id'] for r in response.get_json()] == [created['id']]


def test_create_requires_fields(tenant_client, reference_payload):
    payload = dict(reference_payload, phone='  ')
    response = tenant_client.post('/api/tenant/references', json=payload)
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Phone is required'

    payload = dict(reference_payload, relationship='neighbour')
    response = tenant_client.post('/api/tenant/references', json=payload)
    assert response.status_code == 400
    assert response.get_json()['error'].startswith('Relationship must be one of')


def test_landlord_cannot_create_reference(landlord_client, reference_payload):
    response = landlord_client.post('/api/tenant/references', json=reference_payload)
    assert response.status_code == 403


def test_anonymous_is_rejected(client, reference_payload):
    response = client.post('/api/tenant/references', json=reference_payload)
    assert response.status_code == 401


def test_list_other_tenant_references_is_forbidden(tenant_client, other_tenant_client, create_reference):
    create_reference()
    tenant_id = tenant_client.user['tenantId']

    response = other_tenant_client.get(f'/api/tenant/references/{tenant_id}')
    assert response.status_code == 403


def test_update_ignores_verification_fields(tenant_client, create_reference):
    created = create_reference()

    response = tenant_client.put(f"/api/tenant/references/{created['id']}", json={
        'phone': '555-0000',
        'isVerified': True,
    })

    assert response.status_code == 200
    body = response.get_json()
    assert body['phone'] == '555-0000'
    assert body['isVerified'] is False


def test_update_by_other_tenant_is_forbidden(other_tenant_client, create_reference):
    created = create_reference()
    response = other_tenant_client.put(f"/api/tenant/references/{created['id']}", json={'name': 'X'})
    assert response.status_code == 403


def test_delete_reference(tenant_client, create_reference):
    created = create_reference()

    response = tenant_client.delete(f"/api/tenant/references/{created['id']}")
    assert response.status_code == 200
    assert response.get_json() == {'success': True}

    assert tenant_client.delete(f"/api/tenant/references/{created['id']}").status_code == 404


def test_manual_verify(tenant_client, create_reference):
    created = create_reference()

    response = tenant_client.post(f"/api/tenant/references/{created['id']}/verify")

    assert response.status_code == 200
    assert response.get_json()['isVerified'] is True
    assert response.get_json()['verificationDate'] is not None


def test_send_verification_without_mail_provider(app, tenant_client, create_reference):
    created = create_reference()

    response = tenant_client.post(f"/api/tenant/references/{created['id']}/send-verification")

    assert response.status_code == 200
    body = response.get_json()
    assert body['success'] is True
    assert body['verificationUrl'].startswith('http://testserver/references/verify/')
    assert body['expiresAt'] is not None

    token = body['verificationUrl'].rsplit('/', 1)[-1]
    with app.app_context():
        verification = ReferenceVerification.query.filter_by(token=token).one()
        assert verification.status == 'pending'
        assert verification.email_sent_at is None


def test_send_verification_stamps_email_sent_at(app, tenant_client, create_reference):
    created = create_reference()

    with patch('myrentcard.api.references_api.send_reference_verification_email',
               return_value={'success': True, 'message_id': 'msg_1'}):
        response = tenant_client.post(f"/api/tenant/references/{created['id']}/send-verification")

    assert response.status_code == 200
    token = response.get_json()['verificationUrl'].rsplit('/', 1)[-1]
    with app.app_context():
        assert ReferenceVerification.query.filter_by(token=token).one().email_sent_at is not None


def test_send_verification_expires_older_links(app, tenant_client, create_reference, issue_link):
    created = create_reference()
    first = issue_link(created['id'])
    second = issue_link(created['id'])

    with app.app_context():
        assert ReferenceVerification.query.filter_by(token=first).one().status == 'expired'
        assert ReferenceVerification.query.filter_by(token=second).one().status == 'pending'


def test_send_verification_mail_failure_rolls_back(app, tenant_client, create_reference):
    created = create_reference()

    with patch('myrentcard.api.references_api.send_reference_verification_email',
               return_value={'success': False, 'error': 'provider down'}):
        response = tenant_client.post(f"/api/tenant/references/{created['id']}/send-verification")

    assert response.status_code == 502
    with app.app_context():
        assert ReferenceVerification.query.count() == 0


def test_send_verification_for_verified_reference(tenant_client, create_reference):
    created = create_reference()
    tenant_client.post(f"/api/tenant/references/{created['id']}/verify")

    response = tenant_client.post(f"/api/tenant/references/{created['id']}/send-verification")
    assert response.status_code == 400


def test_landlord_sees_references_with_feedback(tenant_client, landlord_client, client,
                                                create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])
    client.post(f'/api/tenant-references/verify/submit/{token}', json={
        'referenceId': created['id'],
        'rating': 'excellent',
        'comments': 'Paid on time every month',
    })

    tenant_id = tenant_client.user['tenantId']
    response = landlord_client.get(f'/api/landlord/tenant/{tenant_id}/references')

    assert response.status_code == 200
    body = response.get_json()
    assert body['tenantName'] == 'John Smith'
    reference = body['references'][0]
    assert reference['isVerified'] is True
    assert reference['feedback']['rating'] == 'excellent'
    assert reference['feedback']['comments'] == 'Paid on time every month'


def test_tenant_cannot_use_landlord_view(tenant_client):
    tenant_id = tenant_client.user['tenantId']
    assert tenant_client.get(f'/api/landlord/tenant/{tenant_id}/references').status_code == 403
