"""
Tests for the public verification endpoints and single-use tokens
"""
from datetime import datetime, timedelta

from myrentcard.models import db, ReferenceVerification, TenantReference


def _expire(app, token):
    with app.app_context():
        verification = ReferenceVerification.query.filter_by(token=token).one()
        verification.expires_at = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()


def _submit(client, token, reference_id, rating='good', comments='Reliable tenant'):
    return client.post(f'/api/tenant-references/verify/submit/{token}', json={
        'referenceId': reference_id,
        'rating': rating,
        'comments': comments,
    })


def test_validate_returns_reference_details(client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])

    response = client.get(f'/api/tenant-references/verify/validate/{token}')

    assert response.status_code == 200
    body = response.get_json()
    assert body['id'] == created['id']
    assert body['name'] == 'Jane Doe'
    assert body['relationship'] == 'previous_landlord'
    assert body['tenantName'] == 'John Smith'
    assert body['isVerified'] is False
    assert body['tokenValid'] is True
    assert body['tokenExpiry'] is not None


def test_validate_unknown_token(client):
    response = client.get('/api/tenant-references/verify/validate/does-not-exist')

    assert response.status_code == 404
    body = response.get_json()
    assert body['code'] == 'INVALID_TOKEN'
    assert 'expired' not in body['message']
    assert body['error'] == body['message']


def test_validate_expired_token(app, client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])
    _expire(app, token)

    response = client.get(f'/api/tenant-references/verify/validate/{token}')

    assert response.status_code == 410
    body = response.get_json()
    assert body['code'] == 'EXPIRED_TOKEN'
    assert 'expired' in body['message']

    with app.app_context():
        assert ReferenceVerification.query.filter_by(token=token).one().status == 'expired'


def test_validate_superseded_token_is_expired(client, create_reference, issue_link):
    created = create_reference()
    old_token = issue_link(created['id'])
    issue_link(created['id'])

    response = client.get(f'/api/tenant-references/verify/validate/{old_token}')
    assert response.status_code == 410
    assert response.get_json()['code'] == 'EXPIRED_TOKEN'


def test_validate_pending_token_for_verified_reference(tenant_client, client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])
    tenant_client.post(f"/api/tenant/references/{created['id']}/verify")

    response = client.get(f'/api/tenant-references/verify/validate/{token}')

    assert response.status_code == 200
    assert response.get_json()['isVerified'] is True


def test_submit_marks_reference_verified(app, client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])

    response = _submit(client, token, created['id'], rating='excellent', comments='  Great tenant  ')

    assert response.status_code == 200
    body = response.get_json()
    assert body['success'] is True
    assert body['tenantName'] == 'John Smith'
    assert body['reference']['isVerified'] is True
    assert body['reference']['verificationDate'] is not None

    with app.app_context():
        verification = ReferenceVerification.query.filter_by(token=token).one()
        assert verification.status == 'completed'
        assert verification.rating == 'excellent'
        assert verification.comments == 'Great tenant'
        assert verification.completed_at is not None
        assert db.session.get(TenantReference, created['id']).is_verified is True


def test_submit_twice_is_rejected(client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])
    assert _submit(client, token, created['id']).status_code == 200

    response = _submit(client, token, created['id'], rating='poor', comments='Changed my mind')

    assert response.status_code == 409
    body = response.get_json()
    assert body['code'] == 'ALREADY_VERIFIED'
    assert 'already verified' in body['message']


def test_validate_after_submit_reports_already_verified(client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])
    _submit(client, token, created['id'])

    response = client.get(f'/api/tenant-references/verify/validate/{token}')

    assert response.status_code == 409
    assert response.get_json()['code'] == 'ALREADY_VERIFIED'


def test_submit_for_manually_verified_reference(tenant_client, client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])
    tenant_client.post(f"/api/tenant/references/{created['id']}/verify")

    response = _submit(client, token, created['id'])
    assert response.status_code == 409
    assert response.get_json()['code'] == 'ALREADY_VERIFIED'


def test_submit_expired_token(app, client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])
    _expire(app, token)

    response = _submit(client, token, created['id'])
    assert response.status_code == 410
    assert response.get_json()['code'] == 'EXPIRED_TOKEN'


def test_submit_reference_mismatch(app, client, create_reference, issue_link):
    first = create_reference()
    second = create_reference(name='Sam Boss', relationship='employer', email='sam@work.com')
    token = issue_link(first['id'])

    response = _submit(client, token, second['id'])

    assert response.status_code == 400
    assert response.get_json()['code'] == 'VALIDATION_ERROR'
    with app.app_context():
        assert ReferenceVerification.query.filter_by(token=token).one().status == 'pending'


def test_submit_validates_feedback(client, create_reference, issue_link):
    created = create_reference()
    token = issue_link(created['id'])

    bad_rating = _submit(client, token, created['id'], rating='amazing')
    assert bad_rating.status_code == 400
    assert bad_rating.get_json()['code'] == 'VALIDATION_ERROR'

    blank = _submit(client, token, created['id'], comments='   ')
    assert blank.status_code == 400
    assert blank.get_json()['message'] == 'Please provide some comments'

    too_long = _submit(client, token, created['id'], comments='x' * 501)
    assert too_long.status_code == 400
    assert too_long.get_json()['message'] == 'Comments must be less than 500 characters'

    # The link survives rejected input
    assert _submit(client, token, created['id'], comments='x' * 500).status_code == 200


def test_submit_unknown_token(client):
    response = _submit(client, 'nope', 1)
    assert response.status_code == 404
    assert response.get_json()['code'] == 'INVALID_TOKEN'
