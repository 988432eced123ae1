"""
Tests for landlord communication and tenant contact gating
"""
from datetime import datetime, timedelta

from myrentcard.models import db, TenantBlockedContact


def _send(landlord_client, tenant_id, **overrides):
    payload = {
        'tenantId': tenant_id,
        'communicationType': 'email',
        'subject': 'Viewing',
        'message': 'Are you free Saturday?',
    }
    payload.update(overrides)
    return landlord_client.post('/api/communication-logs', json=payload)


def test_communication_template_crud(landlord_client):
    response = landlord_client.post('/api/landlord/communication-templates', json={
        'title': 'Viewing invite',
        'body': 'Would you like to view the unit?',
        'tags': ['viewing'],
    })
    assert response.status_code == 201
    template = response.get_json()
    assert template['category'] == 'general'
    assert template['tags'] == ['viewing']

    landlord_client.post('/api/landlord/communication-templates', json={
        'title': 'Approval', 'body': 'You are approved', 'category': 'decision',
    })

    titles = [t['title'] for t in landlord_client.get('/api/landlord/communication-templates').get_json()]
    assert titles == ['Approval', 'Viewing invite']

    decision = landlord_client.get('/api/landlord/communication-templates?category=decision').get_json()
    assert [t['title'] for t in decision] == ['Approval']

    # Inactive templates drop out of the list
    landlord_client.put(f"/api/landlord/communication-templates/{template['id']}", json={'isActive': False})
    titles = [t['title'] for t in landlord_client.get('/api/landlord/communication-templates').get_json()]
    assert titles == ['Approval']

    deleted = landlord_client.delete(f"/api/landlord/communication-templates/{template['id']}")
    assert deleted.status_code == 200


def test_tenant_cannot_manage_communication_templates(tenant_client):
    response = tenant_client.post('/api/landlord/communication-templates', json={'title': 'T', 'body': 'B'})
    assert response.status_code == 403


def test_send_and_list_logs(landlord_client, tenant_client):
    tenant_id = tenant_client.user['tenantId']
    template = landlord_client.post('/api/landlord/communication-templates', json={
        'title': 'Viewing invite', 'body': 'View?',
    }).get_json()

    first = _send(landlord_client, tenant_id, templateId=template['id'], propertyId=7)
    assert first.status_code == 201
    log = first.get_json()
    assert log['status'] == 'sent'
    assert log['threadId']
    assert log['propertyId'] == 7

    reply = _send(landlord_client, tenant_id, communicationType='sms', message='Reminder', threadId=log['threadId'])
    assert reply.status_code == 201

    logs = landlord_client.get(f'/api/communication-logs?tenantId={tenant_id}').get_json()
    assert len(logs) == 2
    assert landlord_client.get('/api/communication-logs?propertyId=7').get_json()[0]['id'] == log['id']

    # Tenants read what they received
    assert len(tenant_client.get('/api/communication-logs').get_json()) == 2

    thread = landlord_client.get(f"/api/communication-logs/thread/{log['threadId']}").get_json()
    assert [m['id'] for m in thread] == [log['id'], reply.get_json()['id']]

    templates = landlord_client.get('/api/landlord/communication-templates').get_json()
    assert templates[0]['usageCount'] == 1


def test_send_validation(landlord_client, tenant_client):
    tenant_id = tenant_client.user['tenantId']
    assert _send(landlord_client, 9999).status_code == 404
    assert _send(landlord_client, tenant_id, communicationType='fax').status_code == 400
    assert _send(landlord_client, tenant_id, message='  ').status_code == 400


def test_update_log_status(landlord_client, tenant_client):
    log = _send(landlord_client, tenant_client.user['tenantId']).get_json()

    response = landlord_client.patch(f"/api/communication-logs/{log['id']}/status", json={'status': 'delivered'})
    assert response.get_json()['status'] == 'delivered'

    response = landlord_client.patch(f"/api/communication-logs/{log['id']}/status", json={'status': 'lost'})
    assert response.status_code == 400


def test_preferences_default_and_update(tenant_client, landlord_client):
    prefs = tenant_client.get('/api/tenant/contact-preferences').get_json()
    assert prefs['allowLandlordContact'] is True
    assert prefs['allowSms'] is True

    response = tenant_client.put('/api/tenant/contact-preferences', json={'allowSms': False, 'preferredMethod': 'phone'})
    assert response.status_code == 200
    assert response.get_json()['allowSms'] is False

    tenant_id = tenant_client.user['tenantId']
    seen = landlord_client.get(f'/api/landlord/tenant/{tenant_id}/contact-preferences').get_json()
    assert seen['preferences']['preferredMethod'] == 'phone'


def test_channel_disabled_blocks_sending(tenant_client, landlord_client):
    tenant_id = tenant_client.user['tenantId']
    tenant_client.put('/api/tenant/contact-preferences', json={'allowSms': False})

    check = landlord_client.post('/api/landlord/can-contact-tenant',
                                 json={'tenantId': tenant_id, 'communicationType': 'sms'}).get_json()
    assert check == {'canContact': False, 'reason': 'Tenant has disabled sms contact'}

    response = _send(landlord_client, tenant_id, communicationType='sms')
    assert response.status_code == 403
    assert _send(landlord_client, tenant_id, communicationType='email').status_code == 201


def test_no_landlord_contact(tenant_client, landlord_client):
    tenant_id = tenant_client.user['tenantId']
    tenant_client.put('/api/tenant/contact-preferences', json={'allowLandlordContact': False})

    response = _send(landlord_client, tenant_id)
    assert response.status_code == 403
    assert response.get_json()['error'] == 'Tenant is not accepting landlord contact'


def test_block_by_landlord_and_unblock(tenant_client, landlord_client):
    tenant_id = tenant_client.user['tenantId']
    landlord_id = landlord_client.user['landlordId']

    block = tenant_client.post('/api/tenant/blocked-contacts', json={'landlordId': landlord_id, 'reason': 'Spam'})
    assert block.status_code == 201

    check = landlord_client.post('/api/landlord/can-contact-tenant', json={'tenantId': tenant_id}).get_json()
    assert check['canContact'] is False
    assert _send(landlord_client, tenant_id).status_code == 403

    assert len(tenant_client.get('/api/tenant/blocked-contacts').get_json()) == 1
    tenant_client.delete(f"/api/tenant/blocked-contacts/{block.get_json()['id']}")

    check = landlord_client.post('/api/landlord/can-contact-tenant', json={'tenantId': tenant_id}).get_json()
    assert check == {'canContact': True, 'reason': None}


def test_block_by_email_and_phone(tenant_client, landlord_client):
    tenant_id = tenant_client.user['tenantId']

    by_email = tenant_client.post('/api/tenant/blocked-contacts', json={'blockedEmail': 'LISA@lanehomes.com'})
    assert _send(landlord_client, tenant_id).status_code == 403

    tenant_client.delete(f"/api/tenant/blocked-contacts/{by_email.get_json()['id']}")
    assert _send(landlord_client, tenant_id).status_code == 201

    tenant_client.post('/api/tenant/blocked-contacts', json={'blockedPhone': '555-0100'})
    assert _send(landlord_client, tenant_id).status_code == 403


def test_expired_temporary_block_is_removed(app, tenant_client, landlord_client):
    tenant_id = tenant_client.user['tenantId']
    landlord_id = landlord_client.user['landlordId']
    until = (datetime.utcnow() + timedelta(days=1)).isoformat()

    block = tenant_client.post('/api/tenant/blocked-contacts', json={
        'landlordId': landlord_id, 'blockType': 'temporary', 'blockedUntil': until,
    })
    assert block.status_code == 201
    assert _send(landlord_client, tenant_id).status_code == 403

    with app.app_context():
        row = db.session.get(TenantBlockedContact, block.get_json()['id'])
        row.blocked_until = datetime.utcnow() - timedelta(minutes=1)
        db.session.commit()

    assert _send(landlord_client, tenant_id).status_code == 201
    assert tenant_client.get('/api/tenant/blocked-contacts').get_json() == []


def test_block_validation(tenant_client):
    assert tenant_client.post('/api/tenant/blocked-contacts', json={}).status_code == 400
    response = tenant_client.post('/api/tenant/blocked-contacts',
                                  json={'blockedPhone': '555-1234', 'blockType': 'temporary'})
    assert response.status_code == 400
