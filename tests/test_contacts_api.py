"""
Tests for tenant contacts and message templates
"""


def _add_contact(client, **overrides):
    payload = {
        'name': 'Paula Property',
        'email': 'paula@pm.com',
        'contactType': 'property_manager',
        'company': 'PM Co',
    }
    payload.update(overrides)
    response = client.post('/api/tenant/contacts', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def _add_template(client, **overrides):
    payload = {
        'templateName': 'First hello',
        'subject': 'Interested in your unit',
        'body': 'Hi {landlordName}, here is my RentCard.',
        'category': 'initial_inquiry',
        'variables': ['landlordName'],
    }
    payload.update(overrides)
    response = client.post('/api/tenant/message-templates', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()


def test_contact_crud(tenant_client):
    contact = _add_contact(tenant_client)
    assert contact['contactType'] == 'property_manager'
    assert contact['isFavorite'] is False
    assert contact['contactCount'] == 0

    updated = tenant_client.put(f"/api/tenant/contacts/{contact['id']}", json={'isFavorite': True})
    assert updated.status_code == 200
    assert updated.get_json()['isFavorite'] is True

    deleted = tenant_client.delete(f"/api/tenant/contacts/{contact['id']}")
    assert deleted.get_json() == {'success': True}
    assert tenant_client.get('/api/tenant/contacts').get_json() == []


def test_contact_filters(tenant_client):
    _add_contact(tenant_client, name='Larry Landlord', contactType='landlord', isFavorite=True)
    _add_contact(tenant_client, name='Alice Agent', contactType='real_estate_agent')

    by_type = tenant_client.get('/api/tenant/contacts?category=landlord').get_json()
    assert [c['name'] for c in by_type] == ['Larry Landlord']

    favorites = tenant_client.get('/api/tenant/contacts?isFavorite=true').get_json()
    assert [c['name'] for c in favorites] == ['Larry Landlord']

    others = tenant_client.get('/api/tenant/contacts?isFavorite=false').get_json()
    assert [c['name'] for c in others] == ['Alice Agent']


def test_contact_validation(tenant_client):
    response = tenant_client.post('/api/tenant/contacts', json={'name': ' '})
    assert response.status_code == 400

    response = tenant_client.post('/api/tenant/contacts', json={'name': 'X', 'contactType': 'friend'})
    assert response.status_code == 400

    response = tenant_client.post('/api/tenant/contacts', json={'name': 'X', 'email': 'nope'})
    assert response.status_code == 400


def test_contacts_are_private(tenant_client, other_tenant_client):
    contact = _add_contact(tenant_client)

    assert other_tenant_client.get('/api/tenant/contacts').get_json() == []
    assert other_tenant_client.delete(f"/api/tenant/contacts/{contact['id']}").status_code == 403


def test_record_contact(tenant_client):
    contact = _add_contact(tenant_client)

    tenant_client.post(f"/api/tenant/contacts/{contact['id']}/contacted")
    response = tenant_client.post(f"/api/tenant/contacts/{contact['id']}/contacted")

    body = response.get_json()
    assert body['contactCount'] == 2
    assert body['lastContactedAt'] is not None


def test_template_ordering(tenant_client):
    _add_template(tenant_client, templateName='Zed follow', category='follow_up')
    _add_template(tenant_client, templateName='Apply now', category='application')
    _add_template(tenant_client, templateName='Default hello', category='initial_inquiry', isDefault=True)

    names = [t['templateName'] for t in tenant_client.get('/api/tenant/message-templates').get_json()]
    assert names == ['Default hello', 'Apply now', 'Zed follow']


def test_template_category_filter_and_usage(tenant_client):
    template = _add_template(tenant_client)
    _add_template(tenant_client, templateName='Other', category='custom')

    listed = tenant_client.get('/api/tenant/message-templates?category=initial_inquiry').get_json()
    assert [t['id'] for t in listed] == [template['id']]
    assert listed[0]['variables'] == ['landlordName']

    used = tenant_client.post(f"/api/tenant/message-templates/{template['id']}/use").get_json()
    assert used['usageCount'] == 1


def test_template_update_and_delete(tenant_client, other_tenant_client):
    template = _add_template(tenant_client)

    response = tenant_client.put(f"/api/tenant/message-templates/{template['id']}",
                                 json={'body': 'New body', 'isDefault': True})
    assert response.get_json()['body'] == 'New body'
    assert response.get_json()['isDefault'] is True

    assert other_tenant_client.delete(f"/api/tenant/message-templates/{template['id']}").status_code == 403
    assert tenant_client.delete(f"/api/tenant/message-templates/{template['id']}").status_code == 200


def test_template_validation(tenant_client):
    response = tenant_client.post('/api/tenant/message-templates', json={'templateName': 'No body'})
    assert response.status_code == 400
    assert response.get_json()['error'] == 'Message body is required'

    response = tenant_client.post('/api/tenant/message-templates',
                                  json={'templateName': 'T', 'body': 'B', 'category': 'spam'})
    assert response.status_code == 400
