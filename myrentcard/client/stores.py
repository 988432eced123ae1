"""
In-memory resource stores backed by the MyRentCard REST API.

Each store holds the last fetched list for one resource type. Mutations wait
for the server and then splice the returned record into ``items``; nothing is
applied optimistically, so a failed call leaves the list untouched. Failures
are logged, kept on ``error`` and surfaced through the injected ``Notifier``.
"""
import logging
from myrentcard.client.api import DEFAULT_ERROR_MESSAGE
from myrentcard.client.errors import ClientError
from myrentcard.client.notifications import Notifier

logger = logging.getLogger(__name__)


class ResourceStore:
    """Generic fetch/add/update/delete cache for one REST collection."""

    def __init__(self, client, endpoint, label, notifier=None):
        self.client = client
        self.endpoint = endpoint.rstrip('/')
        self.label = label
        self.notifier = notifier if notifier is not None else Notifier()
        self.items = []
        self.is_loading = False
        self.error = None

    # -- paths -----------------------------------------------------------

    def list_path(self):
        return self.endpoint

    def item_path(self, item_id, action=None):
        path = f"{self.endpoint}/{item_id}"
        return f"{path}/{action}" if action else path

    # -- helpers ---------------------------------------------------------

    def subject(self, record):
        """How success notifications name a record."""
        return f"The {self.label.lower()}"

    def added_message(self, record):
        return f"{self.subject(record)} has been added successfully."

    def _call(self, failure_message, func, *args, **kwargs):
        """Run one API call with loading/error bookkeeping. Returns (ok, result)."""
        self.is_loading = True
        self.error = None
        try:
            result = func(*args, **kwargs)
        except ClientError as e:
            message = getattr(e, 'message', None) or str(e) or DEFAULT_ERROR_MESSAGE
            self.error = message
            logger.error("%s: %s", failure_message, message)
            self.notifier.error('Error', message)
            return False, None
        finally:
            self.is_loading = False
        return True, result

    def _replace(self, record):
        for index, item in enumerate(self.items):
            if item.get('id') == record.get('id'):
                self.items[index] = record
                return
        self.items.append(record)

    # -- operations ------------------------------------------------------

    def fetch(self, params=None):
        """Reload ``items`` from the server. Returns the list, or None on failure."""
        ok, data = self._call(f"Failed to fetch {self.label.lower()}s",
                              self.client.get, self.list_path(), params=params)
        if not ok:
            return None
        self.items = list(data or [])
        return self.items

    def get_by_id(self, item_id):
        for item in self.items:
            if item.get('id') == item_id:
                return item
        return None

    def add(self, payload):
        """Create a record. Returns the stored record, or None on failure."""
        ok, record = self._call(f"Failed to add {self.label.lower()}",
                                self.client.post, self.endpoint, payload)
        if not ok:
            return None
        self.items.append(record)
        self.notifier.success(f"{self.label} Added", self.added_message(record))
        return record

    def update(self, item_id, changes):
        """Update a record. Returns the stored record, or None on failure."""
        ok, record = self._call(f"Failed to update {self.label.lower()}",
                                self.client.put, self.item_path(item_id), changes)
        if not ok:
            return None
        self._replace(record)
        self.notifier.success(f"{self.label} Updated", f"{self.subject(record)} has been updated successfully.")
        return record

    def delete(self, item_id):
        """Delete a record; it leaves ``items`` only once the server confirms."""
        ok, _ = self._call(f"Failed to delete {self.label.lower()}",
                           self.client.delete, self.item_path(item_id))
        if not ok:
            return False
        self.items = [item for item in self.items if item.get('id') != item_id]
        self.notifier.success(f"{self.label} Deleted", f"The {self.label.lower()} has been deleted successfully.")
        return True


class ReferencesStore(ResourceStore):
    """A tenant's references."""

    def __init__(self, client, notifier=None):
        super().__init__(client, '/api/tenant/references', 'Reference', notifier)
        self.tenant_id = None

    def list_path(self):
        return f"{self.endpoint}/{self.tenant_id}"

    def fetch(self, tenant_id):
        self.tenant_id = tenant_id
        return super().fetch()

    def send_verification_email(self, reference_id):
        """Ask the server to e-mail a fresh verification link to the reference."""
        ok, result = self._call('Failed to send verification email',
                                self.client.post, self.item_path(reference_id, 'send-verification'))
        if not ok:
            return None
        if result and result.get('reference'):
            self._replace(result['reference'])
        self.notifier.success('Verification Email Sent', 'The verification email has been sent successfully.')
        return result

    def verify_reference(self, reference_id):
        """Mark a reference verified without the e-mailed link."""
        ok, record = self._call('Failed to verify reference',
                                self.client.post, self.item_path(reference_id, 'verify'))
        if not ok:
            return None
        self._replace(record)
        self.notifier.success('Reference Verified', 'The reference has been verified successfully.')
        return record


class ContactsStore(ResourceStore):
    """A tenant's landlord and agent contacts."""

    def __init__(self, client, notifier=None):
        super().__init__(client, '/api/tenant/contacts', 'Contact', notifier)

    def subject(self, record):
        return record.get('name') or super().subject(record)

    def added_message(self, record):
        return f"{self.subject(record)} has been added to your contacts."

    def fetch(self, category=None, is_favorite=None):
        params = {'category': category}
        if is_favorite is not None:
            params['isFavorite'] = 'true' if is_favorite else 'false'
        return super().fetch(params)

    def get_favorite_contacts(self):
        return [c for c in self.items if c.get('isFavorite')]

    def get_contacts_by_type(self, contact_type):
        return [c for c in self.items if c.get('contactType') == contact_type]

    def record_contact(self, contact_id):
        """Count one more outreach to this contact."""
        ok, record = self._call('Failed to record contact',
                                self.client.post, self.item_path(contact_id, 'contacted'))
        if not ok:
            return None
        self._replace(record)
        return record


def _template_sort_key(template):
    return (
        not template.get('isDefault'),
        template.get('category') or '',
        template.get('templateName') or ''
    )


class MessageTemplatesStore(ResourceStore):
    """A tenant's message templates, defaults first, then by category and name."""

    def __init__(self, client, notifier=None):
        super().__init__(client, '/api/tenant/message-templates', 'Template', notifier)

    def subject(self, record):
        return f'"{record.get("templateName")}"' if record.get('templateName') else super().subject(record)

    def added_message(self, record):
        return f"{self.subject(record)} has been added to your templates."

    def _resort(self):
        self.items.sort(key=_template_sort_key)

    def fetch(self, category=None):
        items = super().fetch({'category': category})
        if items is not None:
            self._resort()
        return items

    def add(self, payload):
        record = super().add(payload)
        if record is not None:
            self._resort()
        return record

    def update(self, item_id, changes):
        record = super().update(item_id, changes)
        if record is not None:
            self._resort()
        return record

    def get_templates_by_category(self, category):
        return [t for t in self.items if t.get('category') == category]

    def get_default_templates(self):
        return [t for t in self.items if t.get('isDefault')]

    def duplicate_template(self, template_id, new_name):
        """Copy a template under a new name. Copies are never defaults."""
        original = self.get_by_id(template_id)
        if original is None:
            self.notifier.error('Error', 'Template not found')
            return None

        return self.add({
            'templateName': new_name,
            'subject': original.get('subject'),
            'body': original.get('body'),
            'category': original.get('category'),
            'variables': original.get('variables') or [],
            'isDefault': False,
        })

    def record_usage(self, template_id):
        ok, record = self._call('Failed to record template usage',
                                self.client.post, self.item_path(template_id, 'use'))
        if not ok:
            return None
        self._replace(record)
        return record


class CommunicationTemplatesStore(ResourceStore):
    """A landlord's active communication templates."""

    def __init__(self, client, notifier=None):
        super().__init__(client, '/api/landlord/communication-templates', 'Template', notifier)

    def subject(self, record):
        return f'"{record.get("title")}"' if record.get('title') else super().subject(record)

    def fetch(self, category=None):
        return super().fetch({'category': category})


class CommunicationLogsStore(ResourceStore):
    """Messages a landlord has sent to tenants, newest first."""

    def __init__(self, client, notifier=None):
        super().__init__(client, '/api/communication-logs', 'Message', notifier)

    def fetch(self, tenant_id=None, property_id=None):
        return super().fetch({'tenantId': tenant_id, 'propertyId': property_id})

    def send(self, tenant_id, communication_type, message, subject=None, template_id=None,
             property_id=None, interest_id=None, thread_id=None, metadata=None):
        """Send a message; refused by the server when the tenant does not accept contact."""
        payload = {
            'tenantId': tenant_id,
            'communicationType': communication_type,
            'message': message,
            'subject': subject,
            'templateId': template_id,
            'propertyId': property_id,
            'interestId': interest_id,
            'threadId': thread_id,
            'metadata': metadata,
        }
        ok, record = self._call('Failed to send message', self.client.post, self.endpoint,
                                {k: v for k, v in payload.items() if v is not None})
        if not ok:
            return None
        self.items.insert(0, record)
        self.notifier.success('Message Sent', f"Your {communication_type} has been sent.")
        return record

    def update_status(self, log_id, status):
        ok, record = self._call('Failed to update message status',
                                self.client.patch, self.item_path(log_id, 'status'), {'status': status})
        if not ok:
            return None
        self._replace(record)
        return record

    def stats(self):
        """Totals per channel and the share of messages that went out."""
        total = len(self.items)
        succeeded = len([log for log in self.items if log.get('status') in ('sent', 'delivered')])
        return {
            'totalCommunications': total,
            'emailCount': len([log for log in self.items if log.get('communicationType') == 'email']),
            'phoneCount': len([log for log in self.items if log.get('communicationType') == 'phone']),
            'smsCount': len([log for log in self.items if log.get('communicationType') == 'sms']),
            'successRate': int(succeeded * 100 / total + 0.5) if total else 0,
        }
