"""
Client library for the MyRentCard API: resource stores and the reference verification flow.
"""
from myrentcard.client.api import ApiClient
from myrentcard.client.errors import ClientError, ApiError, NetworkError, FlowStateError
from myrentcard.client.notifications import Notification, Notifier
from myrentcard.client.stores import (
    ResourceStore,
    ReferencesStore,
    ContactsStore,
    MessageTemplatesStore,
    CommunicationTemplatesStore,
    CommunicationLogsStore
)
from myrentcard.client.verification import (
    ProgressTracker,
    TokenValidator,
    VerificationForm,
    VerificationFlow,
    classify_error
)

__all__ = [
    'ApiClient',
    'ClientError',
    'ApiError',
    'NetworkError',
    'FlowStateError',
    'Notification',
    'Notifier',
    'ResourceStore',
    'ReferencesStore',
    'ContactsStore',
    'MessageTemplatesStore',
    'CommunicationTemplatesStore',
    'CommunicationLogsStore',
    'ProgressTracker',
    'TokenValidator',
    'VerificationForm',
    'VerificationFlow',
    'classify_error'
]
