"""
User-facing notifications raised by stores and the verification flow.
"""
import logging
from collections import deque

logger = logging.getLogger(__name__)

DEFAULT = 'default'
DESTRUCTIVE = 'destructive'

HISTORY_SIZE = 100


class Notification:
    """A toast-style message: title, optional description, visual variant."""

    def __init__(self, title, description='', variant=DEFAULT):
        self.title = title
        self.description = description
        self.variant = variant

    def __repr__(self):
        return f"<Notification {self.variant}: {self.title}>"


class Notifier:
    """Keeps the most recent notifications and forwards each to an optional callback."""

    def __init__(self, on_notify=None, history_size=HISTORY_SIZE):
        self.on_notify = on_notify
        self.history = deque(maxlen=history_size)

    def notify(self, title, description='', variant=DEFAULT):
        notification = Notification(title=title, description=description, variant=variant)
        self.history.append(notification)
        if variant == DESTRUCTIVE:
            logger.warning("%s: %s", title, description)
        else:
            logger.info("%s: %s", title, description)
        if self.on_notify is not None:
            self.on_notify(notification)
        return notification

    def success(self, title, description=''):
        return self.notify(title, description)

    def error(self, title, description=''):
        return self.notify(title, description, DESTRUCTIVE)

    @property
    def last(self):
        return self.history[-1] if self.history else None
