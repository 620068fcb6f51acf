"""
User-facing notifications.

The editor and list controllers report outcomes through a Notifier. The
default implementation keeps the messages in memory and mirrors them to the
module logger; UI layers subclass it to show toasts.
"""

import logging

logger = logging.getLogger(__name__)


class Notifier:
    """Collects success/error/loading messages in the order they were raised"""

    def __init__(self):
        self.messages = []

    def _push(self, level, message):
        self.messages.append((level, message))

    def success(self, message):
        self._push('success', message)
        logger.info(message)

    def error(self, message):
        self._push('error', message)
        logger.warning(message)

    def loading(self, message):
        self._push('loading', message)
        logger.debug(message)

    def dismiss(self):
        """Drop any pending loading message"""
        self.messages = [m for m in self.messages if m[0] != 'loading']

    def of_level(self, level):
        return [msg for lvl, msg in self.messages if lvl == level]

    @property
    def last(self):
        return self.messages[-1] if self.messages else None
