# mailer.py - builds pre-filled mailto: messages for the visitor's own mail client
# nothing is delivered from the server, so there is no send confirmation

import logging
from dataclasses import dataclass
from urllib.parse import quote

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutboundMessage:
    recipient: str
    subject: str
    body: str

    @property
    def mailto(self):
        return 'mailto:{}?subject={}&body={}'.format(
            quote(self.recipient, safe='@'),
            quote(self.subject, safe=''),
            quote(self.body, safe=''),
        )


class MailComposer:
    def __init__(self):
        self.outbox = []

    def compose(self, recipient, subject, body):
        return OutboundMessage(recipient=recipient, subject=subject, body=body)

    def send(self, message):
        # the confirmation page opens every queued link
        self.outbox.append(message)
        logger.info('order message queued for %s', message.recipient)
        return message
