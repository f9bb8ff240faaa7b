"""Outbound mail collaborator.

Delivery itself lives outside Camp Core. The account service only hands
freshly minted invite and reset tokens to a Mailer.
"""

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Mailer(Protocol):
    def send_invite(self, email: str, name: str, invite_token: str) -> None: ...

    def send_password_reset(self, email: str, reset_token: str) -> None: ...


class LogMailer:
    """Mailer that only records that a message would be sent.

    Tokens are never written to the log.
    """

    def send_invite(self, email: str, name: str, invite_token: str) -> None:
        logger.info(f"Invite email queued for {email}")

    def send_password_reset(self, email: str, reset_token: str) -> None:
        logger.info(f"Password reset email queued for {email}")
