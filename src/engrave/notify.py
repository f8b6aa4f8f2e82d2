"""Outbound notifications for job write events.

The repository emits a JobEvent after every successful write. A Notifier
registered as a sink turns it into one e-mail per configured recipient and
delivers them on a background thread, so a mail provider outage never fails
the write that triggered it.

Usage:
    notifier = Notifier(cfg.notifications, LogMailer())
    repo = JobRepository(store, sinks=[notifier])
    ...
    notifier.close()
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Protocol

from engrave.config import NotificationsCfg
from engrave.store.models import JobEvent

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MailMessage:
    to: str
    subject: str
    body: str
    sender: str = ""
    sender_name: str = ""


class Mailer(Protocol):
    """Anything that can deliver a single message."""

    def send(self, message: MailMessage) -> None: ...


class LogMailer:
    """Default mailer: records outgoing mail in the log instead of sending it."""

    def send(self, message: MailMessage) -> None:
        logger.info("Mail to %s: %s", message.to, message.subject)


class MemoryMailer:
    """Collects messages in memory."""

    def __init__(self) -> None:
        self.sent: list[MailMessage] = []

    def send(self, message: MailMessage) -> None:
        self.sent.append(message)


def build_messages(event: JobEvent, cfg: NotificationsCfg) -> list[MailMessage]:
    """One message per recipient configured for *event.kind*."""
    body = (
        f"Job: {event.key.headstone_name}\n"
        f"Invoice: {event.key.invoice_no}\n"
        f"\nFrom {cfg.sender_name}"
    )
    return [
        MailMessage(
            to=address,
            subject=event.subject,
            body=body,
            sender=cfg.sender,
            sender_name=cfg.sender_name,
        )
        for address in cfg.recipients.get(event.kind, [])
    ]


class Notifier:
    """Event sink that mails recipients asynchronously (fire-and-forget)."""

    def __init__(self, cfg: NotificationsCfg, mailer: Mailer, *, max_workers: int = 2) -> None:
        self._cfg = cfg
        self._mailer = mailer
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="notify")

    def __call__(self, event: JobEvent) -> None:
        if not self._cfg.enabled:
            return
        for message in build_messages(event, self._cfg):
            self._executor.submit(self._deliver, message)

    def _deliver(self, message: MailMessage) -> None:
        try:
            self._mailer.send(message)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Notification to %s failed: %s", message.to, exc)

    def close(self) -> None:
        """Wait for queued deliveries and stop the worker threads."""
        self._executor.shutdown(wait=True)

    def __enter__(self) -> Notifier:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
