from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from email.message import EmailMessage as MimeMessage
from typing import List, Optional, Protocol, Sequence, Set

from models.mail_thread import MailThread, ThreadSummary
from services.gmail_service import UNREAD_LABEL
from services.thread_classifier import ThreadClassifier, Verdict
from utils.config import ResponderConfig

LOGGER = logging.getLogger(__name__)


class MailGateway(Protocol):
    def list_sent_thread_ids(self) -> Set[str]: ...

    def list_recent_threads(self, max_results: int) -> List[ThreadSummary]: ...

    def get_thread(self, thread_id: str) -> MailThread: ...

    def send_message(self, thread_id: str, raw_message: bytes) -> dict: ...

    def modify_thread_labels(self, thread_id: str, add: Sequence[str] = (), remove: Sequence[str] = ()) -> dict: ...

    def find_label(self, label_name: str) -> Optional[str]: ...

    def ensure_label(self, label_name: str) -> str: ...


@dataclass(slots=True)
class PassSummary:
    scanned: int = 0
    replied: List[str] = field(default_factory=list)
    skipped: Counter = field(default_factory=Counter)
    dry_run: bool = False

    def describe(self) -> str:
        skipped = ", ".join(f"{verdict.value}: {count}" for verdict, count in sorted(self.skipped.items())) or "none"
        action = "would reply to" if self.dry_run else "replied to"
        return f"scanned {self.scanned} thread(s), {action} {len(self.replied)}, skipped {skipped}"


def build_reply(recipient: str, subject: str, body: str) -> bytes:
    message = MimeMessage()
    message["To"] = recipient
    message["Subject"] = f"Re: {subject}"
    message.set_content(body)
    return message.as_bytes()


class AutoResponder:
    """Scan recent threads and acknowledge the ones nobody has answered yet."""

    def __init__(
        self,
        gmail: MailGateway,
        config: ResponderConfig,
        classifier: ThreadClassifier | None = None,
        dry_run: bool = False,
    ):
        self._gmail = gmail
        self._config = config
        self._classifier = classifier or ThreadClassifier(config.owner_address)
        self._dry_run = dry_run

    def run_pass(self, max_threads: int | None = None) -> PassSummary:
        summary = PassSummary(dry_run=self._dry_run)
        label_id = self._resolve_label()
        replied_thread_ids = self._gmail.list_sent_thread_ids()
        threads = self._gmail.list_recent_threads(max_threads or self._config.max_threads_per_pass)
        if not threads:
            LOGGER.info("No threads found.")
            return summary

        for candidate in threads:
            summary.scanned += 1
            if candidate.id in replied_thread_ids:
                LOGGER.debug("Skipping %s: owner already replied", candidate.id)
                summary.skipped[Verdict.ALREADY_REPLIED] += 1
                continue

            thread = self._gmail.get_thread(candidate.id)
            verdict = self._classifier.classify(thread, replied_thread_ids, label_id)
            if verdict is not Verdict.REPLY:
                summary.skipped[verdict] += 1
                continue

            if self._dry_run:
                recipient = self._classifier.resolve_recipient(thread.messages)
                LOGGER.info("[dry-run] Would reply to thread %s at %r", thread.id, recipient)
                summary.replied.append(thread.id)
                continue

            if self.reply_and_tag(thread, label_id):
                summary.replied.append(thread.id)
            else:
                summary.skipped[Verdict.NO_RECIPIENT] += 1

        LOGGER.info("Pass complete: %s", summary.describe())
        return summary

    def reply_and_tag(self, thread: MailThread, label_id: str) -> bool:
        recipient = self._classifier.resolve_recipient(thread.messages)
        if not recipient:
            LOGGER.warning("Thread %s has no recipient to reply to; leaving it untouched", thread.id)
            return False

        raw = build_reply(recipient, self._config.reply_subject, self._config.reply_body)
        self._gmail.send_message(thread.id, raw)
        LOGGER.info("Replied to thread with ID: %s", thread.id)
        self._gmail.modify_thread_labels(thread.id, add=[label_id], remove=[UNREAD_LABEL])
        return True

    def _resolve_label(self) -> Optional[str]:
        if self._dry_run:
            label_id = self._gmail.find_label(self._config.label_name)
            if label_id is None:
                LOGGER.info("[dry-run] Label %s does not exist yet", self._config.label_name)
            return label_id
        return self._gmail.ensure_label(self._config.label_name)
