from __future__ import annotations

import logging
from enum import Enum
from typing import AbstractSet, Sequence

from models.mail_thread import MailThread, ThreadMessage

LOGGER = logging.getLogger(__name__)


class Verdict(str, Enum):
    REPLY = "reply"
    ALREADY_REPLIED = "already_replied"
    SENT_BY_OWNER = "sent_by_owner"
    ALREADY_LABELED = "already_labeled"
    NO_RECIPIENT = "no_recipient"


class ThreadClassifier:
    """Decide whether a thread is still owed an acknowledgement.

    Three independent guards are checked in order and the first one that
    fires wins:

    1. the thread id is in the replied set built from the owner's sent mail;
    2. one of the thread's messages has the owner address as its ``From``;
    3. the thread already carries the auto-reply label.

    Guards 1 and 2 overlap on purpose: either signal alone may be incomplete.
    """

    def __init__(self, owner_address: str):
        self.owner_address = owner_address

    def is_owner(self, address: str | None) -> bool:
        return address is not None and address == self.owner_address

    def is_sent_by_owner(self, message: ThreadMessage) -> bool:
        return self.is_owner(message.header("From"))

    def classify(self, thread: MailThread, replied_thread_ids: AbstractSet[str], label_id: str | None) -> Verdict:
        if thread.id in replied_thread_ids:
            verdict = Verdict.ALREADY_REPLIED
        elif any(self.is_sent_by_owner(message) for message in thread.messages):
            verdict = Verdict.SENT_BY_OWNER
        elif label_id is not None and label_id in thread.label_ids:
            verdict = Verdict.ALREADY_LABELED
        else:
            verdict = Verdict.REPLY
        LOGGER.debug("Thread %s classified as %s", thread.id, verdict.value)
        return verdict

    def is_reply_worthy(self, thread: MailThread, replied_thread_ids: AbstractSet[str], label_id: str | None) -> bool:
        return self.classify(thread, replied_thread_ids, label_id) is Verdict.REPLY

    def resolve_recipient(self, messages: Sequence[ThreadMessage]) -> str:
        """Address the reply goes to: the ``To`` of the last message.

        A last message addressed to the owner is answered at its ``From``.
        """

        last = messages[-1]
        recipient = last.header("To") or ""
        if self.is_owner(recipient):
            return last.header("From") or ""
        return recipient
