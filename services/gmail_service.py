from __future__ import annotations

import base64
import logging
from typing import Any, Dict, List, Optional, Sequence, Set

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from models.mail_thread import Label, MailThread, ThreadMessage, ThreadSummary
from services.auth_service import AuthService
from utils.config import AccountConfig

LOGGER = logging.getLogger(__name__)

UNREAD_LABEL = "UNREAD"
SENT_QUERY = "is:sent"
THREAD_HEADERS = ("From", "To")


class GmailService:
    """Wrapper around the Gmail API for the operations the responder needs."""

    def __init__(self, account: AccountConfig, auth_service: AuthService | None = None, client: Any = None):
        self._account = account
        if client is None:
            if auth_service is None:
                raise ValueError("Either an auth service or a Gmail client is required")
            creds = auth_service.authenticate()
            client = build("gmail", "v1", credentials=creds, cache_discovery=False)
        self._client = client

    @property
    def user_id(self) -> str:
        return self._account.user_id

    def list_sent_thread_ids(self) -> Set[str]:
        try:
            response = (
                self._client.users()
                .messages()
                .list(userId=self.user_id, q=SENT_QUERY)
                .execute()
            )
        except HttpError as exc:
            LOGGER.error("Failed to list sent messages: %s", exc)
            raise

        thread_ids = {message["threadId"] for message in response.get("messages", []) if message.get("threadId")}
        LOGGER.debug("Found %s threads with sent messages", len(thread_ids))
        return thread_ids

    def list_recent_threads(self, max_results: int) -> List[ThreadSummary]:
        try:
            response = (
                self._client.users()
                .threads()
                .list(userId=self.user_id, maxResults=max_results)
                .execute()
            )
        except HttpError as exc:
            LOGGER.error("Failed to list threads: %s", exc)
            raise

        threads = response.get("threads", []) or []
        LOGGER.info("Fetched %s recent threads", len(threads))
        return [ThreadSummary(id=item["id"], snippet=item.get("snippet", "")) for item in threads]

    def get_thread(self, thread_id: str) -> MailThread:
        try:
            response = (
                self._client.users()
                .threads()
                .get(userId=self.user_id, id=thread_id, format="metadata", metadataHeaders=list(THREAD_HEADERS))
                .execute()
            )
        except HttpError as exc:
            LOGGER.error("Failed to fetch thread %s: %s", thread_id, exc)
            raise
        return _thread_from_response(response)

    def send_message(self, thread_id: str, raw_message: bytes) -> Dict:
        body = {
            "threadId": thread_id,
            "raw": base64.urlsafe_b64encode(raw_message).decode("ascii"),
        }
        try:
            response = self._client.users().messages().send(userId=self.user_id, body=body).execute()
        except HttpError as exc:
            LOGGER.error("Failed to send message into thread %s: %s", thread_id, exc)
            raise
        LOGGER.debug("Sent message %s into thread %s", response.get("id"), thread_id)
        return response

    def modify_thread_labels(
        self,
        thread_id: str,
        add: Sequence[str] = (),
        remove: Sequence[str] = (),
    ) -> Dict:
        if not add and not remove:
            LOGGER.debug("No label changes supplied for thread %s", thread_id)
            return {}
        body = {"addLabelIds": list(add), "removeLabelIds": list(remove)}
        try:
            response = (
                self._client.users()
                .threads()
                .modify(userId=self.user_id, id=thread_id, body=body)
                .execute()
            )
        except HttpError as exc:
            LOGGER.error("Failed to modify labels on thread %s: %s", thread_id, exc)
            raise
        LOGGER.info("Tagged thread %s (added %s, removed %s)", thread_id, list(add), list(remove))
        return response

    def list_labels(self) -> List[Label]:
        try:
            response = self._client.users().labels().list(userId=self.user_id).execute()
        except HttpError as exc:
            LOGGER.error("Failed to list labels: %s", exc)
            raise
        return [Label(id=item["id"], name=item["name"]) for item in response.get("labels", [])]

    def create_label(self, label_name: str) -> Label:
        body = {"name": label_name, "labelListVisibility": "labelShow", "messageListVisibility": "show"}
        try:
            response = self._client.users().labels().create(userId=self.user_id, body=body).execute()
        except HttpError as exc:
            LOGGER.error("Failed to create label %s: %s", label_name, exc)
            raise
        LOGGER.info("Created label %s with id %s", label_name, response["id"])
        return Label(id=response["id"], name=response.get("name", label_name))

    def find_label(self, label_name: str) -> Optional[str]:
        for label in self.list_labels():
            if label.name.lower() == label_name.lower():
                LOGGER.debug("Label %s already exists as %s", label_name, label.id)
                return label.id
        return None

    def ensure_label(self, label_name: str) -> str:
        label_id = self.find_label(label_name)
        if label_id is not None:
            return label_id
        return self.create_label(label_name).id


def _headers_to_dict(headers: Sequence[Dict[str, str]]) -> Dict[str, str]:
    mapped: Dict[str, str] = {}
    for header in headers:
        name = header.get("name", "").lower()
        if name:
            mapped.setdefault(name, header.get("value", ""))
    return mapped


def _message_from_response(message: Dict, thread_id: str) -> ThreadMessage:
    payload = message.get("payload", {}) or {}
    return ThreadMessage(
        id=message.get("id", ""),
        thread_id=message.get("threadId", thread_id),
        headers=_headers_to_dict(payload.get("headers", []) or []),
        label_ids=frozenset(message.get("labelIds", []) or []),
    )


def _thread_from_response(response: Dict) -> MailThread:
    thread_id = response["id"]
    messages = [_message_from_response(message, thread_id) for message in response.get("messages", []) or []]
    if not messages:
        raise ValueError(f"Thread {thread_id} returned no messages")
    label_ids = set(response.get("labelIds", []) or [])
    for message in messages:
        label_ids.update(message.label_ids)
    return MailThread(id=thread_id, messages=messages, label_ids=label_ids)
