"""Gmail label resolution and message actions."""

import base64
from dataclasses import dataclass
from typing import Any

from googleapiclient.errors import HttpError
from loguru import logger

from .errors import InvalidInputError, LabelNotFoundError

# Gmail API hard limit per threads.list page
MAX_PAGE_SIZE = 500

THREAD_HEADERS = {"Subject": "subject", "From": "from", "Date": "date"}
MESSAGE_HEADERS = {"Subject", "From", "To", "Date", "Cc", "Bcc"}


@dataclass
class ArchiveResult:
    """Per-message tally of a thread archive."""

    thread_id: str
    archived: int = 0
    failed: int = 0
    total: int = 0


def resolve_label_ids(label_map: dict[str, str], names: list[str]) -> list[str]:
    """Convert label names to IDs using a map from :meth:`GmailClient.label_map`.

    Matching is case-insensitive and blank names are skipped.

    Raises:
        LabelNotFoundError: If a name has no matching label.
    """
    ids = []
    for name in names:
        name = name.strip()
        if not name:
            continue
        label_id = label_map.get(name.upper())
        if label_id is None:
            raise LabelNotFoundError(name)
        ids.append(label_id)
    return ids


def _decode(data: str) -> str:
    # Gmail omits base64 padding
    return base64.urlsafe_b64decode(data + "=" * (-len(data) % 4)).decode("utf-8", errors="replace")


def extract_body(payload: dict[str, Any]) -> str:
    """Extract a readable body from a message payload.

    Prefers ``text/plain`` parts, falls back to ``text/html``, then descends
    into nested ``multipart/*`` parts.
    """
    data = payload.get("body", {}).get("data")
    if data:
        return _decode(data)

    parts = payload.get("parts", [])
    for mime_type in ("text/plain", "text/html"):
        for part in parts:
            part_data = part.get("body", {}).get("data")
            if part.get("mimeType") == mime_type and part_data:
                return _decode(part_data)

    for part in parts:
        if part.get("mimeType", "").startswith("multipart/"):
            body = extract_body(part)
            if body:
                return body

    return ""


def _message_detail(message: dict[str, Any]) -> dict[str, Any]:
    payload = message.get("payload", {})
    headers = {
        header["name"].lower(): header.get("value", "")
        for header in payload.get("headers", [])
        if header.get("name") in MESSAGE_HEADERS
    }
    return {
        "id": message.get("id", ""),
        "headers": headers,
        "body": extract_body(payload),
        "labels": message.get("labelIds", []),
    }


class GmailClient:
    """Operations over a ``gmail v1`` service for the authenticated user."""

    def __init__(self, service: Any, user_id: str = "me"):
        self.service = service
        self.user_id = user_id

    # Labels

    def list_labels(self) -> list[dict[str, Any]]:
        response = self.service.users().labels().list(userId=self.user_id).execute()
        return [
            {"id": label.get("id", ""), "name": label.get("name", ""), "type": label.get("type", "")}
            for label in response.get("labels", [])
        ]

    def label_map(self) -> dict[str, str]:
        """Upper-cased label name to label ID."""
        return {label["name"].upper(): label["id"] for label in self.list_labels()}

    def resolve_label_names(self, names: list[str]) -> list[str]:
        return resolve_label_ids(self.label_map(), names)

    def modify_labels(self, message_id: str, add: list[str], remove: list[str]) -> dict[str, Any]:
        """Add and remove labels by name on one message."""
        if not any(name.strip() for name in add + remove):
            raise InvalidInputError("at least one of --add or --remove is required")

        # One label fetch serves both lists
        labels = self.label_map()
        body: dict[str, list[str]] = {}
        if add:
            body["addLabelIds"] = resolve_label_ids(labels, add)
        if remove:
            body["removeLabelIds"] = resolve_label_ids(labels, remove)

        message = self._modify(message_id, body)
        return {"message_id": message.get("id", message_id), "labels": message.get("labelIds", [])}

    def _modify(self, message_id: str, body: dict[str, list[str]]) -> dict[str, Any]:
        return self.service.users().messages().modify(userId=self.user_id, id=message_id, body=body).execute()

    # Message actions

    def archive(self, message_id: str) -> dict[str, Any]:
        message = self._modify(message_id, {"removeLabelIds": ["INBOX"]})
        return {"message_id": message.get("id", message_id), "labels": message.get("labelIds", [])}

    def archive_thread(self, thread_id: str) -> ArchiveResult:
        """Archive every message of a thread, counting failures instead of stopping."""
        thread = self.service.users().threads().get(userId=self.user_id, id=thread_id, format="minimal").execute()
        messages = thread.get("messages", [])
        result = ArchiveResult(thread_id=thread_id, total=len(messages))

        for message in messages:
            try:
                self._modify(message["id"], {"removeLabelIds": ["INBOX", "UNREAD"]})
            except HttpError as e:
                logger.warning(f"Failed to archive message {message['id']}: {e}")
                result.failed += 1
                continue
            result.archived += 1

        logger.info(f"Archived {result.archived}/{result.total} messages in thread {thread_id}")
        return result

    def trash(self, message_id: str) -> dict[str, Any]:
        message = self.service.users().messages().trash(userId=self.user_id, id=message_id).execute()
        return {"message_id": message.get("id", message_id)}

    # Threads

    def _list_thread_ids(self, query: str, max_results: int, fetch_all: bool) -> list[dict[str, Any]]:
        threads: list[dict[str, Any]] = []
        page_token = None
        page = 1

        while True:
            per_page = MAX_PAGE_SIZE
            if not fetch_all:
                remaining = max_results - len(threads)
                if remaining <= 0:
                    break
                per_page = min(remaining, MAX_PAGE_SIZE)

            params: dict[str, Any] = {"userId": self.user_id, "maxResults": per_page}
            if query:
                params["q"] = query
            if page_token:
                params["pageToken"] = page_token

            response = self.service.users().threads().list(**params).execute()
            threads.extend(response.get("threads", []))

            page_token = response.get("nextPageToken")
            if not page_token:
                break
            logger.info(f"Fetched page {page} ({len(threads)} threads so far)")
            page += 1

        if not fetch_all:
            threads = threads[:max_results]
        return threads

    def list_threads(
        self, query: str = "", max_results: int = 10, fetch_all: bool = False, include_labels: bool = False
    ) -> list[dict[str, Any]]:
        """List threads with subject, sender and date of their first message."""
        results = []
        for thread in self._list_thread_ids(query, max_results, fetch_all):
            try:
                detail = (
                    self.service.users()
                    .threads()
                    .get(
                        userId=self.user_id,
                        id=thread["id"],
                        format="metadata",
                        metadataHeaders=list(THREAD_HEADERS),
                    )
                    .execute()
                )
            except HttpError as e:
                logger.warning(f"Skipping thread {thread['id']}: {e}")
                continue

            messages = detail.get("messages", [])
            info: dict[str, Any] = {
                "thread_id": thread["id"],
                "snippet": thread.get("snippet", ""),
                "message_count": len(messages),
            }
            if messages:
                info["message_id"] = messages[-1].get("id", "")
                for header in messages[0].get("payload", {}).get("headers", []):
                    key = THREAD_HEADERS.get(header.get("name", ""))
                    if key:
                        info[key] = header.get("value", "")
                if include_labels:
                    info["labels"] = sorted({label for m in messages for label in m.get("labelIds", [])})
            results.append(info)

        return results

    def get_message(self, message_id: str) -> dict[str, Any]:
        """Fetch one message with its selected headers and decoded body."""
        message = self.service.users().messages().get(userId=self.user_id, id=message_id, format="full").execute()
        return _message_detail(message)

    def get_thread(self, thread_id: str) -> dict[str, Any]:
        thread = self.service.users().threads().get(userId=self.user_id, id=thread_id, format="full").execute()
        messages = [_message_detail(message) for message in thread.get("messages", [])]
        return {"thread_id": thread_id, "message_count": len(messages), "messages": messages}
