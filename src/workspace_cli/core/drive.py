"""Google Drive file listing, search and metadata."""

from typing import Any

from loguru import logger

from .errors import InvalidInputError

LIST_FIELDS = "files(id, name, mimeType, size, modifiedTime, webViewLink)"
INFO_FIELDS = (
    "id, name, mimeType, size, createdTime, modifiedTime, webViewLink, webContentLink, owners, parents, shared"
)


def quote_query_value(value: str) -> str:
    """Quote ``value`` as a string literal for a Drive ``q`` expression.

    Examples::

        >>> quote_query_value("Bob's notes")
        "'Bob\\\\'s notes'"
    """
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _file_summary(file: dict[str, Any]) -> dict[str, Any]:
    info: dict[str, Any] = {
        "id": file.get("id", ""),
        "name": file.get("name", ""),
        "mime_type": file.get("mimeType", ""),
    }
    # int64 fields arrive as strings; folders and native docs have no size
    size = int(file.get("size") or 0)
    if size > 0:
        info["size"] = size
    if file.get("modifiedTime"):
        info["modified"] = file["modifiedTime"]
    if file.get("webViewLink"):
        info["web_link"] = file["webViewLink"]
    return info


class DriveClient:
    """Read-only file operations over a ``drive v3`` service, across My Drive and shared drives."""

    def __init__(self, service: Any):
        self.service = service

    def _list(self, query: str, max_results: int, order_by: str | None = None) -> list[dict[str, Any]]:
        params: dict[str, Any] = {
            "q": query,
            "pageSize": max_results,
            "supportsAllDrives": True,
            "includeItemsFromAllDrives": True,
            "fields": LIST_FIELDS,
        }
        if order_by:
            params["orderBy"] = order_by

        logger.debug(f"files.list q={query!r}")
        response = self.service.files().list(**params).execute()
        return [_file_summary(file) for file in response.get("files", [])]

    def list_files(
        self, folder_id: str = "root", max_results: int = 50, order_by: str = "modifiedTime desc"
    ) -> list[dict[str, Any]]:
        """List the non-trashed children of a folder."""
        if not folder_id.strip():
            raise InvalidInputError("folder ID must not be empty")
        query = f"{quote_query_value(folder_id)} in parents and trashed = false"
        return self._list(query, max_results, order_by)

    def search(self, text: str, max_results: int = 50) -> list[dict[str, Any]]:
        """Find non-trashed files whose name or content contains ``text``."""
        if not text.strip():
            raise InvalidInputError("search query must not be empty")
        quoted = quote_query_value(text)
        query = f"(name contains {quoted} or fullText contains {quoted}) and trashed = false"
        return self._list(query, max_results)

    def info(self, file_id: str) -> dict[str, Any]:
        file = self.service.files().get(fileId=file_id, supportsAllDrives=True, fields=INFO_FIELDS).execute()
        info = _file_summary(file)
        info.update(
            created=file.get("createdTime", ""),
            modified=file.get("modifiedTime", ""),
            shared=file.get("shared", False),
        )
        if file.get("webContentLink"):
            info["download_link"] = file["webContentLink"]
        owners = [owner.get("emailAddress", "") for owner in file.get("owners", [])]
        if owners:
            info["owners"] = owners
        if file.get("parents"):
            info["parents"] = file["parents"]
        return info
