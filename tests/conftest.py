"""Pytest fixtures for workspace-cli tests."""

from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from workspace_cli.cli.context import AppContext
from workspace_cli.settings import Settings

SHEETS_METADATA: dict[str, Any] = {
    "sheets": [
        {"properties": {"sheetId": 0, "title": "Sheet1", "index": 0}},
        {"properties": {"sheetId": 42, "title": "Sheet2", "index": 1}},
        {"properties": {"sheetId": 7, "title": "Q1 Budget", "index": 2}},
    ]
}

LABELS: dict[str, Any] = {
    "labels": [
        {"id": "INBOX", "name": "INBOX", "type": "system"},
        {"id": "UNREAD", "name": "UNREAD", "type": "system"},
        {"id": "Label_1", "name": "Work", "type": "user"},
        {"id": "Label_2", "name": "Receipts/2024", "type": "user"},
    ]
}


@pytest.fixture
def service() -> MagicMock:
    """Stand-in for a googleapiclient service resource."""
    return MagicMock()


@pytest.fixture
def sheets_service(service: MagicMock) -> MagicMock:
    """Sheets service whose spreadsheet has Sheet1 (0), Sheet2 (42) and 'Q1 Budget' (7)."""
    service.spreadsheets.return_value.get.return_value.execute.return_value = SHEETS_METADATA
    return service


@pytest.fixture
def gmail_service(service: MagicMock) -> MagicMock:
    """Gmail service with system labels plus Work and Receipts/2024."""
    service.users.return_value.labels.return_value.list.return_value.execute.return_value = LABELS
    return service


@pytest.fixture
def app_context(service: MagicMock, tmp_path: Path) -> AppContext:
    """Application context whose client factory hands out the mocked ``service``."""
    clients = MagicMock()
    clients.service.return_value = service
    return AppContext(settings=Settings(_env_file=None, token_path=tmp_path / "token.json"), clients=clients)


@pytest.fixture
def token_file(tmp_path: Path) -> Path:
    """Authorized-user token file without a client pair."""
    token = tmp_path / "token.json"
    token.write_text('{"token": "access", "refresh_token": "refresh", "token_uri": "https://oauth2.googleapis.com/token"}')
    return token
