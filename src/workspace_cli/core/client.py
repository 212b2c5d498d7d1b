"""Lazily built Google API service clients."""

import json
from pathlib import Path
from typing import Any

import google.auth.transport.requests
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from loguru import logger

# API name -> (discovery name, version)
SERVICES: dict[str, tuple[str, str]] = {
    "gmail": ("gmail", "v1"),
    "sheets": ("sheets", "v4"),
    "drive": ("drive", "v3"),
    "driveactivity": ("driveactivity", "v2"),
}

SCOPES: list[str] = [
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
    "https://www.googleapis.com/auth/drive.activity.readonly",
]


class ClientFactory:
    """Build and cache one Google API service per API for the current invocation.

    Credentials are read from an authorized-user token file; obtaining that file
    (the OAuth consent flow) happens outside this tool.
    """

    def __init__(
        self,
        token_path: Path,
        client_id: str | None = None,
        client_secret: str | None = None,
        scopes: list[str] | None = None,
    ):
        self.token_path = token_path
        self.client_id = client_id
        self.client_secret = client_secret
        self.scopes = scopes or list(SCOPES)
        self._credentials: Credentials | None = None
        self._services: dict[str, Any] = {}

    @property
    def credentials(self) -> Credentials:
        """Load (and refresh if expired) the stored credentials."""
        if self._credentials is None:
            self._credentials = self._load_credentials()
        return self._credentials

    def _load_credentials(self) -> Credentials:
        if not self.token_path.exists():
            raise FileNotFoundError(
                f"Token file not found: {self.token_path}\n"
                "  Store an authorized-user token there or set GWS_TOKEN_PATH"
            )

        with open(self.token_path) as f:
            token_data = json.load(f)

        # Token files written by other tools may omit the client pair
        if self.client_id and not token_data.get("client_id"):
            token_data["client_id"] = self.client_id
        if self.client_secret and not token_data.get("client_secret"):
            token_data["client_secret"] = self.client_secret

        logger.debug(f"Loading credentials from {self.token_path}")
        creds = Credentials.from_authorized_user_info(token_data, token_data.get("scopes") or self.scopes)

        if not creds.valid and creds.expired and creds.refresh_token:
            logger.info("Refreshing expired credentials")
            creds.refresh(google.auth.transport.requests.Request())
            self._save_credentials(creds)

        return creds

    def _save_credentials(self, creds: Credentials) -> None:
        try:
            self.token_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.token_path, "w") as f:
                f.write(creds.to_json())
            logger.debug("Refreshed token saved")
        except OSError as e:
            logger.warning(f"Failed to save refreshed token: {e}")

    def service(self, name: str) -> Any:
        """Get or create the service client for ``name`` (a key of :data:`SERVICES`)."""
        if name not in SERVICES:
            raise KeyError(f"Unknown API service: {name}")

        if name not in self._services:
            api, version = SERVICES[name]
            logger.debug(f"Building {api} {version} client")
            self._services[name] = build(api, version, credentials=self.credentials, cache_discovery=False)
        return self._services[name]
