"""Application context shared by all commands of one invocation."""

from dataclasses import dataclass
from typing import Any

import typer

from ..core.client import ClientFactory
from ..core.drive import DriveClient
from ..core.gmail import GmailClient
from ..core.sheets import SheetsClient
from ..settings import Settings


@dataclass
class AppContext:
    """Settings plus the lazily built API clients.

    The root callback creates one and stores it on the Click context; tests
    pass their own through ``CliRunner.invoke(..., obj=...)``.
    """

    settings: Settings
    clients: ClientFactory

    @classmethod
    def from_settings(cls, settings: Settings) -> "AppContext":
        clients = ClientFactory(
            token_path=settings.resolved_token_path,
            client_id=settings.client_id,
            client_secret=settings.client_secret,
        )
        return cls(settings=settings, clients=clients)

    def sheets(self) -> SheetsClient:
        return SheetsClient(self.clients.service("sheets"))

    def gmail(self) -> GmailClient:
        return GmailClient(self.clients.service("gmail"))

    def drive(self) -> DriveClient:
        return DriveClient(self.clients.service("drive"))

    def drive_activity(self) -> Any:
        return self.clients.service("driveactivity")


def get_app_context(ctx: typer.Context) -> AppContext:
    """Fetch the :class:`AppContext` stored by the root callback."""
    app_ctx = ctx.find_object(AppContext)
    if app_ctx is None:
        raise RuntimeError("application context not initialized")
    return app_ctx
