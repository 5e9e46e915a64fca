"""Rich table formatters for stored API docs and credentials."""

from __future__ import annotations

from rich.table import Table

from apiscout.models.api_doc import ApiDoc
from apiscout.models.credential import Credential


def whitelist_table(docs: list[ApiDoc]) -> Table:
    """One row per registered doc with the base URL it whitelists."""
    table = Table(title="Whitelisted Base URLs", show_lines=False, pad_edge=False)
    table.add_column("API Doc", style="bold")
    table.add_column("Base URL")
    table.add_column("Endpoints", justify="right")
    table.add_column("Smart Cache", style="muted")

    for doc in sorted(docs, key=lambda d: d.id):
        table.add_row(
            doc.id,
            doc.base_url,
            str(len(doc.endpoints)),
            "yes" if doc.api_hash_url else "",
        )
    return table


def credentials_table(credentials: list[Credential]) -> Table:
    """Masked credentials. Callers must pass already-masked records."""
    table = Table(title="Credentials", show_lines=False, pad_edge=False)
    table.add_column("ID", style="bold")
    table.add_column("Name")
    table.add_column("Type")
    table.add_column("API Doc", style="muted")
    table.add_column("Secret", style="secret")

    for credential in sorted(credentials, key=lambda c: c.id):
        table.add_row(
            credential.id,
            credential.name,
            _type_label(credential),
            credential.api_doc_id or "",
            _secret_preview(credential),
        )
    return table


def _type_label(credential: Credential) -> str:
    if credential.is_dynamic_bearer:
        return "bearer (smart)"
    return credential.type.value


def _secret_preview(credential: Credential) -> str:
    config = credential.config
    for value in (config.api_key, config.token, config.access_token, config.password):
        if value:
            return value
    if config.custom_headers:
        return ", ".join(f"{h.name}: {h.value}" for h in config.custom_headers)
    if config.headers:
        return ", ".join(f"{k}: {v}" for k, v in config.headers.items())
    if config.login_url:
        return f"login via {config.login_url}"
    return ""
