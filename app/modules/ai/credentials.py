"""Resolve the Vertex AI service-account credential from configuration.

``GOOGLE_VERTEX_AI_CREDENTIALS`` holds either the JSON document itself or a
path to a JSON file. Relative paths resolve against the working directory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from app.modules.ai.errors import ConfigurationError


REQUIRED_FIELDS = ("type", "project_id", "private_key", "client_email")


class ServiceAccountInfo(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str
    project_id: str
    private_key: str
    client_email: str


def _read_source(raw: str, cwd: Optional[Path]) -> str:
    if raw.startswith("{") or raw.startswith('"'):
        return raw
    path = Path(raw)
    if not path.is_absolute():
        path = (cwd or Path.cwd()) / path
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(
            f"Cannot read Vertex AI credentials file {path}: {exc}"
        ) from exc


def load_service_account_credentials(
    raw: Optional[str], *, cwd: Optional[Path] = None
) -> ServiceAccountInfo:
    value = (raw or "").strip()
    if not value or value == '""':
        raise ConfigurationError("GOOGLE_VERTEX_AI_CREDENTIALS is not set")

    source = _read_source(value, cwd)
    try:
        data = json.loads(source)
        # A JSON string wrapping the document, e.g. from a quoted .env value
        if isinstance(data, str):
            data = json.loads(data)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(
            f"GOOGLE_VERTEX_AI_CREDENTIALS is not valid JSON: {exc}"
        ) from exc
    if not isinstance(data, dict):
        raise ConfigurationError("GOOGLE_VERTEX_AI_CREDENTIALS must be a JSON object")

    missing = [field for field in REQUIRED_FIELDS if not data.get(field)]
    if missing:
        raise ConfigurationError(
            f"Vertex AI credentials missing required fields: {', '.join(missing)}"
        )

    data["private_key"] = data["private_key"].replace("\\n", "\n")
    return ServiceAccountInfo.model_validate(data)
