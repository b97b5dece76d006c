# ui/identity.py
"""Anonymous participant identity for study clients.

The participant id is an opaque UUID kept in a small local JSON file. A new
id is only written locally after the backend accepted its registration;
a failed registration leaves nothing behind, and the next call tries again
with a fresh id.
"""

import json
import uuid
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

import httpx
import structlog

log = structlog.get_logger(__name__)

IDENTITY_KEY = "research_user_id"


class FileIdentityStore:
    """Local identity storage backed by a JSON file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            log.warning("identity_file_corrupt", path=str(self.path))
            return None
        value = data.get(IDENTITY_KEY) if isinstance(data, dict) else None
        return value or None

    def save(self, user_id: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({IDENTITY_KEY: user_id}), encoding="utf-8")


class IdentityProvider:
    """Supplies the participant id, registering a new one on first use.

    Args:
        store: Local identity storage
        registrar: Callable that registers an id with the backend and
            returns {"success": bool, ...} (e.g. APIClient.create_user)
        id_factory: Generates new ids (defaults to uuid4 strings)
    """

    def __init__(
        self,
        store: FileIdentityStore,
        registrar: Callable[[str], Dict[str, Any]],
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.store = store
        self.registrar = registrar
        self.id_factory = id_factory

    def ensure_identity(self) -> Optional[str]:
        """Return the stored id, or register and store a new one.

        Returns:
            Participant id, or None when registration failed
        """
        stored = self.store.load()
        if stored:
            return stored

        candidate = self.id_factory()
        try:
            result = self.registrar(candidate)
        except (httpx.HTTPError, ValueError) as e:
            # ValueError covers a non-JSON body
            log.warning("identity_registration_failed", user_id=candidate, error=str(e))
            return None

        if not isinstance(result, dict) or not result.get("success"):
            log.warning(
                "identity_registration_rejected",
                user_id=candidate,
                error=result.get("error") if isinstance(result, dict) else None,
            )
            return None

        self.store.save(candidate)
        log.info("identity_registered", user_id=candidate)
        return candidate
