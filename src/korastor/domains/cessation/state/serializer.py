"""AppState <-> blob conversion for the key-value store."""

from __future__ import annotations

import json
from typing import Any

from korastor.core.storage.encryption import BlobEncryptor, EncryptionError
from korastor.domains.cessation.domain_logic.models import AppState, HealthSystem


class StateDecodeError(Exception):
    """Raised when a stored blob cannot be turned back into state."""


class StateSerializer:
    """Serializes the aggregate to compact JSON, optionally Fernet-encrypted."""

    def __init__(self, encryptor: BlobEncryptor | None = None) -> None:
        self._enc = encryptor

    @property
    def encrypted(self) -> bool:
        return self._enc is not None

    def _dump(self, data: Any) -> str:
        text = json.dumps(data, separators=(",", ":"), allow_nan=False)
        return self._enc.encrypt(text) if self._enc is not None else text

    def _load(self, blob: str) -> Any:
        try:
            text = self._enc.decrypt(blob) if self._enc is not None else blob
            return json.loads(text)
        except (EncryptionError, json.JSONDecodeError) as exc:
            raise StateDecodeError(f"Stored blob is unreadable: {exc}") from exc

    def dump_state(self, state: AppState) -> str:
        return self._dump(state.to_dict())

    def load_state(self, blob: str) -> AppState:
        data = self._load(blob)
        try:
            return AppState.from_dict(data)
        except (KeyError, TypeError, ValueError) as exc:
            raise StateDecodeError(f"Stored state is incompatible: {exc!r}") from exc

    def dump_health_systems(self, systems: tuple[HealthSystem, ...]) -> str:
        return self._dump([s.to_dict() for s in systems])

    def load_health_systems(self, blob: str) -> tuple[HealthSystem, ...]:
        data = self._load(blob)
        try:
            if not isinstance(data, list):
                raise TypeError("health systems blob must be a list")
            return tuple(HealthSystem.from_dict(s) for s in data)
        except (KeyError, TypeError, ValueError) as exc:
            raise StateDecodeError(f"Stored health systems are incompatible: {exc!r}") from exc
