"""
Proveedor de identidad del usuario que opera el dispositivo.
El login vive fuera de este núcleo; aquí solo se consulta quién es.
"""

from typing import Protocol


class AuthProvider(Protocol):
    def current_user_id(self) -> str | None:
        ...


class StaticAuthProvider:
    """Usuario fijo (DEVICE_USER_ID) para procesos sin sesión interactiva."""

    def __init__(self, user_id: str | None = None):
        self._user_id = user_id

    def current_user_id(self) -> str | None:
        return self._user_id
