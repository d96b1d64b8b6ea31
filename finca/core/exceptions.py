"""
Excepciones del núcleo de sincronización.

Dos familias con políticas de propagación opuestas:
- LocalStoreError: fatal para la operación, se propaga al llamador.
- RemoteStoreError: nunca se propaga fuera de los repositorios;
  solo afecta el flag `synchronized` y el log de errores.

ValidationException es la única excepción HTTP: la usa la API de monitoreo.
"""

from fastapi import HTTPException


class FincaError(Exception):
    """Error base de la aplicación."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class LocalStoreError(FincaError):
    """Fallo del almacenamiento local (disco, constraint, etc.). No se reintenta."""


class RecordNotFoundError(LocalStoreError):
    """Se intentó actualizar una identidad que no existe localmente."""

    def __init__(self, kind: str, identity: str):
        self.kind = kind
        self.identity = identity
        super().__init__(f"{kind} {identity} no encontrado en el almacén local")


class RemoteStoreError(FincaError):
    """
    Error de comunicación con el almacén remoto.
    `permanent` indica que reintentar sin cambios no va a funcionar.
    """

    permanent: bool = False

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        self.status_code = status_code
        self.response_data = response_data or {}
        super().__init__(message)


class RemoteUnavailableError(RemoteStoreError):
    """Red caída, timeout, 5xx o rate limit. Transitorio."""


class RemoteAuthError(RemoteStoreError):
    """Credenciales expiradas (401). Transitorio hasta renovar el token."""


class RemoteRejectedError(RemoteStoreError):
    """El servidor rechazó el documento (permisos, formato, cuota)."""

    permanent = True


# ── HTTP ─────────────────────────────────────────────

class ValidationException(HTTPException):
    """Error de validación de negocio (422)."""

    def __init__(self, detail: str = "Error de validación"):
        super().__init__(
            status_code=422,
            detail=detail,
        )
