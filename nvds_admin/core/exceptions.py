# nvds_admin/core/exceptions.py

from fastapi import HTTPException, status


class ValidationException(HTTPException):
    def __init__(self, detail: str = "Solicitud inválida"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class UploadRejected(HTTPException):
    """La subida no es una imagen o excede el tamaño máximo; no se escribe nada."""

    def __init__(self, detail: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)


# =======================================================
# Errores de almacenamiento (no son HTTP)
# =======================================================
class BackendUnavailable(Exception):
    """
    Un backend no pudo inicializarse o consultar.
    El store lo registra y pasa al siguiente backend.
    """

    def __init__(self, message: str = "Backend de almacenamiento no disponible"):
        self.message = message
        super().__init__(self.message)


class StorageFailure(Exception):
    """
    Falló la ruta activa de almacenamiento (disco o transacción).
    Los routers responden 500 con un mensaje genérico.
    """

    def __init__(self, message: str = "Error de almacenamiento"):
        self.message = message
        super().__init__(self.message)
