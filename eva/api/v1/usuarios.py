# eva/api/v1/usuarios.py
# Lectura para cualquier usuario autenticado; altas/cambios/bajas solo Administrador.
from eva.api.v1.resources import build_resource_router
from eva.services.resources import USUARIOS

router = build_resource_router(USUARIOS)
