# eva/api/v1/propietarios.py
from eva.api.v1.resources import build_resource_router
from eva.services.resources import PROPIETARIOS

router = build_resource_router(PROPIETARIOS)
