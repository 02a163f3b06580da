# eva/api/v1/roles.py
from eva.api.v1.resources import build_resource_router
from eva.services.resources import ROLES

router = build_resource_router(ROLES)
