from fastapi import APIRouter
from crmgen.api.routes_health import router as health_router
from crmgen.api.routes_generator import router as generator_router
from crmgen.api import routes_crm

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(generator_router, tags=["generator"])
router.include_router(routes_crm.roles_router, tags=["roles"])
router.include_router(routes_crm.users_router, tags=["users"])
router.include_router(routes_crm.pipelines_router, tags=["pipelines"])
router.include_router(routes_crm.stages_router, tags=["stages"])
router.include_router(routes_crm.filters_router, tags=["filters"])
router.include_router(routes_crm.contacts_router, tags=["contacts"])
router.include_router(routes_crm.leads_router, tags=["leads"])
router.include_router(routes_crm.api_generators_router, tags=["api-generators"])
