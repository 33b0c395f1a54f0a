from crmgen.api.crud_router import build_crud_router
from crmgen.schemas import crm
from crmgen.schemas.api_generator import (
    ApiGeneratorCreate,
    ApiGeneratorFilters,
    ApiGeneratorOut,
    ApiGeneratorUpdate,
)
from crmgen.services import api_generators, records, stages, users

roles_router = build_crud_router(
    records.roles, "/roles", crm.RoleCreate, crm.RoleUpdate, crm.RoleOut, crm.RoleFilters
)
users_router = build_crud_router(
    users.service, "/users", crm.UserCreate, crm.UserUpdate, crm.UserOut, crm.UserFilters
)
pipelines_router = build_crud_router(
    records.pipelines, "/pipelines", crm.PipelineCreate, crm.PipelineUpdate, crm.PipelineOut, crm.PipelineFilters
)
stages_router = build_crud_router(
    stages.service, "/stages", crm.StageCreate, crm.StageUpdate, crm.StageOut, crm.StageFilters
)
filters_router = build_crud_router(
    records.filters, "/filters", crm.FilterCreate, crm.FilterUpdate, crm.FilterOut, crm.FilterFilters
)
contacts_router = build_crud_router(
    records.contacts, "/contacts", crm.ContactCreate, crm.ContactUpdate, crm.ContactOut, crm.ContactFilters
)
leads_router = build_crud_router(
    records.leads, "/leads", crm.LeadCreate, crm.LeadUpdate, crm.LeadOut, crm.LeadFilters
)
api_generators_router = build_crud_router(
    api_generators.service,
    "/api-generators",
    ApiGeneratorCreate,
    ApiGeneratorUpdate,
    ApiGeneratorOut,
    ApiGeneratorFilters,
    plural="API generators",
)
