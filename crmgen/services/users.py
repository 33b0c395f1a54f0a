from crmgen.core.errors import HookError
from crmgen.core.security import hash_password
from crmgen.db.models import Role, User
from crmgen.services.crud import CrudService, HookContext, LifecycleHooks, unique_together

hooks = LifecycleHooks()

for _event in ("before_create", "before_update"):
    hooks.register(_event, "unique_username", unique_together(User, ("username",), "Username already exists"))
    hooks.register(_event, "unique_email", unique_together(User, ("email",), "Email already exists"))
    hooks.register(_event, "unique_phone", unique_together(User, ("phone",), "Phone number already exists"))


def _check_role(ctx: HookContext) -> None:
    role_id = ctx.data.get("role_id")
    if role_id is not None and ctx.db.get(Role, role_id) is None:
        raise HookError("Role not found")


hooks.register("before_create", "role_exists", _check_role)
hooks.register("before_update", "role_exists", _check_role)


@hooks.on("before_create")
def hash_new_password(ctx: HookContext) -> None:
    ctx.item.password = hash_password(ctx.item.password)


@hooks.on("before_update")
def hash_changed_password(ctx: HookContext) -> None:
    password = ctx.data.get("password")
    if password is not None:
        ctx.data["password"] = hash_password(password)


service = CrudService(
    User,
    "User",
    hooks=hooks,
    filter_fields=("username", "email", "role_id", "is_active"),
    hidden_fields=("password",),
)
