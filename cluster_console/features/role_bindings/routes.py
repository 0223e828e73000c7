"""
Role binding API routes.

Every mutation is validated by the ``AuthorizationEvaluator`` before it
touches the store; failed validations are answered with the evaluator's
message.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.database.engine import get_db
from cluster_console.core.errors import DuplicateBinding, ErrorKind, ValidationResult
from cluster_console.features.role_bindings.models import RoleBinding
from cluster_console.features.role_bindings.repository import RoleBindingStore
from cluster_console.features.role_bindings.schemas import (
    MessageResponse,
    RoleBindingCreate,
    RoleBindingDelete,
    RoleBindingListResponse,
    RoleBindingUpdate,
)
from cluster_console.features.role_bindings.service import AuthorizationEvaluator
from cluster_console.features.roles.repository import RoleStore
from cluster_console.features.users.dependencies import get_current_user, get_tenant, get_token
from cluster_console.features.users.models import User
from cluster_console.features.users.repository import IdentityStore
from cluster_console.utils import get_logger


log = get_logger(__name__)
router = APIRouter()

ERROR_STATUS = {
    ErrorKind.USER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ROLE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ILLEGAL_OPERATION: status.HTTP_403_FORBIDDEN,
    ErrorKind.DUPLICATE_BINDING: status.HTTP_409_CONFLICT,
}


def raise_for_result(result: ValidationResult) -> None:
    if result.ok:
        return
    raise HTTPException(
        status_code=ERROR_STATUS.get(result.error, status.HTTP_400_BAD_REQUEST),
        detail=result.message,
    )


def get_evaluator(db: AsyncSession = Depends(get_db)) -> AuthorizationEvaluator:
    return AuthorizationEvaluator.for_session(db)


async def resolve_binding(
    db: AsyncSession,
    tenant: str,
    user_name: str,
    role_name: str,
) -> RoleBinding:
    """Find the binding of ``user_name`` to ``role_name`` in ``tenant`` or raise 404."""
    user = await IdentityStore(db).find_by_name(user_name)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="The user is not exist")
    role = await RoleStore(db).find_by_name(role_name, tenant)
    if role is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="This role is no exist")
    binding = await RoleBindingStore(db).find_by_user_and_role(user.id, role.id)
    if binding is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role binding no exist")
    return binding


async def ensure_tenant_access(db: AsyncSession, user: User, tenant: str) -> None:
    """
    Reject callers acting on a tenant that is not theirs.

    A user owns the tenant named after them and may act on any tenant in
    which they already hold a binding.

    Raises:
        HTTPException: 403 otherwise
    """
    if tenant == user.name:
        return
    if await RoleBindingStore(db).has_binding_in_tenant(user.id, tenant):
        return
    log.warning(f"User {user.name} denied role binding changes in tenant {tenant}")
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail="This operation is illegal for this user",
    )


@router.get("", response_model=RoleBindingListResponse)
async def list_role_bindings(
    tenant: str = Depends(get_tenant),
    token: str = Depends(get_token),
    current_user: User = Depends(get_current_user),
    evaluator: AuthorizationEvaluator = Depends(get_evaluator),
):
    """List the role bindings of the request tenant."""
    bindings = await evaluator.get_role_binding_list(token, tenant)
    return RoleBindingListResponse(total=len(bindings), data=bindings)


@router.put("", response_model=MessageResponse)
async def create_role_binding(
    binding_data: RoleBindingCreate,
    tenant: str = Depends(get_tenant),
    token: str = Depends(get_token),
    current_user: User = Depends(get_current_user),
    evaluator: AuthorizationEvaluator = Depends(get_evaluator),
    db: AsyncSession = Depends(get_db),
):
    """Bind a role of the request tenant to a user."""
    await ensure_tenant_access(db, current_user, tenant)
    result = await evaluator.validate_create_role_binding(
        token, tenant, binding_data.role_name, binding_data.user_name
    )
    raise_for_result(result)

    binding = RoleBinding(
        name=binding_data.name,
        description=binding_data.description,
        user_id=result.user_id,
        role_id=result.role_id,
    )
    try:
        await RoleBindingStore(db).save(binding)
    except DuplicateBinding as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=e.message)

    log.info(f"User {current_user.name} bound role {binding_data.role_name} to {binding_data.user_name} in {tenant}")
    return MessageResponse(message="Create role binding success")


@router.post("", response_model=MessageResponse)
async def update_role_binding(
    binding_data: RoleBindingUpdate,
    tenant: str = Depends(get_tenant),
    token: str = Depends(get_token),
    current_user: User = Depends(get_current_user),
    evaluator: AuthorizationEvaluator = Depends(get_evaluator),
    db: AsyncSession = Depends(get_db),
):
    """Rename or re-describe a binding. The caller must hold the bound role."""
    binding = await resolve_binding(db, tenant, binding_data.user_name, binding_data.role_name)
    raise_for_result(await evaluator.validate_current_user(token, binding))

    binding.name = binding_data.name
    binding.description = binding_data.description
    await RoleBindingStore(db).update(binding)
    return MessageResponse(message="Update role binding success")


@router.delete("", response_model=MessageResponse)
async def delete_role_binding(
    binding_data: RoleBindingDelete,
    tenant: str = Depends(get_tenant),
    token: str = Depends(get_token),
    current_user: User = Depends(get_current_user),
    evaluator: AuthorizationEvaluator = Depends(get_evaluator),
    db: AsyncSession = Depends(get_db),
):
    """Remove a binding. The caller must hold the bound role."""
    binding = await resolve_binding(db, tenant, binding_data.user_name, binding_data.role_name)
    raise_for_result(await evaluator.validate_current_user(token, binding))

    await RoleBindingStore(db).delete(binding.role_id, binding.user_id)
    log.info(f"User {current_user.name} removed role {binding_data.role_name} from {binding_data.user_name} in {tenant}")
    return MessageResponse(message="Delete role binding success")
