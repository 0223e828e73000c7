"""
Authorization checks guarding role binding mutations.

The object protected here is access-control metadata itself: a caller may
only touch bindings of a role they hold a binding to. Holding any binding to
the role is sufficient; the role's verbs are not consulted.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from cluster_console.core.errors import ErrorKind, ValidationResult
from cluster_console.features.role_bindings.models import RoleBinding
from cluster_console.features.role_bindings.repository import RoleBindingStore
from cluster_console.features.role_bindings.schemas import RoleBindingDetail
from cluster_console.features.roles.repository import RoleStore
from cluster_console.features.users.repository import IdentityStore
from cluster_console.utils import get_logger


log = get_logger(__name__)


class AuthorizationEvaluator:
    """Decides whether a caller may create, change or remove a role binding."""

    def __init__(
        self,
        users: IdentityStore,
        roles: RoleStore,
        bindings: RoleBindingStore,
    ):
        self.users = users
        self.roles = roles
        self.bindings = bindings

    @classmethod
    def for_session(cls, db: AsyncSession) -> "AuthorizationEvaluator":
        return cls(IdentityStore(db), RoleStore(db), RoleBindingStore(db))

    async def validate_current_user(self, token: str, candidate: RoleBinding) -> ValidationResult:
        """
        Check that the owner of ``token`` holds a binding to ``candidate.role_id``.

        Args:
            token: Session token of the acting user
            candidate: Binding-shaped request; only ``role_id`` is read

        Returns:
            Success, or USER_NOT_FOUND / ILLEGAL_OPERATION
        """
        user = await self.users.find_by_token(token)
        if user is None:
            return ValidationResult.failure(ErrorKind.USER_NOT_FOUND, "User no exist.")

        binding = await self.bindings.find_by_user_and_role(user.id, candidate.role_id)
        if binding is None:
            log.debug(f"User {user.id} holds no binding to role {candidate.role_id}")
            return ValidationResult.failure(
                ErrorKind.ILLEGAL_OPERATION, "This operation is illegal for this user"
            )

        return ValidationResult.success(
            "Validate current user success", user_id=user.id, role_id=candidate.role_id
        )

    async def validate_create_role_binding(
        self,
        token: str,
        tenant: str,
        role_name: str,
        user_name: str,
    ) -> ValidationResult:
        """
        Check that ``user_name`` may be bound to ``role_name`` of ``tenant``.

        Checks run in a fixed order so the most specific error wins: the
        target user must exist, then the role, then no binding may exist yet.
        A successful result carries the resolved ``user_id`` and ``role_id``;
        nothing is persisted.
        """
        user = await self.users.find_by_name(user_name)
        if user is None:
            return ValidationResult.failure(ErrorKind.USER_NOT_FOUND, "The user is not exist")

        role = await self.roles.find_by_name(role_name, tenant)
        if role is None:
            return ValidationResult.failure(ErrorKind.ROLE_NOT_FOUND, "This role is no exist")

        existing = await self.bindings.find_by_user_and_role(user.id, role.id)
        if existing is not None:
            return ValidationResult.failure(
                ErrorKind.DUPLICATE_BINDING, "Role binding already exist"
            )

        return ValidationResult.success(
            "Validate create role success", user_id=user.id, role_id=role.id
        )

    async def get_role_binding_list(self, token: str, tenant: str) -> list[RoleBindingDetail]:
        """List the bindings of every role owned by ``tenant``."""
        return await self.bindings.list_by_tenant(tenant)
