"""Caller identity asserted by the upstream authentication proxy.

Tokens are verified before requests reach this service; the proxy forwards
the account id, role and email as headers.
"""

from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException

ADMIN_ROLE = "admin"


@dataclass(frozen=True)
class Caller:
    account_id: str
    role: str = "customer"
    email: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE

    def can_access(self, owner_id) -> bool:
        return self.is_admin or str(owner_id) == self.account_id


def require_caller(
    x_account_id: str = Header(default=""),
    x_account_role: str = Header(default="customer"),
    x_account_email: str | None = Header(default=None),
) -> Caller:
    if not x_account_id.strip():
        raise HTTPException(status_code=401, detail="Authentication required")
    return Caller(
        account_id=x_account_id.strip(),
        role=x_account_role.strip().lower(),
        email=x_account_email,
    )


def require_admin(caller: Caller = Depends(require_caller)) -> Caller:
    if not caller.is_admin:
        raise HTTPException(status_code=403, detail="Administrator role required")
    return caller
