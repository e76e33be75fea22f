# module marketplace.accounts.models
"""Types du domaine Comptes.
- Role: variante fermée {customer, vendor}, résolue une seule fois à la frontière d'accès aux données.
- Identity: identité explicite de l'appelant, passée à chaque cas d'usage (pas de session globale).
- VendorAccount: vue typée d'une ligne 'profiles'.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


class Role(str, Enum):
    CUSTOMER = "customer"
    VENDOR = "vendor"


def role_from_metadata(metadata: Dict[str, Any] | None) -> Role:
    """
    Normalise un rôle faiblement typé (user_metadata Supabase ou colonne profiles.role).
    Tout ce qui n'est pas explicitement 'vendor' est un client (y compris l'ancien 'user').
    """
    role_lower = str((metadata or {}).get("role", "")).strip().lower()
    if role_lower == Role.VENDOR.value:
        return Role.VENDOR
    return Role.CUSTOMER


@dataclass(frozen=True)
class Identity:
    id: str
    email: Optional[str] = None
    role: Role = Role.CUSTOMER
    token: Optional[str] = None

    @property
    def is_vendor(self) -> bool:
        return self.role is Role.VENDOR


@dataclass
class VendorAccount:
    id: str
    role: Role = Role.CUSTOMER
    payment_account_id: Optional[str] = None
    onboarding_completed: Optional[bool] = None
    business_name: Optional[str] = None

    @property
    def is_connected(self) -> bool:
        return bool(self.payment_account_id)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "VendorAccount":
        return cls(
            id=str(row.get("id") or ""),
            role=role_from_metadata(row),
            payment_account_id=row.get("stripe_account_id") or None,
            onboarding_completed=row.get("onboarding_completed"),
            business_name=row.get("business_name"),
        )
