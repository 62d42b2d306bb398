"""
app/models/user.py

Purpose: User document model

- Identity and contact details captured at registration
- Password credential (hash, or legacy plaintext until first login)
- Admin-issued PIN, selected plan
- Onboarding status, approved steps audit trail
- Version counter for compare-and-set writes
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from bson import ObjectId

from app.flow.states import OnboardingStatus, Step, parse_status, parse_step


@dataclass
class UserRecord:
    id: str
    email: str
    password: str
    name: Optional[str] = None
    phone: Optional[str] = None
    country: Optional[str] = None
    pin: Optional[str] = None
    plan: Optional[str] = None
    status: OnboardingStatus = OnboardingStatus.STEP1
    approved_steps: List[Step] = field(default_factory=list)
    version: Optional[int] = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    @classmethod
    def from_document(cls, doc: Dict[str, Any]) -> "UserRecord":
        """
        Builds a record from a raw users-collection document.

        Documents written before the version counter existed carry no
        ``version`` field; that is kept as None so writes can match on it.
        """
        return cls(
            id=str(doc["_id"]),
            email=doc["email"],
            password=doc.get("password") or "",
            name=doc.get("name"),
            phone=doc.get("phone"),
            country=doc.get("country"),
            pin=doc.get("pin"),
            plan=doc.get("plan"),
            status=parse_status(doc.get("status") or OnboardingStatus.STEP1.value),
            # Rows from the earlier schema use camelCase
            approved_steps=[
                parse_step(s)
                for s in doc.get("approved_steps", doc.get("approvedSteps")) or []
            ],
            version=doc.get("version"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
            last_login_at=doc.get("last_login_at"),
        )

    @property
    def object_id(self) -> ObjectId:
        return ObjectId(self.id)

    def public(self) -> Dict[str, Any]:
        """Projection safe to return over the API (no password, no PIN)."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "country": self.country,
            "plan": self.plan,
            "status": self.status.value,
            "approved_steps": [s.value for s in self.approved_steps],
            "has_pin": self.pin is not None,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "last_login_at": self.last_login_at,
        }
