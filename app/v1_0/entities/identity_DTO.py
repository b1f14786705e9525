from dataclasses import dataclass
from typing import Optional

@dataclass(frozen=True, slots=True)
class IdentityUser:
    """Identity-provider user, reduced to what the supplier workflow reads."""
    uid: str
    phone: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None

@dataclass(frozen=True, slots=True)
class AuthenticationDTO:
    """Outcome of linking a supplier document to a phone identity."""
    created: bool
    message: str
    uid: Optional[str] = None
