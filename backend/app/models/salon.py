"""In-memory records handled by the salon session store."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional


class ClientType(str, enum.Enum):
    """Category of a salon client."""

    ADULT_MALE = "homme"
    ADULT_FEMALE = "femme"
    CHILD = "enfant"


class ServiceType(str, enum.Enum):
    """Kinds of work that can be recorded on a service."""

    CUT = "coupe"
    BLOW_DRY = "brushing"
    HIGHLIGHTS = "meches"
    COLORING = "coloration"
    EXTENSIONS = "supplements"
    POURING = "coulage"
    CARE = "soin"
    UPDO = "chignon"


@dataclass
class Client:
    """A client of the salon, owned by exactly one user account."""

    name: str
    type: ClientType | str
    id: Optional[str] = None
    user_id: Optional[str] = None
    notes: Optional[str] = None
    last_visit: str = ""
    is_favorite: bool = False
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class Service:
    """A service performed for a client on a given date."""

    client_id: str
    types: list[ServiceType | str]
    price: float
    date: str
    id: Optional[str] = None
    user_id: Optional[str] = None
    products: Optional[str] = None
    duration: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


@dataclass
class SalonSettings:
    """Salon identity shown on the dashboard, one record per account."""

    name: str
    id: Optional[str] = None
    user_id: Optional[str] = None
    address: str = ""
    city: str = ""
    postal_code: str = ""
    phone: str = ""
    updated_at: Optional[str] = None


@dataclass(frozen=True)
class UserProfile:
    """Identity supplied by the authentication provider."""

    id: str
    email: str
    display_name: Optional[str] = None
