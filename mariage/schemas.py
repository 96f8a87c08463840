# mariage/schemas.py  # Esquemas Pydantic de entrada/salida.

# =================================================================================
# 📦 Schemas (MODELOS DE DATOS Pydantic)
# ---------------------------------------------------------------------------------
# - Validan la entrada (tipos y reglas de negocio) → 400 vía el handler global.
# - Serializan objetos ORM (from_attributes=True).
# - El estado de pago de un ítem del presupuesto se calcula aquí, al serializar.
# =================================================================================

from datetime import date, datetime
from typing import Optional, List, Literal

from pydantic import (
    BaseModel,
    EmailStr,
    field_validator,
    model_validator,
    ConfigDict,
    Field,
)

from mariage.core.security import MAX_PASSWORD_BYTES, fits_bcrypt, is_strong_password
from mariage.crud.budget_crud import compute_payment_status
from mariage.models import DecisionStatusEnum, RsvpStatusEnum

PermissionLiteral = Literal["view", "edit"]


def _required_text(v: Optional[str], label: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError(f"{label} es obligatorio.")
    return v


def _clean_optional(v: Optional[str]) -> Optional[str]:
    v = (v or "").strip()
    return v or None


def _valid_password(v: str) -> str:
    if not is_strong_password(v):
        raise ValueError(
            "La contraseña debe tener al menos 8 caracteres, con minúscula, mayúscula, número y símbolo."
        )
    if not fits_bcrypt(v):
        raise ValueError(f"La contraseña no puede superar los {MAX_PASSWORD_BYTES} bytes.")
    return v


# =================================================================================
# 🔐 Autenticación
# =================================================================================
class RegisterRequest(BaseModel):
    name: str
    email: EmailStr
    password: str
    consent: bool = False

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        return _required_text(v, "El nombre")

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def _strong(cls, v: str) -> str:
        return _valid_password(v)

    @field_validator("consent")
    @classmethod
    def _consent_given(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError("Debes aceptar los términos para registrarte.")
        return v


class RegisterResponse(BaseModel):
    email: EmailStr


class LoginRequest(BaseModel):
    email: EmailStr
    password: str

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()


class VerifyEmailRequest(BaseModel):
    email: EmailStr
    code: str = Field(..., min_length=1, max_length=12)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()


class PasswordResetRequest(BaseModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()


class ResetPasswordRequest(VerifyEmailRequest):
    password: str

    @field_validator("password")
    @classmethod
    def _strong(cls, v: str) -> str:
        return _valid_password(v)


class PendingInvitationOut(BaseModel):
    """Invitación pendiente dirigida al usuario que inicia sesión."""
    id: int
    wedding_id: int
    invitation_token: str
    permission_level: PermissionLiteral
    relationship: Optional[str] = None
    groom_name: str
    bride_name: str


class AuthResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_name: str
    pending_invitations: List[PendingInvitationOut] = Field(default_factory=list)


class AccessTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


class MessageResponse(BaseModel):
    message: str


# =================================================================================
# 💍 Bodas y micrositio
# =================================================================================
class WeddingFields(BaseModel):
    wedding_date: Optional[date] = None
    wedding_style: Optional[str] = None
    color_palette: List[str] = Field(default_factory=list)
    ceremony_location: Optional[str] = None
    ceremony_location_maps: Optional[str] = None
    reception_location: Optional[str] = None
    reception_location_maps: Optional[str] = None
    has_civil_ceremony: bool = False
    civil_ceremony_date: Optional[date] = None
    civil_ceremony_location: Optional[str] = None
    alternative_dates: List[date] = Field(default_factory=list)
    estimated_guests: Optional[int] = Field(default=None, ge=0)
    estimated_budget: Optional[float] = Field(default=None, ge=0)


class WeddingCreate(WeddingFields):
    groom_name: str
    bride_name: str

    @field_validator("groom_name", "bride_name")
    @classmethod
    def _names_required(cls, v: str) -> str:
        return _required_text(v, "El nombre de los novios")


class WeddingUpdate(BaseModel):
    """Actualización parcial: solo se aplican los campos enviados."""
    groom_name: Optional[str] = None
    bride_name: Optional[str] = None
    website_slug: Optional[str] = None
    wedding_date: Optional[date] = None
    wedding_style: Optional[str] = None
    color_palette: Optional[List[str]] = None
    ceremony_location: Optional[str] = None
    ceremony_location_maps: Optional[str] = None
    reception_location: Optional[str] = None
    reception_location_maps: Optional[str] = None
    has_civil_ceremony: Optional[bool] = None
    civil_ceremony_date: Optional[date] = None
    civil_ceremony_location: Optional[str] = None
    alternative_dates: Optional[List[date]] = None
    estimated_guests: Optional[int] = Field(default=None, ge=0)
    estimated_budget: Optional[float] = Field(default=None, ge=0)

    @field_validator("groom_name", "bride_name", "website_slug")
    @classmethod
    def _not_blank(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _required_text(v, "El campo")


class WeddingResponse(WeddingFields):
    id: int
    owner_id: Optional[int] = None
    groom_name: str
    bride_name: str
    website_slug: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class WeddingWithPermission(WeddingResponse):
    permission_level: PermissionLiteral


class SiteDetailsIn(BaseModel):
    our_story: Optional[str] = None


class SiteDetailsResponse(BaseModel):
    wedding_id: int
    our_story: Optional[str] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PublicSiteResponse(WeddingFields):
    """Lo que ve cualquiera en el micrositio público (sin datos internos)."""
    groom_name: str
    bride_name: str
    website_slug: str
    our_story: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


# =================================================================================
# 👥 Equipo e invitaciones
# =================================================================================
class InviteRequest(BaseModel):
    wedding_id: int
    email: EmailStr
    permission_level: PermissionLiteral = "view"
    relationship: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.strip().lower()

    @field_validator("relationship")
    @classmethod
    def _clean_relationship(cls, v: Optional[str]) -> Optional[str]:
        return _clean_optional(v)


class AcceptInvitationRequest(BaseModel):
    token: str = Field(..., min_length=1)


class AcceptInvitationResponse(BaseModel):
    message: str
    wedding_id: int


class MemberOut(BaseModel):
    user_id: int
    name: str
    email: str
    permission_level: PermissionLiteral
    relationship: Optional[str] = None


class TeamInvitationOut(BaseModel):
    id: int
    email: str
    permission_level: PermissionLiteral
    relationship: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    @field_validator("permission_level", mode="before")
    @classmethod
    def _enum_to_value(cls, v):
        return getattr(v, "value", v)


class UpdateMemberRequest(BaseModel):
    wedding_id: int
    member_user_id: int
    permission_level: PermissionLiteral


# =================================================================================
# 🤵👰 Invitados y RSVP
# =================================================================================
class GuestCreate(BaseModel):
    full_name: str
    contact_info: Optional[str] = None
    guest_group: Optional[str] = None

    @field_validator("full_name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        return _required_text(v, "El nombre del invitado")

    @field_validator("contact_info", "guest_group")
    @classmethod
    def _clean(cls, v: Optional[str]) -> Optional[str]:
        return _clean_optional(v)


class GuestUpdate(GuestCreate):
    rsvp_status: Optional[RsvpStatusEnum] = None


class GuestResponse(BaseModel):
    id: int
    wedding_id: int
    full_name: str
    contact_info: Optional[str] = None
    guest_group: Optional[str] = None
    created_by: Optional[int] = None
    rsvp_token: str
    rsvp_status: Optional[RsvpStatusEnum] = None
    guest_message: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)


class RsvpStats(BaseModel):
    total_guests: int = 0
    confirmed: int = 0
    declined: int = 0
    pending: int = 0


class PublicGuestResponse(BaseModel):
    full_name: str


class RsvpSubmit(BaseModel):
    status: Literal["confirmed", "declined"]
    message: Optional[str] = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def _sanitize(self):
        self.message = _clean_optional(self.message)
        return self


# =================================================================================
# 🧾 Proveedores y presupuesto
# =================================================================================
class VendorIn(BaseModel):
    vendor_name: str
    category: Optional[str] = None
    status: Optional[str] = None
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("vendor_name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        return _required_text(v, "El nombre del proveedor")


class VendorResponse(VendorIn):
    id: int
    wedding_id: int
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class VendorWithTotals(VendorResponse):
    total_contracted: float = 0.0
    total_paid: float = 0.0
    total_quoted: float = 0.0


class BudgetItemIn(BaseModel):
    category: str
    final_value: float = Field(..., ge=0)
    description: Optional[str] = None
    paid_value: float = Field(default=0, ge=0)
    decision_status: DecisionStatusEnum = DecisionStatusEnum.Analisando
    vendor_id: Optional[int] = None

    @field_validator("category")
    @classmethod
    def _category_required(cls, v: str) -> str:
        return _required_text(v, "La categoría")


class BudgetItemCreate(BudgetItemIn):
    """Alta de ítem: el valor final tiene que venir informado (mayor que cero)."""
    final_value: float = Field(..., gt=0)


class BudgetStatusUpdate(BaseModel):
    decision_status: DecisionStatusEnum


class BudgetItemResponse(BaseModel):
    id: int
    wedding_id: int
    vendor_id: Optional[int] = None
    category: str
    description: Optional[str] = None
    final_value: float
    paid_value: float
    decision_status: DecisionStatusEnum
    payment_status: Optional[str] = None  # Derivado; nunca viene de la BD.
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, use_enum_values=True)

    @model_validator(mode="after")
    def _derive_payment_status(self):
        self.payment_status = compute_payment_status(self.decision_status, self.final_value, self.paid_value)
        return self


class BudgetSummary(BaseModel):
    wedding_id: int
    estimated_budget: Optional[float] = None
    total_contracted: float = 0.0
    total_paid: float = 0.0
    total_quoted: float = 0.0
    remaining: Optional[float] = None
