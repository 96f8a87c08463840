# mariage/models.py  # Modelos ORM del planificador de bodas.

# =================================================================================
# 🏛️ DEFINICIÓN DE LOS MODELOS DE LA BASE DE DATOS (ORM)
# ---------------------------------------------------------------------------------
# Tablas del sistema:
# - users / refresh_tokens / password_reset_tokens (credenciales y sesiones).
# - weddings + wedding_users (membresía con nivel view/edit) + wedding_invitations.
# - wedding_site_details (una fila por boda, contenido del micrositio).
# - guests (token RSVP), vendors y budget_items.
# Todo lo que cuelga de una boda se borra con ella (cascade ORM + ON DELETE CASCADE).
# =================================================================================

# 🐍 Importaciones de Python y SQLAlchemy
# ---------------------------------------------------------------------------------
from datetime import datetime, timezone
import enum

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    Date,
    DateTime,
    Numeric,
    JSON,
    ForeignKey,
    func,
    Enum as SQLAlchemyEnum,
    UniqueConstraint,
    Index,
)
from sqlalchemy.orm import relationship as orm_relationship

from mariage.db import Base


def _utcnow() -> datetime:
    """Hora UTC sin tzinfo (las columnas DateTime son naive)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# 🗂️ ENUMS PARA CONSISTENCIA DE DATOS
# ---------------------------------------------------------------------------------
class PermissionLevelEnum(str, enum.Enum):  # Nivel de acceso de un miembro del equipo.
    view = "view"
    edit = "edit"

class InvitationStatusEnum(str, enum.Enum):  # Ciclo de vida de una invitación al equipo.
    pending = "pending"
    accepted = "accepted"

class RsvpStatusEnum(str, enum.Enum):  # Respuesta del invitado.
    pending = "pending"
    confirmed = "confirmed"
    declined = "declined"

class DecisionStatusEnum(str, enum.Enum):  # Estado de decisión de un ítem del presupuesto.
    Analisando = "Analisando"  # En análisis (cotizado).
    Contratado = "Contratado"  # Contratado.
    Recusado = "Recusado"      # Rechazado.

class PaymentStatusEnum(str, enum.Enum):  # Derivado, nunca se persiste.
    pago = "Pago"
    pago_parcialmente = "Pago Parcialmente"
    pendente = "Pendente"
    na = "N/A"


# 👤 USUARIOS Y SESIONES
# ---------------------------------------------------------------------------------
class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    email = Column(String(254), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    # --- Verificación de email (código de 6 dígitos) ---
    is_verified = Column(Boolean, default=False, nullable=False)
    verification_token = Column(String(12), nullable=True)
    verification_token_expires_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    refresh_tokens = orm_relationship(
        "RefreshToken",
        cascade="all, delete-orphan",
        passive_deletes=True,
        back_populates="user",
    )
    memberships = orm_relationship(
        "WeddingMember",
        cascade="all, delete-orphan",
        passive_deletes=True,
        back_populates="user",
    )

class RefreshToken(Base):
    __tablename__ = "refresh_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    token = Column(String(512), unique=True, index=True, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())

    user = orm_relationship("User", back_populates="refresh_tokens")

class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    token = Column(String(12), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


# 💍 BODAS, EQUIPO E INVITACIONES
# ---------------------------------------------------------------------------------
class Wedding(Base):
    __tablename__ = "weddings"

    id = Column(Integer, primary_key=True, index=True)
    # Al borrar la cuenta del creador la boda se conserva (sin dueño).
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    groom_name = Column(String(120), nullable=False)
    bride_name = Column(String(120), nullable=False)
    wedding_date = Column(Date, nullable=True)
    website_slug = Column(String(255), unique=True, index=True, nullable=False)

    # --- Estilo y lugares ---
    wedding_style = Column(String(120), nullable=True)
    color_palette = Column(JSON, nullable=False, default=list)
    ceremony_location = Column(String(255), nullable=True)
    ceremony_location_maps = Column(String(512), nullable=True)
    reception_location = Column(String(255), nullable=True)
    reception_location_maps = Column(String(512), nullable=True)

    # --- Ceremonia civil y alternativas ---
    has_civil_ceremony = Column(Boolean, default=False, nullable=False)
    civil_ceremony_date = Column(Date, nullable=True)
    civil_ceremony_location = Column(String(255), nullable=True)
    alternative_dates = Column(JSON, nullable=False, default=list)

    # --- Estimaciones ---
    estimated_guests = Column(Integer, nullable=True)
    estimated_budget = Column(Numeric(12, 2), nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

    members = orm_relationship(
        "WeddingMember", cascade="all, delete-orphan", passive_deletes=True, back_populates="wedding",
    )
    invitations = orm_relationship(
        "Invitation", cascade="all, delete-orphan", passive_deletes=True, back_populates="wedding",
    )
    site_details = orm_relationship(
        "SiteDetails", cascade="all, delete-orphan", passive_deletes=True, uselist=False,
    )
    guests = orm_relationship("Guest", cascade="all, delete-orphan", passive_deletes=True)
    vendors = orm_relationship("Vendor", cascade="all, delete-orphan", passive_deletes=True)
    budget_items = orm_relationship("BudgetItem", cascade="all, delete-orphan", passive_deletes=True)

class WeddingMember(Base):
    __tablename__ = "wedding_users"
    __table_args__ = (
        UniqueConstraint("user_id", "wedding_id", name="uq_wedding_users_user_wedding"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    wedding_id = Column(Integer, ForeignKey("weddings.id", ondelete="CASCADE"), index=True, nullable=False)
    permission_level = Column(SQLAlchemyEnum(PermissionLevelEnum), nullable=False, default=PermissionLevelEnum.view)
    relationship = Column(String(120), nullable=True)  # Etiqueta libre ("Noivo/Noiva", "Madrinha"...).
    created_at = Column(DateTime, server_default=func.now())

    user = orm_relationship("User", back_populates="memberships")
    wedding = orm_relationship("Wedding", back_populates="members")

class Invitation(Base):
    __tablename__ = "wedding_invitations"
    __table_args__ = (
        UniqueConstraint("wedding_id", "email", name="uq_wedding_invitations_wedding_email"),
    )

    id = Column(Integer, primary_key=True, index=True)
    wedding_id = Column(Integer, ForeignKey("weddings.id", ondelete="CASCADE"), index=True, nullable=False)
    email = Column(String(254), index=True, nullable=False)
    invitation_token = Column(String(128), unique=True, index=True, nullable=False)
    status = Column(SQLAlchemyEnum(InvitationStatusEnum), nullable=False, default=InvitationStatusEnum.pending)
    permission_level = Column(SQLAlchemyEnum(PermissionLevelEnum), nullable=False, default=PermissionLevelEnum.view)
    relationship = Column(String(120), nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    wedding = orm_relationship("Wedding", back_populates="invitations")

class SiteDetails(Base):
    __tablename__ = "wedding_site_details"

    id = Column(Integer, primary_key=True, index=True)
    wedding_id = Column(Integer, ForeignKey("weddings.id", ondelete="CASCADE"), unique=True, nullable=False)
    our_story = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


# 🤵👰 INVITADOS (RSVP)
# ---------------------------------------------------------------------------------
class Guest(Base):
    __tablename__ = "guests"

    id = Column(Integer, primary_key=True, index=True)
    wedding_id = Column(Integer, ForeignKey("weddings.id", ondelete="CASCADE"), index=True, nullable=False)
    full_name = Column(String(160), index=True, nullable=False)
    contact_info = Column(String(255), nullable=True)
    guest_group = Column(String(120), nullable=True)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # El token es la única credencial del lado público: no se rota.
    rsvp_token = Column(String(64), unique=True, index=True, nullable=False)
    rsvp_status = Column(SQLAlchemyEnum(RsvpStatusEnum), nullable=True, default=RsvpStatusEnum.pending)
    guest_message = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)


# 🧾 PROVEEDORES Y PRESUPUESTO
# ---------------------------------------------------------------------------------
class Vendor(Base):
    __tablename__ = "vendors"

    id = Column(Integer, primary_key=True, index=True)
    wedding_id = Column(Integer, ForeignKey("weddings.id", ondelete="CASCADE"), index=True, nullable=False)
    vendor_name = Column(String(160), nullable=False)
    category = Column(String(120), nullable=True)
    status = Column(String(60), nullable=True)
    contact_name = Column(String(160), nullable=True)
    phone = Column(String(40), nullable=True)
    email = Column(String(254), nullable=True)
    website = Column(String(512), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)

class BudgetItem(Base):
    __tablename__ = "budget_items"
    __table_args__ = (
        Index("ix_budget_items_wedding_status", "wedding_id", "decision_status"),
    )

    id = Column(Integer, primary_key=True, index=True)
    wedding_id = Column(Integer, ForeignKey("weddings.id", ondelete="CASCADE"), index=True, nullable=False)
    # Borrar un proveedor deja sus ítems en el presupuesto, sin proveedor.
    vendor_id = Column(Integer, ForeignKey("vendors.id", ondelete="SET NULL"), index=True, nullable=True)
    category = Column(String(120), nullable=False)
    description = Column(Text, nullable=True)
    final_value = Column(Numeric(12, 2), nullable=False)
    paid_value = Column(Numeric(12, 2), nullable=False, default=0)
    decision_status = Column(
        SQLAlchemyEnum(DecisionStatusEnum), nullable=False, default=DecisionStatusEnum.Analisando,
    )
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
