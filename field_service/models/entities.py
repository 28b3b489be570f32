# ==============================================================================
# ENTIDADES DEL DOMINIO - Definiciones de dataclasses
# ==============================================================================
# Cada entidad representa un concepto del negocio, sin comportamiento.
# El formato persistido usa claves camelCase (clientName, finalValue, ...)
# para ser compatible con los snapshots existentes.
# ==============================================================================

import uuid
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Optional

# Formatos textuales usados al concluir/transferir (dd/mm/aaaa, pt-BR)
DATE_FORMAT = '%d/%m/%Y'
TIME_FORMAT = '%H:%M:%S'


def new_id() -> str:
    """Genera un identificador único para usuarios y OS."""
    return str(uuid.uuid4())


# ==============================================================================
# ENUMERACIONES - Estados y tipos válidos
# ==============================================================================

class UserRole(str, Enum):
    """Roles de usuario disponibles en el sistema."""
    ADMIN = 'ADMIN'
    TECHNICIAN = 'TECHNICIAN'
    ATTENDANT = 'ATTENDANT'


class ScheduleStatus(str, Enum):
    """Estados posibles de una OS."""
    PENDING = 'PENDING'          # Aguardando aceite del técnico
    ACCEPTED = 'ACCEPTED'        # En andamento
    CONCLUDED = 'CONCLUDED'      # Finalizada (terminal)
    RESCHEDULED = 'RESCHEDULED'  # Nueva fecha/hora, debe aceptarse de nuevo
    CANCELLED = 'CANCELLED'      # Terminal, ninguna operación llega aquí


class ReminderType(str, Enum):
    MIN_30 = '30MIN'
    HOUR_1 = '1HOUR'
    DAY_1 = '1DAY'
    NONE = 'NONE'


class NotificationType(str, Enum):
    SALE = 'SALE'
    SCHEDULE = 'SCHEDULE'
    REMINDER = 'REMINDER'


class ExpenseCategory(str, Enum):
    GASOLINA = 'GASOLINA'
    PECAS = 'PEÇAS'
    ALIMENTACAO = 'ALIMENTAÇÃO'
    FERRAMENTAS = 'FERRAMENTAS'
    OUTROS = 'OUTROS'


class CommissionPaymentType(str, Enum):
    FULL = 'FULL'
    PARTIAL = 'PARTIAL'


ROLE_LABELS = {
    UserRole.ADMIN: 'Administrador',
    UserRole.TECHNICIAN: 'Técnico',
    UserRole.ATTENDANT: 'Atendente',
}

STATUS_LABELS = {
    ScheduleStatus.PENDING: 'Aguardando',
    ScheduleStatus.ACCEPTED: 'Em Andamento',
    ScheduleStatus.CONCLUDED: 'Concluído',
    ScheduleStatus.RESCHEDULED: 'Reagendado',
    ScheduleStatus.CANCELLED: 'Cancelado',
}


# ==============================================================================
# SERIALIZACIÓN - snake_case en Python, camelCase en el JSON
# ==============================================================================

def _camel(name: str) -> str:
    head, *tail = name.split('_')
    return head + ''.join(part.title() for part in tail)


def _enum(enum_cls, value, default=None):
    """Convierte a Enum; valores desconocidos caen al default."""
    if value is None:
        return default
    try:
        return enum_cls(value)
    except ValueError:
        return default


def _dump(record, nested: Dict[str, Any] = None) -> Dict[str, Any]:
    """
    Convierte un dataclass plano a dict camelCase.
    Los campos opcionales en None se omiten (igual que en los snapshots existentes).
    """
    nested = nested or {}
    data = {}
    for f in fields(record):
        if f.name in nested:
            data[_camel(f.name)] = nested[f.name]
            continue
        value = getattr(record, f.name)
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        data[_camel(f.name)] = value
    return data


def _load_kwargs(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    """Extrae del dict camelCase solo las claves que el dataclass conoce."""
    kwargs = {}
    for f in fields(cls):
        key = _camel(f.name)
        if key in data:
            kwargs[f.name] = data[key]
    return kwargs


def _money(value) -> Optional[float]:
    if value is None or value == '':
        return None
    return float(value)


# ==============================================================================
# ENTIDADES DE USUARIO
# ==============================================================================

@dataclass
class User:
    """
    Miembro del equipo.

    Attributes:
        id: Identificador único (uuid4, o 'admin-1' para el admin sembrado)
        email: Único entre usuarios, se usa para el login
        password: Hash werkzeug (o texto plano legado de snapshots antiguos)
        rating_count / rating_sum: Contadores acumulados de evaluaciones
    """
    id: str
    name: str
    email: str
    role: UserRole = UserRole.TECHNICIAN
    password: str = ''
    phone: Optional[str] = None
    specialty: Optional[str] = None
    rating_count: int = 0
    rating_sum: int = 0

    @property
    def role_label(self) -> str:
        return ROLE_LABELS[self.role]

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para persistencia (incluye password)."""
        return _dump(self)

    def to_public_dict(self) -> Dict[str, Any]:
        """Versión sin password para respuestas de la API."""
        data = self.to_dict()
        data.pop('password', None)
        data['roleLabel'] = self.role_label
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'User':
        kwargs = _load_kwargs(cls, data)
        kwargs['role'] = _enum(UserRole, data.get('role'), UserRole.TECHNICIAN)
        kwargs.setdefault('password', '')
        kwargs['rating_count'] = int(data.get('ratingCount') or 0)
        kwargs['rating_sum'] = int(data.get('ratingSum') or 0)
        return cls(**kwargs)


# ==============================================================================
# ENTIDADES DE LA OS
# ==============================================================================

@dataclass(frozen=True)
class TransferHistory:
    """Registro inmutable de un cambio de técnico responsable."""
    from_id: str
    from_name: str
    to_id: str
    to_name: str
    reason: str
    date: str
    time: str

    def to_dict(self) -> Dict[str, Any]:
        return _dump(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransferHistory':
        return cls(
            from_id=data.get('fromId', ''),
            from_name=data.get('fromName', ''),
            to_id=data.get('toId', ''),
            to_name=data.get('toName', ''),
            reason=data.get('reason', ''),
            date=data.get('date', ''),
            time=data.get('time', ''),
        )


@dataclass
class ChatMessage:
    id: str
    sender_id: str
    sender_name: str
    sender_role: UserRole
    text: str
    timestamp: str
    is_ai: Optional[bool] = None

    def to_dict(self) -> Dict[str, Any]:
        return _dump(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ChatMessage':
        kwargs = _load_kwargs(cls, data)
        kwargs['sender_role'] = _enum(UserRole, data.get('senderRole'), UserRole.TECHNICIAN)
        return cls(**kwargs)


@dataclass
class Schedule:
    """
    Orden de servicio (agendamiento).

    Los campos de revisión, cancelación, recordatorio y chat existen en el
    snapshot pero ninguna operación los modifica.
    """
    id: str
    client_name: str
    client_phone: str
    client_address: str
    appointment_date: str
    appointment_time: str
    technician_id: str
    attendant_name: str
    description: str
    status: ScheduleStatus = ScheduleStatus.PENDING
    client_number: Optional[str] = None
    attendant_id: Optional[str] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    cancellation_time: Optional[str] = None
    work_done_description: Optional[str] = None
    final_value: Optional[float] = None
    total_service_value: Optional[float] = None
    deposit_value: Optional[float] = None
    balance_value: Optional[float] = None
    completion_date: Optional[str] = None
    review_stars: Optional[int] = None
    review_comment: Optional[str] = None
    review_link_shared: Optional[bool] = None
    cancellation_reason: Optional[str] = None
    cancellation_date: Optional[str] = None
    cancellation_value: Optional[float] = None
    reminder_type: Optional[ReminderType] = None
    transfers: List[TransferHistory] = field(default_factory=list)
    messages: List[ChatMessage] = field(default_factory=list)

    @property
    def status_label(self) -> str:
        return STATUS_LABELS[self.status]

    @property
    def protocol(self) -> str:
        """Protocolo corto impreso en los comprobantes."""
        return self.id[:8].upper()

    def to_dict(self) -> Dict[str, Any]:
        return _dump(self, nested={
            'transfers': [t.to_dict() for t in self.transfers],
            'messages': [m.to_dict() for m in self.messages],
        })

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Schedule':
        kwargs = _load_kwargs(cls, data)
        kwargs['status'] = _enum(ScheduleStatus, data.get('status'), ScheduleStatus.PENDING)
        kwargs['reminder_type'] = _enum(ReminderType, data.get('reminderType'))
        for money_field in ('final_value', 'total_service_value', 'deposit_value',
                            'balance_value', 'cancellation_value'):
            kwargs[money_field] = _money(kwargs.get(money_field))
        kwargs['transfers'] = [TransferHistory.from_dict(t) for t in data.get('transfers') or []]
        kwargs['messages'] = [ChatMessage.from_dict(m) for m in data.get('messages') or []]
        for required in ('client_name', 'client_phone', 'client_address', 'appointment_date',
                         'appointment_time', 'technician_id', 'attendant_name', 'description'):
            kwargs.setdefault(required, '')
        return cls(**kwargs)


# ==============================================================================
# ENTIDADES FINANCIERAS Y NOTIFICACIONES (sin operaciones)
# ==============================================================================

@dataclass
class Sale:
    id: str
    attendant_id: str
    attendant_name: str
    product_description: str
    sale_value: float
    date: str
    commission_value: float

    def to_dict(self) -> Dict[str, Any]:
        return _dump(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sale':
        kwargs = _load_kwargs(cls, data)
        kwargs['sale_value'] = _money(kwargs.get('sale_value')) or 0.0
        kwargs['commission_value'] = _money(kwargs.get('commission_value')) or 0.0
        return cls(**kwargs)


@dataclass
class Expense:
    id: str
    description: str
    category: ExpenseCategory
    value: float
    date: str
    technician_id: Optional[str] = None
    technician_name: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _dump(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Expense':
        kwargs = _load_kwargs(cls, data)
        kwargs['category'] = _enum(ExpenseCategory, data.get('category'), ExpenseCategory.OUTROS)
        kwargs['value'] = _money(kwargs.get('value')) or 0.0
        return cls(**kwargs)


@dataclass
class CommissionPayment:
    id: str
    user_id: str
    user_name: str
    value: float
    date: str
    type: CommissionPaymentType = CommissionPaymentType.FULL

    def to_dict(self) -> Dict[str, Any]:
        return _dump(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommissionPayment':
        kwargs = _load_kwargs(cls, data)
        kwargs['type'] = _enum(CommissionPaymentType, data.get('type'), CommissionPaymentType.FULL)
        kwargs['value'] = _money(kwargs.get('value')) or 0.0
        return cls(**kwargs)


@dataclass
class Notification:
    id: str
    title: str
    message: str
    timestamp: str
    type: NotificationType
    read: bool = False
    ref_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _dump(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Notification':
        kwargs = _load_kwargs(cls, data)
        kwargs['type'] = _enum(NotificationType, data.get('type'), NotificationType.SCHEDULE)
        kwargs['read'] = bool(data.get('read', False))
        return cls(**kwargs)


# ==============================================================================
# RAÍZ DEL AGREGADO
# ==============================================================================

@dataclass
class AppState:
    """
    Snapshot completo de la aplicación. Es la unidad de persistencia:
    cada cambio reemplaza y guarda el snapshot entero.

    Invariante: current_user_id, si existe, apunta a un id de `users`.
    """
    users: List[User] = field(default_factory=list)
    schedules: List[Schedule] = field(default_factory=list)
    sales: List[Sale] = field(default_factory=list)
    expenses: List[Expense] = field(default_factory=list)
    commission_payments: List[CommissionPayment] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)
    current_user_id: Optional[str] = None

    @property
    def current_user(self) -> Optional[User]:
        if self.current_user_id is None:
            return None
        return self.find_user(self.current_user_id)

    def find_user(self, user_id: str) -> Optional[User]:
        for user in self.users:
            if user.id == user_id:
                return user
        return None

    def find_user_by_email(self, email: str) -> Optional[User]:
        for user in self.users:
            if user.email == email:
                return user
        return None

    def find_schedule(self, schedule_id: str) -> Optional[Schedule]:
        for schedule in self.schedules:
            if schedule.id == schedule_id:
                return schedule
        return None

    def users_with_role(self, role: UserRole) -> List[User]:
        return [u for u in self.users if u.role == role]

    def to_dict(self) -> Dict[str, Any]:
        current = self.current_user
        return {
            'users': [u.to_dict() for u in self.users],
            'schedules': [s.to_dict() for s in self.schedules],
            'sales': [s.to_dict() for s in self.sales],
            'expenses': [e.to_dict() for e in self.expenses],
            'commissionPayments': [c.to_dict() for c in self.commission_payments],
            'notifications': [n.to_dict() for n in self.notifications],
            'currentUser': current.to_dict() if current else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppState':
        """
        Crea el snapshot desde el JSON persistido.

        Raises:
            TypeError / ValueError / AttributeError si la estructura no es válida
        """
        if not isinstance(data, dict):
            raise TypeError('El snapshot debe ser un objeto JSON')
        users = [User.from_dict(u) for u in data.get('users') or []]

        current = data.get('currentUser')
        current_id = current.get('id') if isinstance(current, dict) else None
        if current_id is not None and not any(u.id == current_id for u in users):
            # Sesión apuntando a un usuario eliminado: se descarta
            current_id = None

        return cls(
            users=users,
            schedules=[Schedule.from_dict(s) for s in data.get('schedules') or []],
            sales=[Sale.from_dict(s) for s in data.get('sales') or []],
            expenses=[Expense.from_dict(e) for e in data.get('expenses') or []],
            commission_payments=[
                CommissionPayment.from_dict(c) for c in data.get('commissionPayments') or []
            ],
            notifications=[Notification.from_dict(n) for n in data.get('notifications') or []],
            current_user_id=current_id,
        )
