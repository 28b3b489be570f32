# ==============================================================================
# SERVICIO DE ESTADÍSTICAS - Ganancias y comisión por técnico
# ==============================================================================
# REGLA PRINCIPAL: solo OS "CONCLUDED" cuentan para los valores.
# - PENDING ❌
# - ACCEPTED ❌
# - RESCHEDULED ❌
# - CANCELLED ❌
#
# La fecha de conclusión se guarda como texto dd/mm/aaaa y se interpreta
# SIEMPRE con ese formato literal (nunca con un parse ambiguo día/mes).
# ==============================================================================

from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional

from field_service import config
from field_service.errors import NotSignedIn
from field_service.models.entities import DATE_FORMAT, AppState, Schedule, ScheduleStatus, UserRole

# Ventanas móviles del panel: (clave, días)
PERIODS = (
    ('today', 1),
    ('week', 7),
    ('month', 30),
)


class StatsService:
    """
    Servicio para cálculo de ganancias y comisiones.

    Responsabilidades:
    - Filtrar solo OS CONCLUDED del técnico
    - Sumar valores finales en ventanas de N días
    - Calcular la comisión con tasa fija configurable
    """

    VALID_STATUS = ScheduleStatus.CONCLUDED

    def __init__(self, commission_rate: float = None):
        """
        Args:
            commission_rate: Tasa de comisión (default: config.COMMISSION_RATE)
        """
        self.commission_rate = config.COMMISSION_RATE if commission_rate is None else commission_rate

    @staticmethod
    def parse_completion_date(text: str) -> Optional[date]:
        """
        Interpreta una fecha dd/mm/aaaa.
        Retorna None si falta o no respeta el formato.
        """
        if not text:
            return None
        try:
            return datetime.strptime(text.strip(), DATE_FORMAT).date()
        except (ValueError, TypeError, AttributeError):
            return None

    def concluded_for(self, schedules: Iterable[Schedule], technician_id: str) -> List[Schedule]:
        return [
            s for s in schedules
            if s.technician_id == technician_id and s.status == self.VALID_STATUS
        ]

    def calculate_period(
        self,
        schedules: Iterable[Schedule],
        days: Optional[int],
        today: Optional[date] = None,
    ) -> Dict[str, float]:
        """
        Total y comisión de las OS concluidas en los últimos `days` días.

        El umbral es el inicio de hoy menos (days - 1) días, así que days=1
        incluye solo lo concluido hoy. days=None incluye todo el historial.

        Returns:
            {'total': float, 'commission': float}
        """
        today = today or date.today()
        selected = list(schedules)
        if days is not None:
            threshold = today - timedelta(days=days - 1)
            selected = [
                s for s in selected
                if (self.parse_completion_date(s.completion_date) or date.min) >= threshold
            ]

        total = sum((s.final_value or 0) for s in selected)
        return {
            'total': round(total, 2),
            'commission': round(total * self.commission_rate, 2),
        }

    def technician_earnings(
        self,
        state: AppState,
        technician_id: str,
        today: Optional[date] = None,
    ) -> Dict[str, Dict[str, float]]:
        """
        Ganancias de un técnico en las ventanas hoy / 7 días / 30 días.

        Returns:
            {
                'today': {'total': float, 'commission': float},
                'week':  {...},
                'month': {...},
            }
        """
        concluded = self.concluded_for(state.schedules, technician_id)
        return {
            key: self.calculate_period(concluded, days, today)
            for key, days in PERIODS
        }

    def team_counts(self, state: AppState) -> Dict[str, int]:
        return {
            'schedules': len(state.schedules),
            'technicians': len(state.users_with_role(UserRole.TECHNICIAN)),
        }

    def dashboard(self, state: AppState, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Panel del usuario con sesión según su rol.

        - TECHNICIAN: ganancias y comisión propias
        - ADMIN / ATTENDANT: conteo global de OS y de técnicos

        Raises:
            NotSignedIn: sin sesión
        """
        user = state.current_user
        if user is None:
            raise NotSignedIn()

        handlers = {
            UserRole.TECHNICIAN: lambda: {
                'kind': 'earnings',
                'commissionRate': self.commission_rate,
                'earnings': self.technician_earnings(state, user.id, today),
            },
            UserRole.ADMIN: lambda: {'kind': 'counts', 'counts': self.team_counts(state)},
            UserRole.ATTENDANT: lambda: {'kind': 'counts', 'counts': self.team_counts(state)},
        }
        return handlers[user.role]()


# Instancia global (singleton)
_stats_service: Optional[StatsService] = None


def get_stats_service() -> StatsService:
    """Obtiene la instancia global del servicio de estadísticas."""
    global _stats_service
    if _stats_service is None:
        _stats_service = StatsService()
    return _stats_service
