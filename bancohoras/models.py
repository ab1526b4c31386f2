"""
Modelos de dados do Banco de Horas.
Dataclasses para Employee, Punch, WorkDay, ScheduleConfig, Company e PeriodReport.
"""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, date, time
from typing import Optional, List
from enum import Enum


WEEKDAY_LABELS = ['Segunda', 'Terça', 'Quarta', 'Quinta', 'Sexta', 'Sábado', 'Domingo']

MEDICAL_CERTIFICATE_NOTE = "ATESTADO MÉDICO"


class PunchOrigin(Enum):
    """Origem de uma marcação."""
    FILE = "arquivo"
    MANUAL = "manual"


@dataclass
class ScheduleConfig:
    """Configuração de jornada (padrão do sistema ou override por colaborador)."""
    # Horários padrão
    entry_time: time = field(default_factory=lambda: time(8, 0))
    exit_time: time = field(default_factory=lambda: time(17, 48))
    # Intervalo de almoço
    lunch_start: time = field(default_factory=lambda: time(12, 0))
    lunch_end: time = field(default_factory=lambda: time(13, 0))
    lunch_duration_minutes: int = 60
    require_lunch: bool = True
    # Tolerância diária em minutos
    tolerance_minutes: int = 10
    exit_tolerance_minutes: int = 5
    # Jornada diária esperada (44h/sem = 8h48 seg-sex)
    daily_quota: time = field(default_factory=lambda: time(8, 48))
    # Se True, saldo dentro da tolerância vai zerado para o banco
    tolerance_absorbs_balance: bool = False
    special_exit_types: List[str] = field(default_factory=lambda: [
        'Atestado Médico', 'Consulta Médica', 'Banco de Horas', 'Férias', 'Folga'
    ])

    @property
    def daily_quota_minutes(self) -> int:
        return self.daily_quota.hour * 60 + self.daily_quota.minute


@dataclass
class Company:
    """Dados da empresa para o cabeçalho dos relatórios."""
    name: str = ""
    cnpj: str = ""


@dataclass
class Punch:
    """Uma marcação de ponto individual."""
    datetime: datetime = field(default_factory=datetime.now)
    nsr: str = ""              # Número Sequencial de Registro
    pis: str = ""              # PIS como extraído da linha (10 dígitos)
    employee_id: str = ""      # PIS principal resolvido (ou o próprio PIS)
    employee_name: str = ""
    origin: PunchOrigin = PunchOrigin.FILE
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def date(self) -> date:
        return self.datetime.date()

    @property
    def time(self) -> time:
        return self.datetime.time()

    @property
    def hhmm(self) -> str:
        return self.datetime.strftime('%H:%M')

    @property
    def is_manual(self) -> bool:
        return self.origin is PunchOrigin.MANUAL


@dataclass
class PunchNotice:
    """Ocorrência detectada no dia (ponto faltante, intervalo, falta)."""
    kind: str
    expected: str
    reason: str


@dataclass
class WorkDay:
    """Dia de trabalho de um colaborador, com os valores calculados em minutos."""
    date: date = field(default_factory=date.today)
    employee_id: str = ""
    employee_name: str = ""
    punches: List[Punch] = field(default_factory=list)
    medical_certificate: bool = False  # Atestado médico: dia neutro
    # Calculados
    notices: List[PunchNotice] = field(default_factory=list)
    observations: List[str] = field(default_factory=list)
    expected_minutes: int = 0
    worked_minutes: int = 0
    lunch_minutes: int = 0          # Informativo
    overtime_minutes: int = 0
    late_minutes: int = 0
    balance_minutes: int = 0        # Saldo do dia (banco de horas)
    early_departure_minutes: int = 0

    @property
    def id(self) -> str:
        return f"{self.employee_id}-{self.date.strftime('%d/%m/%Y')}"

    @property
    def weekday_label(self) -> str:
        return WEEKDAY_LABELS[self.date.weekday()]

    @property
    def is_weekend(self) -> bool:
        return self.date.weekday() >= 5

    @property
    def remarks(self) -> List[str]:
        """Observações seguidas dos motivos das ocorrências."""
        return list(self.observations) + [n.reason for n in self.notices]


@dataclass
class Employee:
    """Dados de um colaborador."""
    pis: str = ""
    name: str = ""
    alternate_pis: List[str] = field(default_factory=list)
    schedule: Optional[ScheduleConfig] = None  # Override da configuração padrão
    workdays: List[WorkDay] = field(default_factory=list)

    @property
    def display_name(self) -> str:
        return self.name if self.name else f"PIS {self.pis}"

    @property
    def all_pis(self) -> List[str]:
        return [self.pis] + self.alternate_pis

    def add_alternate(self, pis: str):
        """Registra um PIS adicional (nunca o principal, sem repetição)."""
        if pis != self.pis and pis not in self.alternate_pis:
            self.alternate_pis.append(pis)

    @property
    def has_punches(self) -> bool:
        return any(wd.punches for wd in self.workdays)

    @property
    def total_worked_minutes(self) -> int:
        return sum(wd.worked_minutes for wd in self.workdays)

    @property
    def total_balance_minutes(self) -> int:
        return sum(wd.balance_minutes for wd in self.workdays)

    @property
    def days_worked(self) -> int:
        return sum(1 for wd in self.workdays if wd.worked_minutes > 0 or wd.medical_certificate)

    @property
    def days_with_notices(self) -> int:
        return sum(1 for wd in self.workdays if wd.notices and not wd.medical_certificate)


@dataclass
class PeriodReport:
    """Relatório consolidado de um período."""
    company: Company = field(default_factory=Company)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    employees: List[Employee] = field(default_factory=list)
    generated_at: datetime = field(default_factory=datetime.now)

    @property
    def period_label(self) -> str:
        if self.start_date and self.end_date:
            return (
                f"DE {self.start_date.strftime('%d/%m/%Y')} "
                f"ATÉ {self.end_date.strftime('%d/%m/%Y')}"
            )
        return ""
