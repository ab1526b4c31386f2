"""
Montagem do período: um WorkDay por funcionário e por data.

Quem chama é dono das listas de WorkDay; as funções daqui só recalculam
os dias recebidos e nunca guardam referência a eles.
"""
import logging
import re
import uuid
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional

from bancohoras.calculator import WorkCalculator
from bancohoras.models import (
    Employee, Punch, WorkDay, ScheduleConfig, PunchOrigin, Company, PeriodReport
)

logger = logging.getLogger(__name__)


MAX_PERIOD_DAYS = 730

HHMM_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$')


def check_period(
    employees: List[Employee],
    start: Optional[date],
    end: Optional[date]
) -> Optional[str]:
    """Retorna o motivo para não calcular nada, ou None se o período é válido."""
    if not employees:
        return "Nenhum funcionário carregado."
    if start is None or end is None:
        return "Informe a data inicial e a data final."
    if start > end:
        return "A data inicial é posterior à data final."
    if (end - start).days > MAX_PERIOD_DAYS:
        return f"Período maior que {MAX_PERIOD_DAYS} dias."
    return None


def period_dates(start: date, end: date) -> List[date]:
    """Datas do período (inclusivo), sem os domingos."""
    dates = []
    current = start
    while current <= end:
        if current.weekday() != 6:
            dates.append(current)
        current += timedelta(days=1)
    return dates


def punches_for_day(employee: Employee, punches: Iterable[Punch], day: date) -> List[Punch]:
    """Marcações do funcionário (por qualquer um dos seus PIS) na data."""
    pis_list = employee.all_pis
    return [
        p for p in punches
        if p.date == day and (p.pis in pis_list or p.employee_id == employee.pis)
    ]


def build_period(
    employees: List[Employee],
    punches: List[Punch],
    start: Optional[date],
    end: Optional[date],
    calculator: WorkCalculator,
    certificates: Optional[Dict[str, bool]] = None
) -> Dict[str, List[WorkDay]]:
    """
    Calcula todos os dias do período para cada funcionário.

    ``certificates`` indica, pelo id do WorkDay, os dias com atestado.
    Retorna {PIS principal: [WorkDay, ...]} e também preenche
    ``employee.workdays``. Período inválido resulta em dicionário vazio.
    """
    reason = check_period(employees, start, end)
    if reason:
        logger.warning("Nada a calcular: %s", reason)
        return {}

    certificates = certificates or {}
    dates = period_dates(start, end)
    result: Dict[str, List[WorkDay]] = {}

    for employee in employees:
        schedule = calculator.effective_config(employee)
        days = []
        for current in dates:
            day = WorkDay(
                date=current,
                employee_id=employee.pis,
                employee_name=employee.name,
                punches=punches_for_day(employee, punches, current),
            )
            day.medical_certificate = certificates.get(day.id, False)
            calculator.compute_day(day, schedule)
            days.append(day)
        employee.workdays = days
        result[employee.pis] = days

    return result


def edit_punch(
    day: WorkDay,
    index: int,
    value: str,
    calculator: WorkCalculator,
    schedule: Optional[ScheduleConfig] = None
) -> bool:
    """
    Edição manual de uma marcação do dia.

    Valor vazio remove a marcação; índice existente troca o horário;
    índice além do fim inclui uma marcação manual. Horário fora do
    padrão HH:MM é recusado sem alterar o dia.
    """
    value = value.strip()
    if value and not HHMM_PATTERN.match(value):
        logger.warning("Horário inválido recusado para %s: %r", day.id, value)
        return False

    punches = list(day.punches)
    if not value:
        if 0 <= index < len(punches):
            punches.pop(index)
    else:
        hour, minute = (int(part) for part in value.split(':'))
        new_dt = datetime.combine(day.date, time(hour, minute))
        if 0 <= index < len(punches):
            old = punches[index]
            punches[index] = Punch(
                datetime=new_dt,
                nsr=old.nsr,
                pis=old.pis,
                employee_id=old.employee_id,
                employee_name=old.employee_name,
                origin=PunchOrigin.MANUAL,
                id=old.id,
            )
        else:
            punches.append(Punch(
                datetime=new_dt,
                nsr='MANUAL',
                pis=day.employee_id,
                employee_id=day.employee_id,
                employee_name=day.employee_name,
                origin=PunchOrigin.MANUAL,
                id=f"manual-{uuid.uuid4().hex}",
            ))

    day.punches = punches
    calculator.compute_day(day, schedule)
    return True


def set_medical_certificate(
    day: WorkDay,
    flag: bool,
    calculator: WorkCalculator,
    schedule: Optional[ScheduleConfig] = None
) -> WorkDay:
    """Marca ou desmarca atestado médico e recalcula o dia."""
    day.medical_certificate = flag
    return calculator.compute_day(day, schedule)


def generate_report(
    employees: List[Employee],
    company: Company,
    start: date,
    end: date
) -> PeriodReport:
    """Relatório com os funcionários que têm marcações no período, por nome."""
    selected = [e for e in employees if e.has_punches]
    selected.sort(key=lambda e: e.display_name)
    return PeriodReport(
        company=company,
        start_date=start,
        end_date=end,
        employees=selected,
        generated_at=datetime.now(),
    )
