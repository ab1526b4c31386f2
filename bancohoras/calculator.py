"""
Calculador de jornada - banco de horas.

Cada dia é recalculado do zero a partir das marcações, do atestado e da
configuração efetiva. O saldo do dia (trabalhado - esperado) é o valor
que vai para o banco de horas; extras/atrasos são apenas para exibição.
"""
from datetime import time
from typing import List, Optional

from bancohoras.models import (
    Employee, WorkDay, ScheduleConfig, PunchNotice, MEDICAL_CERTIFICATE_NOTE
)


MINUTES_PER_DAY = 24 * 60

SATURDAY = 5
SUNDAY = 6


def time_to_minutes(t: time) -> int:
    """Converte um horário em minutos desde a meia-noite."""
    return t.hour * 60 + t.minute


def minutes_to_hm(minutes: int) -> str:
    """Formata minutos como HH:MM, com '-' para saldos negativos."""
    sign = '-' if minutes < 0 else ''
    hours, mins = divmod(abs(minutes), 60)
    return f"{sign}{hours:02d}:{mins:02d}"


def _span(start: time, end: time) -> int:
    """Minutos entre dois horários; saída antes da entrada cruza a meia-noite."""
    diff = time_to_minutes(end) - time_to_minutes(start)
    if diff < 0:
        diff += MINUTES_PER_DAY
    return diff


class WorkCalculator:
    """Calcula minutos trabalhados, saldo e ocorrências de cada dia."""

    def __init__(self, default_schedule: Optional[ScheduleConfig] = None):
        self.default_schedule = default_schedule or ScheduleConfig()

    def update_config(self, schedule: ScheduleConfig):
        """Substitui a configuração padrão usada nos próximos cálculos."""
        self.default_schedule = schedule

    def effective_config(self, employee: Optional[Employee]) -> ScheduleConfig:
        if employee is not None and employee.schedule is not None:
            return employee.schedule
        return self.default_schedule

    def compute_day(self, day: WorkDay, schedule: Optional[ScheduleConfig] = None) -> WorkDay:
        """
        Preenche os campos calculados do dia.

        Pode ser chamado quantas vezes for preciso (após editar marcações,
        marcar atestado ou mudar a configuração): nada do cálculo anterior
        é reaproveitado.
        """
        config = schedule or self.default_schedule
        self._reset(day)

        if day.medical_certificate:
            day.observations.append(MEDICAL_CERTIFICATE_NOTE)
            return day

        weekday = day.date.weekday()
        is_weekend = weekday >= SATURDAY
        expected = 0 if is_weekend else config.daily_quota_minutes
        day.expected_minutes = expected

        if not day.punches:
            if not is_weekend:
                self._detect_notices(day, config)
                day.late_minutes = expected
                day.balance_minutes = -expected
            return day

        day.punches.sort(key=lambda p: p.time)
        self._detect_notices(day, config)

        day.worked_minutes = self._worked_minutes(day)
        if config.require_lunch and len(day.punches) >= 4:
            day.lunch_minutes = _span(day.punches[1].time, day.punches[2].time)

        balance = day.worked_minutes - expected
        tolerance = config.tolerance_minutes

        if balance > tolerance:
            day.overtime_minutes = balance
        elif balance < -tolerance:
            day.late_minutes = -balance
        elif config.tolerance_absorbs_balance:
            balance = 0
        day.balance_minutes = balance

        count = len(day.punches)
        if not is_weekend and count % 2 == 0:
            last_exit = time_to_minutes(day.punches[-1].time)
            standard_exit = time_to_minutes(config.exit_time)
            if last_exit < standard_exit and balance < -tolerance:
                day.early_departure_minutes = min(standard_exit - last_exit, abs(balance))

        return day

    @staticmethod
    def _reset(day: WorkDay):
        day.notices = []
        day.observations = [o for o in day.observations if o != MEDICAL_CERTIFICATE_NOTE]
        day.expected_minutes = 0
        day.worked_minutes = 0
        day.lunch_minutes = 0
        day.overtime_minutes = 0
        day.late_minutes = 0
        day.balance_minutes = 0
        day.early_departure_minutes = 0

    @staticmethod
    def _worked_minutes(day: WorkDay) -> int:
        """Soma os pares (1ª, 2ª), (3ª, 4ª)... Marcação sem par é ignorada."""
        punches = day.punches
        total = 0
        for i in range(0, len(punches) - 1, 2):
            total += _span(punches[i].time, punches[i + 1].time)
        return total

    def _detect_notices(self, day: WorkDay, config: ScheduleConfig):
        """Ocorrências do dia. Domingo nunca gera ocorrência."""
        weekday = day.date.weekday()
        if weekday == SUNDAY:
            return

        notices: List[PunchNotice] = []
        punches = day.punches

        if not punches:
            notices.append(PunchNotice('Geral', 'Dia Completo', 'Falta Integral'))
            day.notices = notices
            return

        if len(punches) % 2 != 0:
            notices.append(PunchNotice('Saída', '---', 'Batida ímpar (falta saída)'))

        if config.require_lunch and weekday != SATURDAY and len(punches) == 2:
            first = time_to_minutes(punches[0].time)
            last = time_to_minutes(punches[1].time)
            if first < time_to_minutes(config.lunch_start) and last > time_to_minutes(config.lunch_end):
                window = (
                    f"{config.lunch_start.strftime('%H:%M')} - "
                    f"{config.lunch_end.strftime('%H:%M')}"
                )
                notices.append(PunchNotice('Intervalo', window, 'Não registrou intervalo de almoço'))

        day.notices = notices
