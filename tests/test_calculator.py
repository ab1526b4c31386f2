"""Tests for the per-day time-bank calculation."""

import random
from datetime import date, datetime, time

import pytest

from bancohoras.calculator import WorkCalculator, minutes_to_hm, time_to_minutes
from bancohoras.models import Employee, Punch, ScheduleConfig, WorkDay, MEDICAL_CERTIFICATE_NOTE


MONDAY = date(2024, 2, 5)
TUESDAY = date(2024, 2, 6)
SATURDAY = date(2024, 2, 3)
SUNDAY = date(2024, 2, 4)


def make_day(day: date, *times: str, certificate: bool = False) -> WorkDay:
    """WorkDay with punches at the given HH:MM times."""
    punches = []
    for hhmm in times:
        h, m = (int(x) for x in hhmm.split(':'))
        punches.append(Punch(datetime=datetime.combine(day, time(h, m)), pis="0001234567",
                             employee_id="0001234567"))
    return WorkDay(date=day, employee_id="0001234567", employee_name="MARIA DAS NEVES",
                   punches=punches, medical_certificate=certificate)


@pytest.fixture
def calculator():
    return WorkCalculator(ScheduleConfig(daily_quota=time(8, 48), tolerance_minutes=10))


class TestHelpers:

    def test_time_to_minutes(self):
        assert time_to_minutes(time(17, 48)) == 1068

    @pytest.mark.parametrize("minutes,expected", [
        (0, "00:00"), (528, "08:48"), (-48, "-00:48"), (1500, "25:00"), (-61, "-01:01"),
    ])
    def test_minutes_to_hm(self, minutes, expected):
        assert minutes_to_hm(minutes) == expected


class TestComputeDay:

    def test_four_punches_within_tolerance(self, calculator):
        day = calculator.compute_day(make_day(TUESDAY, "08:00", "12:00", "13:00", "17:47"))

        assert day.expected_minutes == 528
        assert day.worked_minutes == 527
        assert day.lunch_minutes == 60
        assert day.balance_minutes == -1
        assert day.overtime_minutes == 0
        assert day.late_minutes == 0
        assert day.early_departure_minutes == 0
        assert day.notices == []

    def test_saturday_is_all_overtime(self, calculator):
        day = calculator.compute_day(make_day(SATURDAY, "08:00", "12:00"))

        assert day.expected_minutes == 0
        assert day.worked_minutes == 240
        assert day.balance_minutes == 240
        assert day.overtime_minutes == 240
        assert day.notices == []

    def test_odd_punches_flag_missing_exit(self, calculator):
        day = calculator.compute_day(make_day(TUESDAY, "08:00", "12:00", "13:00"))

        assert [n.reason for n in day.notices] == ["Batida ímpar (falta saída)"]
        assert day.worked_minutes == 240
        assert day.balance_minutes == 240 - 528
        assert day.late_minutes == 288
        assert day.early_departure_minutes == 0

    def test_weekday_without_punches_is_full_absence(self, calculator):
        day = calculator.compute_day(make_day(MONDAY))

        assert day.balance_minutes == -528
        assert day.late_minutes == 528
        assert day.overtime_minutes == 0
        assert [n.reason for n in day.notices] == ["Falta Integral"]
        assert day.notices[0].kind == "Geral"

    @pytest.mark.parametrize("weekend", [SATURDAY, SUNDAY])
    def test_weekend_without_punches_is_neutral(self, calculator, weekend):
        day = calculator.compute_day(make_day(weekend))

        assert day.balance_minutes == 0
        assert day.late_minutes == 0
        assert day.notices == []

    def test_sunday_never_has_notices(self, calculator):
        day = calculator.compute_day(make_day(SUNDAY, "09:00"))

        assert day.notices == []

    def test_medical_certificate_neutralizes_day(self, calculator):
        day = calculator.compute_day(make_day(TUESDAY, "08:00", "09:00", certificate=True))

        assert day.balance_minutes == 0
        assert day.overtime_minutes == 0
        assert day.late_minutes == 0
        assert day.early_departure_minutes == 0
        assert day.notices == []
        assert day.observations == [MEDICAL_CERTIFICATE_NOTE]

    def test_certificate_is_idempotent_and_reversible(self, calculator):
        day = make_day(MONDAY, certificate=True)
        calculator.compute_day(day)
        calculator.compute_day(day)
        assert day.observations == [MEDICAL_CERTIFICATE_NOTE]

        day.medical_certificate = False
        calculator.compute_day(day)
        assert day.observations == []
        assert day.balance_minutes == -528

    def test_unregistered_lunch(self, calculator):
        day = calculator.compute_day(make_day(TUESDAY, "07:30", "16:48"))

        assert len(day.notices) == 1
        notice = day.notices[0]
        assert notice.kind == "Intervalo"
        assert notice.expected == "12:00 - 13:00"
        assert notice.reason == "Não registrou intervalo de almoço"
        # Ocorrência não altera o cálculo
        assert day.worked_minutes == 558
        assert day.balance_minutes == 30
        assert day.overtime_minutes == 30

    def test_unregistered_lunch_skipped_when_not_required(self, calculator):
        config = ScheduleConfig(require_lunch=False)
        day = calculator.compute_day(make_day(TUESDAY, "07:30", "16:48"), config)

        assert day.notices == []
        assert day.lunch_minutes == 0

    def test_unregistered_lunch_not_checked_on_saturday(self, calculator):
        day = calculator.compute_day(make_day(SATURDAY, "07:30", "16:48"))

        assert day.notices == []

    def test_early_departure_limited_by_balance(self, calculator):
        day = calculator.compute_day(make_day(TUESDAY, "07:00", "12:00", "13:00", "16:00"))

        assert day.balance_minutes == -48
        assert day.late_minutes == 48
        assert day.early_departure_minutes == 48

    def test_early_departure_limited_by_exit_time(self, calculator):
        day = calculator.compute_day(make_day(TUESDAY, "09:00", "12:00", "13:00", "17:00"))

        assert day.balance_minutes == -108
        assert day.early_departure_minutes == 48

    def test_tolerance_keeps_balance_by_default(self, calculator):
        day = calculator.compute_day(make_day(TUESDAY, "08:00", "12:00", "13:00", "17:55"))

        assert day.balance_minutes == 7
        assert day.overtime_minutes == 0

    def test_tolerance_can_absorb_balance(self, calculator):
        config = ScheduleConfig(tolerance_absorbs_balance=True)
        day = calculator.compute_day(make_day(TUESDAY, "08:00", "12:00", "13:00", "17:55"), config)

        assert day.balance_minutes == 0

    def test_order_of_punches_does_not_matter(self, calculator):
        times = ["08:00", "12:00", "13:00", "18:30"]
        expected = calculator.compute_day(make_day(TUESDAY, *times))

        shuffled = list(times)
        random.Random(7).shuffle(shuffled)
        day = calculator.compute_day(make_day(TUESDAY, *shuffled))

        assert day.worked_minutes == expected.worked_minutes == 570
        assert [p.hhmm for p in day.punches] == times

    def test_recompute_leaves_no_residue(self, calculator):
        day = make_day(TUESDAY, "08:00", "12:00", "13:00")
        calculator.compute_day(day)
        day.punches = make_day(TUESDAY, "08:00", "12:00", "13:00", "17:48").punches
        calculator.compute_day(day)

        fresh = calculator.compute_day(make_day(TUESDAY, "08:00", "12:00", "13:00", "17:48"))
        assert day.notices == fresh.notices == []
        assert day.balance_minutes == fresh.balance_minutes == 0


class TestConfiguration:

    def test_update_config_replaces_default(self, calculator):
        calculator.update_config(ScheduleConfig(daily_quota=time(8, 0)))
        day = calculator.compute_day(make_day(MONDAY))

        assert day.balance_minutes == -480

    def test_effective_config_prefers_employee_override(self, calculator):
        override = ScheduleConfig(daily_quota=time(6, 0))
        employee = Employee(pis="0001234567", schedule=override)

        assert calculator.effective_config(employee) is override
        assert calculator.effective_config(Employee(pis="1")) is calculator.default_schedule

    def test_calculation_does_not_mutate_config(self, calculator):
        config = ScheduleConfig()
        before = repr(config)
        calculator.compute_day(make_day(TUESDAY, "08:00", "18:00"), config)

        assert repr(config) == before
