"""
Exportação da planilha de banco de horas.

Aba "Resumo Geral" com os totais por funcionário e uma aba por
funcionário com o detalhe diário.
"""
import os
import re
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from bancohoras.calculator import minutes_to_hm
from bancohoras.models import Employee, PeriodReport, WorkDay


SUMMARY_SHEET = "Resumo Geral"

SUMMARY_COLUMNS = [
    "Funcionário", "PIS", "Dias Trabalhados", "Horas Trabalhadas (Total)",
    "Saldo Banco de Horas (Total)", "Dias com Ocorrências",
]

DETAIL_COLUMNS = [
    "Data", "Dia Semana", "Entrada", "Saída", "Entrada", "Saída", "Entrada", "Saída",
    "Trabalhado", "Saldo Dia", "Observações",
]

PUNCH_COLUMNS = 6
MAX_SHEET_NAME = 30

HEADER_FILL = PatternFill(start_color="DDDDDD", end_color="DDDDDD", fill_type="solid")


def sheet_name_for(name: str, existing: List[str]) -> str:
    """Nome de aba válido e único (sem :/\\?*[] e com até 30 caracteres)."""
    base = re.sub(r'[:/\\?*\[\]]', '', name).strip()[:MAX_SHEET_NAME] or "Funcionario"
    candidate = base
    suffix = 1
    while candidate in existing:
        tail = str(suffix)
        candidate = base[:MAX_SHEET_NAME - len(tail)] + tail
        suffix += 1
    return candidate


def _write_header(ws, row: int, columns: List[str]):
    for col_idx, column in enumerate(columns, start=1):
        cell = ws.cell(row=row, column=col_idx, value=column)
        cell.font = Font(bold=True)
        cell.fill = HEADER_FILL
        ws.column_dimensions[get_column_letter(col_idx)].width = max(len(column) + 4, 12)


def day_row(day: WorkDay) -> list:
    """Linha do detalhe diário."""
    row = [day.date.strftime('%d/%m/%Y'), day.weekday_label]
    for i in range(PUNCH_COLUMNS):
        row.append(day.punches[i].hhmm if i < len(day.punches) else "--")
    if day.medical_certificate:
        row += ["ATESTADO", "00:00", "Atestado Médico Entregue"]
    else:
        row += [
            minutes_to_hm(day.worked_minutes),
            minutes_to_hm(day.balance_minutes),
            "; ".join(day.remarks),
        ]
    return row


def summary_row(employee: Employee) -> list:
    return [
        employee.name,
        employee.pis,
        employee.days_worked,
        minutes_to_hm(employee.total_worked_minutes),
        minutes_to_hm(employee.total_balance_minutes),
        employee.days_with_notices,
    ]


def build_workbook(report: PeriodReport) -> Workbook:
    """Monta a planilha a partir do relatório do período."""
    wb = Workbook()
    ws = wb.active
    ws.title = SUMMARY_SHEET

    _write_header(ws, 1, SUMMARY_COLUMNS)
    for employee in report.employees:
        ws.append(summary_row(employee))
    ws.column_dimensions['A'].width = 40

    for employee in report.employees:
        sheet = wb.create_sheet(sheet_name_for(employee.display_name, wb.sheetnames))
        sheet['A1'] = f"FOLHA DE PONTO: {employee.display_name.upper()}"
        sheet['A1'].font = Font(bold=True, size=12)
        sheet['A2'] = f"PIS: {employee.pis}"
        _write_header(sheet, 4, DETAIL_COLUMNS)
        for day in employee.workdays:
            sheet.append(day_row(day))
        sheet.column_dimensions[get_column_letter(len(DETAIL_COLUMNS))].width = 60

    return wb


def export_xlsx(report: PeriodReport, output_path: str) -> str:
    """Grava a planilha e retorna o caminho."""
    os.makedirs(os.path.dirname(output_path) or '.', exist_ok=True)
    build_workbook(report).save(output_path)
    return output_path
