"""
Gerador de relatórios PDF - Cartão de Ponto.
Cabeçalho vermelho, bloco de empresa/funcionário, tabela diária com
saldo do banco de horas e resumo do período.
"""
import os
import re
from datetime import datetime
from typing import List

from fpdf import FPDF

from bancohoras.calculator import minutes_to_hm
from bancohoras.models import PeriodReport, Employee, WorkDay, Company


RED = (180, 30, 30)
LIGHT_GRAY = (245, 245, 245)
WHITE = (255, 255, 255)
BLACK = (0, 0, 0)
GREEN_TEXT = (0, 128, 0)
RED_TEXT = (200, 0, 0)

DAY_ABBR = ['SEG', 'TER', 'QUA', 'QUI', 'SEX', 'SÁB', 'DOM']

TABLE_COLUMNS = [
    ('DIA', 22),
    ('ENT. 1', 14),
    ('SAÍ. 1', 14),
    ('ENT. 2', 14),
    ('SAÍ. 2', 14),
    ('TRAB.', 15),
    ('SALDO', 15),
    ('EXTRA', 15),
    ('ATRASO', 15),
    ('OBS.', 52),
]

ROW_H = 4


class PontoPDF(FPDF):
    """PDF customizado - Cartão de Ponto."""

    def __init__(self, company: Company, period: str):
        super().__init__('P', 'mm', 'A4')
        self.company = company
        self.period = period
        self.set_auto_page_break(auto=True, margin=15)

        assets = os.path.join(os.path.dirname(__file__), '..', 'assets')
        font_reg = os.path.join(assets, 'DejaVuSans.ttf')
        font_bold = os.path.join(assets, 'DejaVuSans-Bold.ttf')

        if os.path.exists(font_reg) and os.path.exists(font_bold):
            self.add_font('DejaVu', '', font_reg)
            self.add_font('DejaVu', 'B', font_bold)
            self.has_dejavu = True
        else:
            self.has_dejavu = False

    def _font(self, style='', size=8):
        if self.has_dejavu:
            self.set_font('DejaVu', style, size)
        else:
            self.set_font('Helvetica', style, size)

    def header(self):
        """Cabeçalho: Cartão de Ponto vermelho + período."""
        self.set_fill_color(*RED)
        self.rect(10, 8, 190, 12, 'F')

        self.set_xy(12, 9)
        self.set_text_color(*WHITE)
        self._font('B', 13)
        self.cell(60, 5, 'Cartão de Ponto', align='L')

        self.set_xy(70, 9)
        self._font('B', 9)
        self.cell(70, 5, self.period, align='C')

        self.set_xy(150, 9)
        self._font('', 7)
        self.cell(50, 4, f'Página {self.page_no()}/{{nb}}', align='R')

        self.set_xy(150, 14)
        self._font('', 6)
        now = datetime.now().strftime('%d/%m/%Y às %H:%M')
        self.cell(50, 3, f'Emitido em {now}', align='R')

        self.set_text_color(*BLACK)
        self.set_y(22)


class PDFExporter:
    """Exportador de cartões de ponto em PDF."""

    def export_individual(self, report: PeriodReport, output_dir: str) -> List[str]:
        """Exporta um PDF para cada colaborador."""
        os.makedirs(output_dir, exist_ok=True)
        generated = []
        suffix = ''
        if report.start_date and report.end_date:
            suffix = f"_{report.start_date:%Y%m%d}_{report.end_date:%Y%m%d}"

        for employee in report.employees:
            filename = self._safe_filename(employee.display_name)
            filepath = os.path.join(output_dir, f"Ponto_{filename}{suffix}.pdf")
            pdf = PontoPDF(report.company, report.period_label)
            pdf.alias_nb_pages()
            self._add_employee_pages(pdf, employee)
            pdf.output(filepath)
            generated.append(filepath)

        return generated

    def export_consolidated(self, report: PeriodReport, output_path: str) -> str:
        """Exporta um PDF único com todos os colaboradores."""
        os.makedirs(os.path.dirname(output_path) or '.', exist_ok=True)
        pdf = PontoPDF(report.company, report.period_label)
        pdf.alias_nb_pages()
        for employee in report.employees:
            self._add_employee_pages(pdf, employee)
        pdf.output(output_path)
        return output_path

    # ==========================================
    # BLOCOS DO RELATÓRIO
    # ==========================================

    def _add_employee_pages(self, pdf: PontoPDF, employee: Employee):
        pdf.add_page()
        self._draw_info_block(pdf, employee)

        self._draw_table_header(pdf)
        for wd in employee.workdays:
            if pdf.get_y() > 265:
                pdf.add_page()
                self._draw_table_header(pdf)
            self._draw_table_row(pdf, wd)

        pdf.ln(3)
        self._draw_summary(pdf, employee)
        self._draw_signatures(pdf, employee)

    def _draw_info_block(self, pdf: PontoPDF, employee: Employee):
        """Dados da empresa e do funcionário."""
        y = pdf.get_y()
        row = 4.5

        pdf.set_xy(10, y)
        pdf._font('B', 7)
        pdf.cell(30, row, 'NOME DA EMPRESA:')
        pdf._font('', 7)
        pdf.cell(70, row, pdf.company.name or '-')

        pdf.set_xy(110, y)
        pdf._font('B', 7)
        pdf.cell(20, row, 'CNPJ:')
        pdf._font('', 7)
        pdf.cell(60, row, pdf.company.cnpj or '-')
        pdf.ln(row)

        pdf.set_draw_color(200, 200, 200)
        pdf.line(10, pdf.get_y(), 200, pdf.get_y())
        pdf.ln(1)

        y2 = pdf.get_y()
        pdf.set_xy(10, y2)
        pdf._font('B', 7)
        pdf.cell(38, row, 'NOME DO FUNCIONÁRIO:')
        pdf._font('B', 8)
        pdf.cell(72, row, employee.display_name)

        pdf.set_xy(120, y2)
        pdf._font('B', 7)
        pdf.cell(10, row, 'PIS:')
        pdf._font('', 7)
        pdf.cell(60, row, employee.pis or '-')
        pdf.ln(row + 1)

        if employee.alternate_pis:
            pdf.set_x(10)
            pdf._font('', 6)
            pdf.set_text_color(100, 100, 100)
            pdf.cell(190, 3.5, 'PIS adicionais: ' + ', '.join(employee.alternate_pis))
            pdf.set_text_color(*BLACK)
            pdf.ln(3.5)

        pdf.line(10, pdf.get_y(), 200, pdf.get_y())
        pdf.ln(2)

    def _draw_table_header(self, pdf: PontoPDF):
        pdf._font('B', 6.5)
        pdf.set_fill_color(*RED)
        pdf.set_text_color(*WHITE)
        for label, w in TABLE_COLUMNS:
            pdf.cell(w, 4.5, label, border=1, align='C', fill=True)
        pdf.ln()
        pdf.set_text_color(*BLACK)

    def _draw_table_row(self, pdf: PontoPDF, wd: WorkDay):
        """Uma linha da tabela: marcações, trabalhado, saldo e observações."""
        pdf._font('', 6.5)

        fill = False
        if wd.medical_certificate:
            pdf.set_fill_color(225, 240, 255)
            fill = True
        elif wd.notices:
            pdf.set_fill_color(255, 245, 210)
            fill = True
        elif wd.is_weekend and not wd.punches:
            pdf.set_fill_color(240, 240, 240)
            fill = True

        widths = [w for _, w in TABLE_COLUMNS]
        day_str = f"{wd.date.strftime('%d/%m/%y')} - {DAY_ABBR[wd.date.weekday()]}"
        pdf.cell(widths[0], ROW_H, day_str, border=1, align='C', fill=fill)

        for i in range(4):
            value = wd.punches[i].hhmm if i < len(wd.punches) else ''
            pdf.cell(widths[1 + i], ROW_H, value, border=1, align='C', fill=fill)

        if wd.medical_certificate:
            pdf.cell(sum(widths[5:9]), ROW_H, 'ATESTADO', border=1, align='C', fill=fill)
        else:
            worked = minutes_to_hm(wd.worked_minutes) if wd.worked_minutes else ''
            pdf.cell(widths[5], ROW_H, worked, border=1, align='C', fill=fill)
            self._colored_cell(pdf, widths[6], self._signed(wd.balance_minutes), wd.balance_minutes, fill)
            extra = f"+{minutes_to_hm(wd.overtime_minutes)}" if wd.overtime_minutes else ''
            self._colored_cell(pdf, widths[7], extra, wd.overtime_minutes, fill)
            late = minutes_to_hm(wd.late_minutes) if wd.late_minutes else ''
            self._colored_cell(pdf, widths[8], late, -wd.late_minutes, fill)

        remarks = '; '.join(wd.remarks)
        if len(wd.punches) > 4:
            remarks = f"+{len(wd.punches) - 4} marcações " + remarks
        pdf._font('', 5.5)
        pdf.cell(widths[9], ROW_H, remarks[:48], border=1, align='L', fill=fill)
        pdf.ln()

    @staticmethod
    def _colored_cell(pdf: PontoPDF, width: float, text: str, sign: int, fill: bool):
        if sign > 0:
            pdf.set_text_color(*GREEN_TEXT)
        elif sign < 0:
            pdf.set_text_color(*RED_TEXT)
        pdf.cell(width, ROW_H, text, border=1, align='C', fill=fill)
        pdf.set_text_color(*BLACK)

    @staticmethod
    def _signed(minutes: int) -> str:
        if minutes == 0:
            return '00:00'
        return minutes_to_hm(minutes) if minutes < 0 else f"+{minutes_to_hm(minutes)}"

    def _draw_summary(self, pdf: PontoPDF, employee: Employee):
        """Resumo do período."""
        pdf._font('B', 8)
        pdf.set_fill_color(*RED)
        pdf.set_text_color(*WHITE)
        pdf.cell(0, 5, '  RESUMO DO PERÍODO', fill=True)
        pdf.ln()
        pdf.set_text_color(*BLACK)

        pdf._font('', 7)
        pdf.set_fill_color(*LIGHT_GRAY)

        balance = employee.total_balance_minutes
        certificates = sum(1 for wd in employee.workdays if wd.medical_certificate)
        rows = [
            ('Total Horas Trabalhadas', minutes_to_hm(employee.total_worked_minutes), 0),
            ('Banco de Horas (Saldo)', self._signed(balance), balance),
            ('Dias Trabalhados', f"{employee.days_worked} dias", 0),
            ('Dias com Ocorrências', f"{employee.days_with_notices} dias", -employee.days_with_notices),
            ('Atestados', f"{certificates} dias", 0),
        ]

        for i, (label, value, sign) in enumerate(rows):
            f = i % 2 == 0
            pdf.cell(95, 4.5, f"  {label}", border=1, fill=f)
            if sign > 0:
                pdf.set_text_color(*GREEN_TEXT)
            elif sign < 0:
                pdf.set_text_color(*RED_TEXT)
            pdf.cell(95, 4.5, f"  {value}", border=1, fill=f)
            pdf.ln()
            pdf.set_text_color(*BLACK)

    def _draw_signatures(self, pdf: PontoPDF, employee: Employee):
        """Linhas de assinatura do funcionário e do responsável."""
        if pdf.get_y() > 255:
            pdf.add_page()

        pdf.ln(12)
        y = pdf.get_y()
        line_w = 80

        for x, title, subtitle in (
            (15, employee.display_name, 'Assinatura do Funcionário'),
            (110, pdf.company.name or 'Empresa', 'Responsável / RH'),
        ):
            pdf.set_draw_color(0, 0, 0)
            pdf.line(x, y, x + line_w, y)
            pdf._font('', 7)
            pdf.set_text_color(*BLACK)
            pdf.set_xy(x, y + 1)
            pdf.cell(line_w, 4, title, align='C')
            pdf.set_xy(x, y + 4)
            pdf._font('', 6)
            pdf.set_text_color(100, 100, 100)
            pdf.cell(line_w, 3, subtitle, align='C')

        pdf.set_text_color(*BLACK)

    @staticmethod
    def _safe_filename(name: str) -> str:
        """Remove caracteres inválidos para nome de arquivo."""
        safe = re.sub(r'[^\w\s\-]', '', name)
        return safe.strip().replace(' ', '_')
