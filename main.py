"""
Banco de Horas AFD
Importa arquivos AFD, calcula o saldo diário de cada colaborador e
exporta planilha e cartões de ponto em PDF.
"""
import logging
import os
from datetime import datetime

import click

from bancohoras.calculator import WorkCalculator, minutes_to_hm
from bancohoras.config import CONFIG_FILE, load_config
from bancohoras.models import Company
from bancohoras.parser import AFDParser
from bancohoras.pdf_export import PDFExporter
from bancohoras.timesheet import build_period, check_period, generate_report
from bancohoras.xlsx_export import export_xlsx


_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)


def _parse_file(arquivo: str) -> AFDParser:
    parser = AFDParser()
    parser.parse_file(arquivo)
    for err in parser.errors:
        click.echo(f"Aviso: {err}", err=True)
    return parser


@click.group()
def cli():
    """Banco de horas a partir de arquivos AFD."""


@cli.command('resumo')
@click.argument('arquivo', type=click.Path(exists=True, dir_okay=False))
def resumo(arquivo):
    """Mostra o resumo do arquivo AFD."""
    parser = _parse_file(arquivo)
    summary = parser.get_summary()

    click.echo(f"Linhas: {summary['total_lines']} | Marcações: {summary['total_punches']} "
               f"| Colaboradores: {summary['total_employees']}")
    if summary['date_start']:
        click.echo(f"Período: {summary['date_start']:%d/%m/%Y} a {summary['date_end']:%d/%m/%Y}")
    if summary['unresolved_punches']:
        click.echo(f"Marcações sem funcionário: {summary['unresolved_punches']}")

    click.echo("\nColaboradores:")
    for emp in parser.employees:
        n = len(parser.get_punches_by_pis(emp.pis))
        extra = f" (+{len(emp.alternate_pis)} PIS)" if emp.alternate_pis else ""
        click.echo(f"  * {emp.display_name} (PIS:{emp.pis}){extra} = {n} marcações")


@cli.command('processar')
@click.argument('arquivo', type=click.Path(exists=True, dir_okay=False))
@click.option('--inicio', required=True, type=click.DateTime(formats=['%Y-%m-%d']),
              help='Data inicial (AAAA-MM-DD).')
@click.option('--fim', required=True, type=click.DateTime(formats=['%Y-%m-%d']),
              help='Data final (AAAA-MM-DD).')
@click.option('--config', 'config_path', default=CONFIG_FILE, show_default=True,
              help='Arquivo JSON de configuração.')
@click.option('--xlsx', 'xlsx_path', default=None, help='Caminho da planilha a gerar.')
@click.option('--pdf', 'pdf_dir', default=None, help='Pasta para os cartões de ponto em PDF.')
@click.option('--empresa', default='', help='Nome da empresa no cabeçalho do PDF.')
@click.option('--atestado', multiple=True,
              help='Dia com atestado médico, no formato PIS-DD/MM/AAAA. Pode repetir.')
def processar(arquivo, inicio, fim, config_path, xlsx_path, pdf_dir, empresa, atestado):
    """Calcula o banco de horas do período e gera os relatórios."""
    start, end = inicio.date(), fim.date()
    parser = _parse_file(arquivo)

    reason = check_period(parser.employees, start, end)
    if reason:
        click.echo(f"Nada a calcular: {reason}", err=True)
        raise SystemExit(1)

    default, overrides = load_config(config_path)
    for employee in parser.employees:
        employee.schedule = overrides.get(employee.pis)

    calculator = WorkCalculator(default_schedule=default)
    build_period(
        parser.employees, parser.punches, start, end, calculator,
        certificates={day_id: True for day_id in atestado}
    )
    report = generate_report(parser.employees, Company(name=empresa), start, end)

    if not report.employees:
        click.echo("Nenhum funcionário com registros no período.", err=True)
        raise SystemExit(1)

    for emp in report.employees:
        click.echo(f"{emp.display_name}: trabalhado {minutes_to_hm(emp.total_worked_minutes)} "
                   f"| saldo {minutes_to_hm(emp.total_balance_minutes)} "
                   f"| ocorrências {emp.days_with_notices} dias")

    if xlsx_path:
        click.echo(f"Planilha: {export_xlsx(report, xlsx_path)}")
    if pdf_dir:
        for path in PDFExporter().export_individual(report, pdf_dir):
            click.echo(f"PDF: {path}")

    click.echo(f"Concluído em {datetime.now():%d/%m/%Y %H:%M}")


def main():
    cli()


if __name__ == "__main__":
    main()
