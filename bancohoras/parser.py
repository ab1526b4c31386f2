"""
Parser de arquivos AFD (Arquivo-Fonte de Dados).

A classificação é feita linha a linha, por casamento de posições fixas.
Linhas que não casam com nenhum layout, ou que falham nas validações de
data/hora, não são dados: são simplesmente ignoradas.

Layout reconhecido:
  Funcionário: NSR(9) + tipo(1) + data(8) + hora(4) + op(1: I/A/E) + PIS(11) + nome
  Marcação:    NSR(9) + "3"(1) + data(8 ddmmaaaa) + hora(4 hhmm) + PIS(11)

O PIS usado como chave é o bloco de 11 dígitos sem o primeiro dígito.
"""
import logging
import re
from dataclasses import dataclass
from datetime import datetime, date
from typing import List, Tuple, Optional, Union

from bancohoras.identity import IdentityResolver
from bancohoras.models import Punch, Employee, PunchOrigin

logger = logging.getLogger(__name__)


EMPLOYEE_PATTERN = re.compile(r'^(\d{9})(\d)(\d{8})(\d{4})([IAE])(\d{11})(.*)')
PUNCH_PATTERN = re.compile(r'^(\d{9})3(\d{8})(\d{4})(\d{11})')

MIN_PUNCH_LINE_LENGTH = 33
MIN_NAME_LENGTH = 3


@dataclass(frozen=True)
class EmployeeRecord:
    """Registro de funcionário extraído de uma linha."""
    nsr: str
    operation: str
    pis_raw: str
    pis: str
    name: str


@dataclass(frozen=True)
class PunchRecord:
    """Registro de marcação extraído de uma linha."""
    nsr: str
    pis_raw: str
    pis: str
    datetime: datetime


def _clean_name(raw: str) -> str:
    """Normaliza espaços e remove dígitos/símbolos que vazam para o nome."""
    name = re.sub(r'\s+', ' ', raw).strip()
    name = re.sub(r'^\d+', '', name)
    name = re.sub(r'\d{10,}$', '', name)
    name = re.sub(r"[^A-Za-zÀ-ÿ'\-\s]", '', name)
    return name.strip()


def extract_employee_record(line: str) -> Optional[EmployeeRecord]:
    """Registro de funcionário (inclusão/alteração/exclusão), ou None."""
    if not line:
        return None
    match = EMPLOYEE_PATTERN.match(line)
    if not match:
        return None

    pis_raw = match.group(6)
    pis = pis_raw[1:]
    if set(pis) == {'0'}:
        return None

    name = _clean_name(match.group(7))
    if len(name) < MIN_NAME_LENGTH:
        return None

    return EmployeeRecord(
        nsr=match.group(1),
        operation=match.group(5),
        pis_raw=pis_raw,
        pis=pis,
        name=name,
    )


def extract_punch_record(line: str) -> Optional[PunchRecord]:
    """Registro de marcação (tipo 3), ou None se a linha não for válida."""
    if not line or len(line) < MIN_PUNCH_LINE_LENGTH:
        return None
    match = PUNCH_PATTERN.match(line)
    if not match:
        return None

    nsr, date_str, time_str, pis_raw = match.groups()

    day = int(date_str[0:2])
    month = int(date_str[2:4])
    year = int(date_str[4:8])
    hour = int(time_str[0:2])
    minute = int(time_str[2:4])

    if not (1 <= day <= 31 and 1 <= month <= 12):
        return None
    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        return None

    try:
        punch_dt = datetime(year, month, day, hour, minute)
    except ValueError:
        # 31/02, ano 0000 etc.
        return None

    return PunchRecord(nsr=nsr, pis_raw=pis_raw, pis=pis_raw[1:], datetime=punch_dt)


def classify_line(line: str) -> Optional[Union[EmployeeRecord, PunchRecord]]:
    """Classifica uma linha como funcionário, marcação ou nenhum dos dois."""
    return extract_employee_record(line) or extract_punch_record(line)


class AFDParser:
    """
    Leitura completa de um AFD em duas varreduras.

    1ª varredura: registros de funcionário alimentam o IdentityResolver.
    2ª varredura: cada marcação é associada a um funcionário. Marcações
    sem dono continuam na lista, com o próprio PIS como identificação.
    """

    def __init__(self):
        self.punches: List[Punch] = []
        self.employees: List[Employee] = []
        self.errors: List[str] = []
        self.total_lines = 0
        self.discarded_lines = 0

    def parse_file(self, filepath: str) -> Tuple[List[Employee], List[Punch]]:
        """Lê e processa um arquivo AFD completo."""
        self.errors = []
        content = self._read_file(filepath)
        if content is None:
            self.punches = []
            self.employees = []
            return self.employees, self.punches
        return self.parse_content(content)

    def _read_file(self, filepath: str) -> Optional[str]:
        """Lê o arquivo tentando diferentes encodings."""
        for encoding in ['utf-8', 'latin-1', 'cp1252']:
            try:
                with open(filepath, 'r', encoding=encoding) as f:
                    return f.read()
            except UnicodeDecodeError:
                continue
            except FileNotFoundError:
                self.errors.append(f"Arquivo não encontrado: {filepath}")
                return None
            except OSError as e:
                self.errors.append(f"Erro ao ler arquivo: {e}")
                return None

        # Fallback
        try:
            with open(filepath, 'r', encoding='latin-1', errors='replace') as f:
                return f.read()
        except OSError as e:
            self.errors.append(f"Erro ao ler arquivo: {e}")
            return None

    def parse_content(self, content: str) -> Tuple[List[Employee], List[Punch]]:
        """Processa o texto do AFD e retorna (funcionários, marcações)."""
        resolver = IdentityResolver()
        self.punches = []
        self.discarded_lines = 0

        lines = content.splitlines()
        self.total_lines = len(lines)

        # 1) Funcionários
        for line in lines:
            record = extract_employee_record(line)
            if record is not None:
                resolver.add_record(record.pis, record.name)

        self.employees = resolver.consolidate()

        # 2) Marcações
        for line_num, line in enumerate(lines, 1):
            record = extract_punch_record(line)
            if record is None:
                if line.strip() and extract_employee_record(line) is None:
                    self.discarded_lines += 1
                    logger.debug("Linha %d ignorada: %r", line_num, line[:40])
                continue
            self.punches.append(self._bind_punch(record, resolver))

        logger.info(
            "AFD processado: %d linhas, %d funcionários, %d marcações, %d ignoradas",
            self.total_lines, len(self.employees), len(self.punches), self.discarded_lines
        )
        return self.employees, self.punches

    def _bind_punch(self, record: PunchRecord, resolver: IdentityResolver) -> Punch:
        employee = resolver.lookup(record.pis, record.pis_raw)
        if employee is None:
            logger.debug("Marcação NSR %s sem funcionário (PIS %s)", record.nsr, record.pis)
        return Punch(
            datetime=record.datetime,
            nsr=record.nsr,
            pis=record.pis,
            employee_id=employee.pis if employee else record.pis,
            employee_name=employee.name if employee else "",
            origin=PunchOrigin.FILE,
        )

    def get_punches_by_pis(self, pis: str) -> List[Punch]:
        """Retorna todas as marcações de um funcionário, ordenadas por data/hora."""
        result = [p for p in self.punches if p.employee_id == pis or p.pis == pis]
        result.sort(key=lambda p: p.datetime)
        return result

    def get_date_range(self) -> Tuple[Optional[date], Optional[date]]:
        """Retorna a data mais antiga e mais recente das marcações."""
        if not self.punches:
            return None, None
        dates = [p.date for p in self.punches]
        return min(dates), max(dates)

    def get_summary(self) -> dict:
        """Retorna resumo do arquivo parseado."""
        date_start, date_end = self.get_date_range()
        known = {pis for e in self.employees for pis in e.all_pis}
        return {
            'total_lines': self.total_lines,
            'discarded_lines': self.discarded_lines,
            'total_punches': len(self.punches),
            'total_employees': len(self.employees),
            'unresolved_punches': sum(1 for p in self.punches if p.employee_id not in known),
            'date_start': date_start,
            'date_end': date_end,
            'errors': len(self.errors),
            'employees': {
                emp.pis: emp.display_name
                for emp in self.employees
            }
        }
