"""
Resolução de identidade dos colaboradores.

O mesmo funcionário costuma aparecer no AFD com PIS diferentes (erro de
digitação no relógio, dígitos deslocados) ou com o nome alterado por um
registro de alteração. O resolvedor junta essas variações em um único
cadastro, guardando os PIS extras em ``alternate_pis``.

A busca por variações é linear sobre os cadastros conhecidos (O(n²) no
total). Para algumas centenas de funcionários isso é irrelevante.
"""
import re
import unicodedata
from typing import Dict, List, Optional

from bancohoras.models import Employee


# Nome normalizado que começa com a letra da operação (I/A/E) grudada
OPERATION_PREFIX = re.compile(r'^[IAE][A-ZÀ-Ÿ]')

MAX_PIS_DIFFERENCES = 3


def normalize_name(name: str) -> str:
    """Remove acentos, converte para maiúsculas e apara espaços."""
    decomposed = unicodedata.normalize('NFD', name or '')
    stripped = ''.join(c for c in decomposed if not unicodedata.combining(c))
    return stripped.upper().strip()


def is_pis_variation(pis1: str, pis2: str) -> bool:
    """
    Verifica se dois PIS representam a mesma pessoa.

    São considerados iguais quando um é rotação do outro ou quando
    diferem em no máximo 3 das 10 posições.
    """
    if pis1 == pis2:
        return True
    if len(pis1) != 10 or len(pis2) != 10:
        return False
    if pis2 in pis1 + pis1 or pis1 in pis2 + pis2:
        return True
    differences = sum(1 for a, b in zip(pis1, pis2) if a != b)
    return differences <= MAX_PIS_DIFFERENCES


class IdentityResolver:
    """
    Cadastro de funcionários montado durante uma única leitura do AFD.

    Mantém dois índices: PIS -> Employee e nome normalizado -> Employee.
    Cada chamada de parse deve usar uma instância nova.
    """

    def __init__(self):
        self.by_pis: Dict[str, Employee] = {}
        self.by_name: Dict[str, Employee] = {}

    def _link(self, pis: str, employee: Employee, padded: bool = True):
        self.by_pis[pis] = employee
        if padded:
            self.by_pis[pis.zfill(11)] = employee

    def add_record(self, pis: str, name: str) -> Employee:
        """Processa um registro de funcionário e devolve o cadastro afetado."""
        normalized = normalize_name(name)

        # 1) Nome alterado com a letra da operação no início
        if OPERATION_PREFIX.match(normalized):
            base = self.by_name.get(normalized[1:])
            if base is not None:
                base.add_alternate(pis)
                self._link(pis, base)
                return base

        # 2) Mesmo nome já cadastrado
        existing = self.by_name.get(normalized)
        if existing is not None:
            if existing.pis != pis:
                existing.add_alternate(pis)
                self._link(pis, existing, padded=False)
            return existing

        # 3) PIS parecido com o de alguém já cadastrado
        similar = self.find_variation(pis)
        if similar is not None:
            similar.add_alternate(pis)
            self._link(pis, similar)
            return similar

        # 4) Funcionário novo
        employee = Employee(pis=pis, name=name)
        self._link(pis, employee)
        self.by_name[normalized] = employee
        return employee

    def find_variation(self, pis: str) -> Optional[Employee]:
        """Primeiro cadastro cujo PIS principal é variação do PIS informado."""
        for employee in self.by_name.values():
            if is_pis_variation(employee.pis, pis):
                return employee
        return None

    def lookup(self, pis: str, pis_raw: str = "") -> Optional[Employee]:
        """
        Localiza o funcionário de uma marcação.

        Ordem: índice de PIS (chave, bloco bruto e chave com zero à
        esquerda), PIS adicionais e por fim variação do PIS principal.
        """
        for key in (pis, pis_raw, pis.zfill(11)):
            if key and key in self.by_pis:
                return self.by_pis[key]

        for employee in self.employees():
            if pis in employee.alternate_pis:
                return employee

        similar = self.find_variation(pis)
        if similar is not None:
            # Variação descoberta na marcação passa a fazer parte do cadastro
            similar.add_alternate(pis)
            self._link(pis, similar)
        return similar

    def consolidate(self) -> List[Employee]:
        """
        Junta cadastros com o mesmo nome normalizado.

        O sobrevivente recebe o PIS principal e os adicionais do outro, e
        os índices passam a apontar para ele.
        """
        merged: Dict[str, Employee] = {}
        for employee in self.employees():
            key = normalize_name(employee.name)
            survivor = merged.get(key)
            if survivor is None:
                merged[key] = employee
                continue
            for pis in employee.all_pis:
                survivor.add_alternate(pis)
            for pis, target in list(self.by_pis.items()):
                if target is employee:
                    self.by_pis[pis] = survivor

        self.by_name = merged
        return list(merged.values())

    def employees(self) -> List[Employee]:
        """Cadastros distintos, na ordem em que foram criados."""
        return list(self.by_name.values())
