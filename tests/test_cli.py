"""Tests for the command-line entry point."""

import pytest
from click.testing import CliRunner
from openpyxl import load_workbook

from main import cli


AFD = "\n".join([
    "0000000011000000000000100EMPRESA TESTE",
    "0000000015010220240800I10001234567MARIA DAS NEVES",
    "0000000023060220240800" + "10001234567",
    "0000000033060220241200" + "10001234567",
    "0000000043060220241300" + "10001234567",
    "0000000053060220241748" + "10001234567",
    "999999999",
])


@pytest.fixture
def afd_file(tmp_path):
    path = tmp_path / "AFD_teste.txt"
    path.write_text(AFD, encoding="utf-8")
    return str(path)


class TestResumo:

    def test_lists_employees(self, afd_file):
        result = CliRunner().invoke(cli, ["resumo", afd_file])

        assert result.exit_code == 0
        assert "Marcações: 4" in result.output
        assert "MARIA DAS NEVES (PIS:0001234567) = 4 marcações" in result.output


class TestProcessar:

    def test_writes_spreadsheet(self, afd_file, tmp_path):
        xlsx = tmp_path / "saida.xlsx"
        result = CliRunner().invoke(cli, [
            "processar", afd_file, "--inicio", "2024-02-06", "--fim", "2024-02-06",
            "--config", str(tmp_path / "config.json"), "--xlsx", str(xlsx),
        ])

        assert result.exit_code == 0, result.output
        assert "saldo 00:00" in result.output
        assert load_workbook(str(xlsx)).sheetnames == ["Resumo Geral", "MARIA DAS NEVES"]

    def test_certificate_option(self, afd_file, tmp_path):
        result = CliRunner().invoke(cli, [
            "processar", afd_file, "--inicio", "2024-02-05", "--fim", "2024-02-06",
            "--config", str(tmp_path / "config.json"),
            "--atestado", "0001234567-05/02/2024",
        ])

        assert result.exit_code == 0, result.output
        assert "saldo 00:00" in result.output

    def test_inverted_period_is_nothing_to_compute(self, afd_file, tmp_path):
        result = CliRunner().invoke(cli, [
            "processar", afd_file, "--inicio", "2024-02-07", "--fim", "2024-02-06",
            "--config", str(tmp_path / "config.json"),
        ])

        assert result.exit_code == 1
        assert "Nada a calcular" in result.output
