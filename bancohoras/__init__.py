"""
Banco de Horas AFD - leitura de arquivos AFD e cálculo do saldo diário.
"""

__version__ = "1.2.0"
