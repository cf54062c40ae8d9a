"""
Relatórios - Motor de Projeção
Totais por trimestre, total geral e média mensal no layout da tabela anual
"""

from typing import Dict, List, Sequence

import pandas as pd

from .config import (
    BUDGET, CATEGORIAS_LABEL, DESPESAS_FIXAS, DESPESAS_TOTAIS, DESPESAS_VARIAVEIS,
    FATURAMENTO_TOTAL, FATURAMENTOS, INVESTIMENTOS, MESES, MKT, NUM_MESES,
    RESULTADO, TRIMESTRES,
)
from .estruturas import arredondar, validar_cenario

# Ordem das linhas da tabela anual
ORDEM_TABELA = [
    DESPESAS_TOTAIS,
    DESPESAS_VARIAVEIS,
    DESPESAS_FIXAS,
    INVESTIMENTOS,
    MKT,
    *FATURAMENTOS,
    FATURAMENTO_TOTAL,
    BUDGET,
    RESULTADO,
]


def total_trimestre(serie: Sequence[float], inicio: int, fim: int) -> float:
    """Soma de inicio até fim (inclusivo)"""
    return arredondar(sum(serie[inicio:fim + 1]))


def total_geral(serie: Sequence[float]) -> float:
    return total_trimestre(serie, 0, NUM_MESES - 1)


def media_mensal(serie: Sequence[float]) -> float:
    return arredondar(total_geral(serie) / NUM_MESES)


def colunas_tabela() -> List[str]:
    """1 TRI, Janeiro, Fevereiro, Março, 2 TRI, ... , Total Geral, Média"""
    colunas = []
    for rotulo, inicio, fim in TRIMESTRES:
        colunas.append(rotulo)
        colunas.extend(MESES[inicio:fim + 1])
    return colunas + ["Total Geral", "Média"]


def resumo_serie(serie: Sequence[float]) -> Dict[str, float]:
    linha = {}
    for rotulo, inicio, fim in TRIMESTRES:
        linha[rotulo] = total_trimestre(serie, inicio, fim)
        for mes in range(inicio, fim + 1):
            linha[MESES[mes]] = serie[mes]
    linha["Total Geral"] = total_geral(serie)
    linha["Média"] = media_mensal(serie)
    return linha


def tabela_projecao(motor, cenario: str = "previsto") -> pd.DataFrame:
    """Tabela anual de um cenário: uma linha por categoria"""
    validar_cenario(cenario)
    linhas = {
        CATEGORIAS_LABEL[cat]: resumo_serie(motor.snapshot(cat).serie(cenario))
        for cat in ORDEM_TABELA
    }
    df = pd.DataFrame.from_dict(linhas, orient="index", columns=colunas_tabela())
    df.index.name = "DESCRIÇÃO"
    return df
