"""
Regras de Derivação - Motor de Projeção
Fórmulas puras por categoria. Toda célula passa por resolve_cell:
se estiver fixada manualmente devolve o valor fixado, senão a fórmula.
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Sequence, Tuple

from .config import (
    BUDGET, CENARIOS, DESPESAS_FIXAS, DESPESAS_TOTAIS, DESPESAS_VARIAVEIS,
    FATOR_DEGRAU_FIXAS, FATURAMENTO_GEO, FATURAMENTO_NN, FATURAMENTO_PLAN,
    FATURAMENTO_REG, FATURAMENTO_REURB, FATURAMENTO_TOTAL, FATURAMENTOS,
    INVESTIMENTOS, MKT, NUM_MESES, RESULTADO,
)
from .estruturas import Cenarios, DadosBase, PercentuaisCrescimento, arredondar
from .overrides import OverrideTracker

# Raiz que representa os três percentuais globais
CRESCIMENTO = "crescimento"


def resolve_cell(tracker: OverrideTracker, categoria: str, cenario: str, mes: int,
                 formula: Callable[[int], float]) -> float:
    """Valor final de uma célula: fixado manualmente ou calculado"""
    if tracker.is_overridden(categoria, cenario, mes):
        return tracker.get(categoria, cenario, mes)
    return arredondar(formula(mes))


def _serie(tracker: OverrideTracker, categoria: str, cenario: str,
           formula: Callable[[int], float]) -> List[float]:
    return [resolve_cell(tracker, categoria, cenario, mes, formula) for mes in range(NUM_MESES)]


# ============================================
# FAMÍLIAS DE FÓRMULAS
# ============================================

def derivar_crescimento(categoria: str, base: Sequence[float],
                        crescimento: PercentuaisCrescimento,
                        tracker: OverrideTracker) -> Cenarios:
    """
    base + base * percentual / 100
    previsto -> mínimo, médio -> médio, máximo -> máximo
    """
    resultado = {}
    for cenario in CENARIOS:
        pct = crescimento.para_cenario(cenario)
        resultado[cenario] = _serie(
            tracker, categoria, cenario, lambda m: base[m] + base[m] * pct / 100
        )
    return Cenarios(**resultado)


def derivar_despesas_fixas(categoria: str, dezembro_anterior: float,
                           tracker: OverrideTracker) -> Cenarios:
    """
    Degraus trimestrais de 10%:
    Jan = dezembro anterior x 1,10; Fev/Mar repetem Jan;
    Abr = Mar x 1,10; Mai/Jun repetem; e assim por diante.
    Médio = Previsto x 1,10 e Máximo = Médio x 1,10, mês a mês.

    Cada degrau parte do valor já resolvido do mês anterior, então
    uma célula fixada no previsto é carregada para os meses seguintes.
    """
    previsto: List[float] = []

    def degrau(mes: int) -> float:
        if mes == 0:
            return dezembro_anterior * FATOR_DEGRAU_FIXAS
        if mes % 3 == 0:
            return previsto[mes - 1] * FATOR_DEGRAU_FIXAS
        return previsto[mes - 1]

    for mes in range(NUM_MESES):
        previsto.append(resolve_cell(tracker, categoria, "previsto", mes, degrau))

    medio = _serie(tracker, categoria, "medio", lambda m: previsto[m] * FATOR_DEGRAU_FIXAS)
    maximo = _serie(tracker, categoria, "maximo", lambda m: medio[m] * FATOR_DEGRAU_FIXAS)
    return Cenarios(previsto=previsto, medio=medio, maximo=maximo)


def derivar_mkt(categoria: str, componentes: Sequence[Sequence[float]],
                crescimento: PercentuaisCrescimento,
                tracker: OverrideTracker) -> Cenarios:
    """
    Previsto = soma crua dos componentes (sem crescimento).
    Médio/Máximo = soma + soma * percentual / 100.
    """
    soma = [sum(comp[m] for comp in componentes) for m in range(NUM_MESES)]
    pct_medio = crescimento.medio
    pct_maximo = crescimento.maximo
    return Cenarios(
        previsto=_serie(tracker, categoria, "previsto", lambda m: soma[m]),
        medio=_serie(tracker, categoria, "medio", lambda m: soma[m] + soma[m] * pct_medio / 100),
        maximo=_serie(tracker, categoria, "maximo", lambda m: soma[m] + soma[m] * pct_maximo / 100),
    )


def derivar_soma(categoria: str, parcelas: Sequence[Cenarios],
                 tracker: OverrideTracker) -> Cenarios:
    """Soma elemento a elemento, cenário com cenário"""
    resultado = {}
    for cenario in CENARIOS:
        series = [p.serie(cenario) for p in parcelas]
        resultado[cenario] = _serie(
            tracker, categoria, cenario, lambda m: sum(s[m] for s in series)
        )
    return Cenarios(**resultado)


def derivar_diferenca(categoria: str, minuendo: Cenarios, subtraendo: Cenarios,
                      tracker: OverrideTracker) -> Cenarios:
    resultado = {}
    for cenario in CENARIOS:
        a = minuendo.serie(cenario)
        b = subtraendo.serie(cenario)
        resultado[cenario] = _serie(tracker, categoria, cenario, lambda m: a[m] - b[m])
    return Cenarios(**resultado)


# ============================================
# REGISTRO DE REGRAS POR CATEGORIA
# ============================================

Calculo = Callable[[str, DadosBase, Dict[str, Cenarios], OverrideTracker], Cenarios]


@dataclass(frozen=True)
class Regra:
    """Categoria derivada: entradas declaradas + função de cálculo"""
    categoria: str
    entradas: Tuple[str, ...]  # raízes (séries base / crescimento) ou categorias
    calcular: Calculo


def _regra_crescimento(categoria: str, campo_base: str) -> Regra:
    def calcular(cat, dados, derivados, tracker):
        return derivar_crescimento(cat, dados.serie(campo_base), dados.crescimento, tracker)
    return Regra(categoria, (campo_base, CRESCIMENTO), calcular)


def _regra_soma(categoria: str, parcelas: Tuple[str, ...]) -> Regra:
    def calcular(cat, dados, derivados, tracker):
        return derivar_soma(cat, [derivados[p] for p in parcelas], tracker)
    return Regra(categoria, parcelas, calcular)


_REGRAS_LISTA = [
    _regra_crescimento(DESPESAS_VARIAVEIS, "despesas_variaveis"),
    _regra_crescimento(INVESTIMENTOS, "investimentos"),
    _regra_crescimento(FATURAMENTO_REURB, "faturamento_reurb"),
    _regra_crescimento(FATURAMENTO_GEO, "faturamento_geo"),
    _regra_crescimento(FATURAMENTO_PLAN, "faturamento_plan"),
    _regra_crescimento(FATURAMENTO_REG, "faturamento_reg"),
    _regra_crescimento(FATURAMENTO_NN, "faturamento_nn"),
    Regra(
        DESPESAS_FIXAS,
        ("despesas_fixas",),
        lambda cat, dados, derivados, tracker: derivar_despesas_fixas(
            cat, dados.despesas_fixas[-1], tracker
        ),
    ),
    Regra(
        MKT,
        ("trafego", "social_media", "producao_conteudo", CRESCIMENTO),
        lambda cat, dados, derivados, tracker: derivar_mkt(
            cat,
            [dados.trafego, dados.social_media, dados.producao_conteudo],
            dados.crescimento,
            tracker,
        ),
    ),
    _regra_soma(DESPESAS_TOTAIS, (DESPESAS_FIXAS, DESPESAS_VARIAVEIS)),
    _regra_soma(FATURAMENTO_TOTAL, tuple(FATURAMENTOS)),
    _regra_soma(BUDGET, (DESPESAS_TOTAIS, MKT, INVESTIMENTOS)),
    Regra(
        RESULTADO,
        (FATURAMENTO_TOTAL, BUDGET),
        lambda cat, dados, derivados, tracker: derivar_diferenca(
            cat, derivados[FATURAMENTO_TOTAL], derivados[BUDGET], tracker
        ),
    ),
]

REGRAS: Dict[str, Regra] = {regra.categoria: regra for regra in _REGRAS_LISTA}
