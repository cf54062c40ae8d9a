from graphlib import CycleError

import pytest

from motor_projecao.config import (
    BUDGET, DESPESAS_FIXAS, DESPESAS_TOTAIS, DESPESAS_VARIAVEIS, FATURAMENTO_TOTAL,
    FATURAMENTOS, INVESTIMENTOS, MKT, RESULTADO,
)
from motor_projecao.estruturas import Cenarios
from motor_projecao.grafo import DependencyGraph
from motor_projecao.regras import CRESCIMENTO, REGRAS, Regra


@pytest.fixture
def grafo():
    return DependencyGraph()


def test_ordem_respeita_entradas(grafo):
    posicao = {cat: i for i, cat in enumerate(grafo.ordem)}
    for cat, regra in REGRAS.items():
        for entrada in regra.entradas:
            if entrada in REGRAS:
                assert posicao[entrada] < posicao[cat]


def test_raizes_sao_series_base_e_crescimento(grafo):
    assert CRESCIMENTO in grafo.raizes
    assert "despesas_fixas" in grafo.raizes
    assert "trafego" in grafo.raizes
    assert BUDGET not in grafo.raizes


def test_afetados_por_despesas_fixas(grafo):
    assert grafo.afetados(["despesas_fixas"]) == [DESPESAS_FIXAS, DESPESAS_TOTAIS, BUDGET, RESULTADO]


def test_afetados_por_crescimento_nao_inclui_fixas(grafo):
    afetados = grafo.afetados([CRESCIMENTO])
    assert DESPESAS_FIXAS not in afetados
    for cat in [DESPESAS_VARIAVEIS, INVESTIMENTOS, MKT, *FATURAMENTOS, FATURAMENTO_TOTAL, RESULTADO]:
        assert cat in afetados
    assert afetados.index(FATURAMENTO_TOTAL) < afetados.index(RESULTADO)


def test_afetados_inclui_a_propria_categoria(grafo):
    assert grafo.afetados([BUDGET]) == [BUDGET, RESULTADO]
    assert grafo.afetados([RESULTADO]) == [RESULTADO]


def test_no_desconhecido(grafo):
    with pytest.raises(KeyError):
        grafo.afetados(["salarios"])


def test_ciclo_e_rejeitado():
    def calcular(cat, dados, derivados, tracker):
        return Cenarios()

    regras = {
        "a": Regra("a", ("b",), calcular),
        "b": Regra("b", ("a",), calcular),
    }
    with pytest.raises(CycleError):
        DependencyGraph(regras)
