import pytest

from motor_projecao.config import CATEGORIAS_LABEL, RESULTADO
from motor_projecao.relatorios import (
    ORDEM_TABELA, colunas_tabela, media_mensal, tabela_projecao, total_geral, total_trimestre,
)


def test_colunas_intercalam_trimestres():
    colunas = colunas_tabela()
    assert colunas[:5] == ["1 TRI", "Janeiro", "Fevereiro", "Março", "2 TRI"]
    assert colunas[-2:] == ["Total Geral", "Média"]
    assert len(colunas) == 18


def test_totais_de_uma_serie():
    serie = list(range(1, 13))
    assert total_trimestre(serie, 0, 2) == 6
    assert total_trimestre(serie, 9, 11) == 33
    assert total_geral(serie) == 78
    assert media_mensal(serie) == 6.5


def test_tabela_projecao(motor):
    motor.definir_serie_base("despesas_variaveis", [1000] * 12)
    motor.editar_crescimento("minimo", 10)
    df = tabela_projecao(motor, "previsto")

    assert df.index.name == "DESCRIÇÃO"
    assert list(df.index) == [CATEGORIAS_LABEL[c] for c in ORDEM_TABELA]
    linha = df.loc["Despesas Variáveis"]
    assert linha["Janeiro"] == 1100.0
    assert linha["1 TRI"] == 3300.0
    assert linha["Total Geral"] == 13200.0
    assert linha["Média"] == 1100.0
    assert df.loc[CATEGORIAS_LABEL[RESULTADO], "Total Geral"] == -13200.0


def test_tabela_cenario_invalido(motor):
    with pytest.raises(ValueError):
        tabela_projecao(motor, "forecast")
