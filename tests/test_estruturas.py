import pytest

from motor_projecao.estruturas import (
    Cenarios, DadosBase, PercentuaisCrescimento, arredondar, normalizar_serie,
    para_numero, validar_cenario, validar_mes,
)


# ---- normalização de séries ----
@pytest.mark.parametrize("entrada, esperado", [
    (None, [0.0] * 12),                           # ausente
    ([1, 2, 3], [1.0, 2.0, 3.0] + [0.0] * 9),     # curta: completa com zeros
    (list(range(15)), [float(i) for i in range(12)]),  # longa: trunca
    (["10", "abc", None], [10.0, 0.0, 0.0] + [0.0] * 9),  # inválidos viram 0
    ("texto", [0.0] * 12),                        # string não é série
    ({"a": 1}, [0.0] * 12),                       # dict não é série
])
def test_normalizar_serie(entrada, esperado):
    assert normalizar_serie(entrada) == esperado


@pytest.mark.parametrize("entrada, esperado", [
    (None, 0.0),
    ("12.5", 12.5),
    ("x", 0.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
    (7, 7.0),
])
def test_para_numero(entrada, esperado):
    assert para_numero(entrada) == esperado


def test_arredondar_duas_casas():
    assert arredondar(1464.1000000000001) == 1464.1
    assert arredondar(1210.0000000000002) == 1210.0
    assert arredondar(-0.001) == 0.0


def test_validacoes_rejeitam_mes_e_cenario_invalidos():
    with pytest.raises(ValueError):
        validar_mes(12)
    with pytest.raises(ValueError):
        validar_mes(-1)
    with pytest.raises(ValueError):
        validar_cenario("forecast")
    assert validar_cenario("medio") == "medio"


# ---- Cenarios ----
def test_cenarios_aceita_coluna_media():
    """Tabela de despesas fixas usa 'media' no lugar de 'medio'"""
    cen = Cenarios.from_dict({"previsto": [1] * 12, "media": [2] * 12, "maximo": [3] * 12, "id": 9})
    assert cen.medio == [2.0] * 12
    assert cen.to_dict()["medio"] == [2.0] * 12


def test_cenarios_copia_independente():
    original = Cenarios(previsto=[1] * 12)
    copia = original.copia()
    copia.previsto[0] = 99
    assert original.previsto[0] == 1.0


def test_percentuais_por_cenario():
    pct = PercentuaisCrescimento(minimo=10, medio=20, maximo=30)
    assert pct.para_cenario("previsto") == 10
    assert pct.para_cenario("medio") == 20
    assert pct.para_cenario("maximo") == 30


# ---- DadosBase ----
def test_dados_base_to_dict_formato_da_api():
    dados = DadosBase(trafego=[100] * 12)
    dados.crescimento.minimo = 5
    saida = dados.to_dict()
    assert saida["despesasVariaveis"] == [0.0] * 12
    assert saida["mktComponents"]["trafego"] == [100.0] * 12
    assert set(saida["mktComponents"]) == {"trafego", "socialMedia", "producaoConteudo"}
    assert saida["growth"] == {"minimo": 5, "medio": 0.0, "maximo": 0.0}


def test_dados_base_from_dict_linha_crua_do_banco():
    """Eco do servidor pode vir snake_case e com colunas JSON em texto"""
    linha = {
        "id": 1,
        "despesas_variaveis": [500] * 12,
        "mkt_components": '{"socialMedia": [30, 30]}',
        "growth": '{"minimo": 10, "medio": 20, "maximo": 30}',
        "updated_at": "2024-01-01T00:00:00",
    }
    dados = DadosBase.from_dict(linha)
    assert dados.despesas_variaveis == [500.0] * 12
    assert dados.social_media[:3] == [30.0, 30.0, 0.0]
    assert dados.crescimento.maximo == 30


def test_dados_base_from_dict_vazio():
    assert DadosBase.from_dict(None) == DadosBase()


def test_dados_base_editar_informa_mudanca():
    dados = DadosBase()
    assert dados.editar("investimentos", 2, "150") is True
    assert dados.investimentos[2] == 150.0
    assert dados.editar("investimentos", 2, 150) is False


def test_dados_base_campo_desconhecido():
    dados = DadosBase()
    with pytest.raises(KeyError):
        dados.editar("salarios", 0, 1)
    with pytest.raises(KeyError):
        dados.editar_crescimento("forecast", 1)
