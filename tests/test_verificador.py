import asyncio

import pytest

from motor_projecao.config import BUDGET, CATEGORIA_PROJECAO, DESPESAS_VARIAVEIS
from motor_projecao.verificador import Divergencia, SyncVerifier


@pytest.fixture
def sessao_carregada(store, sessao, projecao_basica):
    store.dados[CATEGORIA_PROJECAO] = projecao_basica

    async def fluxo():
        await sessao.carregar()
        await sessao.aguardar_pendentes()

    asyncio.run(fluxo())
    return sessao


def test_tudo_sincronizado(store, sessao_carregada):
    verificador = SyncVerifier(sessao_carregada.motor, sessao_carregada.ponte)
    resultados = asyncio.run(verificador.verificar_todas())
    for categoria, resultado in resultados.items():
        if categoria in store.dados:
            assert resultado.in_sync, categoria
        else:
            # categorias zeradas nunca foram salvas
            assert resultado.erro
    assert resultados[DESPESAS_VARIAVEIS].in_sync


def test_divergencia_em_categoria(store, sessao_carregada):
    store.dados[DESPESAS_VARIAVEIS]["medio"][3] = 1
    verificador = SyncVerifier(sessao_carregada.motor, sessao_carregada.ponte)
    resultado = asyncio.run(verificador.verify(DESPESAS_VARIAVEIS))
    assert not resultado.in_sync
    assert len(resultado.diffs) == 1
    diff = resultado.diffs[0]
    assert (diff.serie, diff.mes, diff.local, diff.persistido) == ("medio", 3, 1200.0, 1.0)


def test_divergencia_em_percentual(store, sessao_carregada):
    store.dados[CATEGORIA_PROJECAO]["growth"]["maximo"] = 99
    verificador = SyncVerifier(sessao_carregada.motor, sessao_carregada.ponte)
    resultado = asyncio.run(verificador.verify(CATEGORIA_PROJECAO))
    assert not resultado.in_sync
    assert [(d.serie, d.mes) for d in resultado.diffs] == [("growth.maximo", None)]


def test_categoria_ausente(sessao):
    verificador = SyncVerifier(sessao.motor, sessao.ponte)
    resultado = asyncio.run(verificador.verify(BUDGET))
    assert not resultado.in_sync
    assert resultado.erro


def test_verificacao_nao_altera_motor(store, sessao_carregada):
    store.dados[DESPESAS_VARIAVEIS]["previsto"][0] = 0
    antes = sessao_carregada.motor.snapshot(DESPESAS_VARIAVEIS)
    asyncio.run(SyncVerifier(sessao_carregada.motor, sessao_carregada.ponte).verify(DESPESAS_VARIAVEIS))
    assert sessao_carregada.motor.snapshot(DESPESAS_VARIAVEIS) == antes


def test_descricao_da_divergencia():
    mensal = Divergencia("medio", 3, 1200.0, 1.0)
    assert mensal.descricao() == "medio Abr: local R$ 1.200,00 x servidor R$ 1,00"
    percentual = Divergencia("growth.maximo", None, 30.0, 99.0)
    assert percentual.descricao() == "growth.maximo: local 30,00% x servidor 99,00%"
