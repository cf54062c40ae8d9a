import copy

import pytest
import requests

from motor_projecao.armazenamento import ErroPersistencia
from motor_projecao.motor import MotorProjecao
from motor_projecao.persistencia import PersistenceBridge
from motor_projecao.sessao import SessaoProjecao


class FakeStore:
    """Repositório em memória com falhas configuráveis"""

    def __init__(self, dados=None):
        self.dados = copy.deepcopy(dados or {})
        self.saves = []
        self.falhar_load = False
        self.falhar_save = set()
        self.falhar_clear = False
        self.ecos = {}  # categoria -> resposta devolvida no lugar do payload
        self.limpezas = 0
        self.ao_salvar = None  # chamado na thread do save, depois de gravar

    def load(self, categoria):
        if self.falhar_load:
            raise requests.ConnectionError("servidor fora do ar")
        dados = self.dados.get(categoria)
        return copy.deepcopy(dados) if dados is not None else None

    def save(self, categoria, dados):
        if categoria in self.falhar_save:
            raise requests.HTTPError("500 Server Error")
        self.saves.append((categoria, copy.deepcopy(dados)))
        self.dados[categoria] = copy.deepcopy(dados)
        if self.ao_salvar is not None:
            self.ao_salvar(categoria, dados)
        return copy.deepcopy(self.ecos.get(categoria, dados))

    def clear_all(self):
        if self.falhar_clear:
            raise ErroPersistencia("Servidor não limpou os dados")
        self.limpezas += 1
        self.dados = {}

    def salvos(self, categoria):
        return [dados for cat, dados in self.saves if cat == categoria]


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def ponte(store):
    return PersistenceBridge(store)


@pytest.fixture
def motor():
    return MotorProjecao()


@pytest.fixture
def sessao(ponte, motor):
    return SessaoProjecao(ponte, motor, janela_debounce=0.01)


@pytest.fixture
def projecao_basica():
    """Agregado 'projection' com despesas variáveis de 1000/mês"""
    return {
        "despesasVariaveis": [1000] * 12,
        "despesasFixas": [0] * 11 + [1000],
        "growth": {"minimo": 10, "medio": 20, "maximo": 30},
    }
