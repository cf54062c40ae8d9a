"""
Estruturas de Dados - Motor de Projeção
Séries mensais, cenários e dados base digitados pelo usuário
"""

import json
import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from .config import CASAS_DECIMAIS, CENARIOS, CRESCIMENTO_POR_CENARIO, NUM_MESES

# ============================================
# SÉRIES MENSAIS
# ============================================

# campo interno -> chave no agregado "projection"
CAMPOS_BASE = {
    "despesas_variaveis": "despesasVariaveis",
    "despesas_fixas": "despesasFixas",
    "investimentos": "investimentos",
    "faturamento_reurb": "faturamentoReurb",
    "faturamento_geo": "faturamentoGeo",
    "faturamento_plan": "faturamentoPlan",
    "faturamento_reg": "faturamentoReg",
    "faturamento_nn": "faturamentoNn",
}

COMPONENTES_MKT = {
    "trafego": "trafego",
    "social_media": "socialMedia",
    "producao_conteudo": "producaoConteudo",
}

CAMPOS_EDITAVEIS = list(CAMPOS_BASE) + list(COMPONENTES_MKT)


def serie_vazia() -> List[float]:
    """Série de 12 meses zerada"""
    return [0.0] * NUM_MESES


def arredondar(valor: float) -> float:
    """Arredonda para 2 casas (convenção única do motor)"""
    return round(valor, CASAS_DECIMAIS) + 0.0


def para_numero(valor: Any) -> float:
    """Converte qualquer entrada para float; inválido vira 0"""
    if valor is None:
        return 0.0
    try:
        numero = float(valor)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(numero) or math.isinf(numero):
        return 0.0
    return numero


def normalizar_serie(valores: Optional[Iterable[Any]]) -> List[float]:
    """
    Garante exatamente 12 valores numéricos.
    Faltantes/inválidos = 0; listas maiores são truncadas.
    """
    if valores is None or isinstance(valores, (str, bytes, dict)):
        return serie_vazia()
    try:
        itens = list(valores)
    except TypeError:
        return serie_vazia()

    serie = [para_numero(v) for v in itens[:NUM_MESES]]
    serie.extend([0.0] * (NUM_MESES - len(serie)))
    return serie


def como_dict(valor: Any) -> Dict:
    """Colunas JSON podem chegar como texto"""
    if isinstance(valor, str):
        try:
            valor = json.loads(valor)
        except ValueError:
            return {}
    return valor if isinstance(valor, dict) else {}


def validar_mes(mes: int) -> int:
    if not isinstance(mes, int) or not 0 <= mes < NUM_MESES:
        raise ValueError(f"Mês inválido: {mes!r} (esperado 0-11)")
    return mes


def validar_cenario(cenario: str) -> str:
    if cenario not in CENARIOS:
        raise ValueError(f"Cenário inválido: {cenario!r}")
    return cenario


# ============================================
# CENÁRIOS (PREVISTO / MÉDIO / MÁXIMO)
# ============================================

@dataclass
class Cenarios:
    """Três séries mensais de uma categoria"""
    previsto: List[float] = field(default_factory=serie_vazia)
    medio: List[float] = field(default_factory=serie_vazia)
    maximo: List[float] = field(default_factory=serie_vazia)

    def __post_init__(self):
        self.previsto = normalizar_serie(self.previsto)
        self.medio = normalizar_serie(self.medio)
        self.maximo = normalizar_serie(self.maximo)

    def serie(self, cenario: str) -> List[float]:
        return getattr(self, validar_cenario(cenario))

    def copia(self) -> 'Cenarios':
        return Cenarios(list(self.previsto), list(self.medio), list(self.maximo))

    def arredondado(self) -> 'Cenarios':
        """Cópia com todos os valores em 2 casas"""
        return Cenarios(
            [arredondar(v) for v in self.previsto],
            [arredondar(v) for v in self.medio],
            [arredondar(v) for v in self.maximo],
        )

    def to_dict(self) -> Dict[str, List[float]]:
        return {c: list(self.serie(c)) for c in CENARIOS}

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'Cenarios':
        """Aceita 'media' como sinônimo de 'medio' (tabela de despesas fixas)"""
        data = data if isinstance(data, dict) else {}
        medio = data.get("medio")
        if medio is None:
            medio = data.get("media")
        return cls(
            previsto=data.get("previsto"),
            medio=medio,
            maximo=data.get("maximo"),
        )


@dataclass
class PercentuaisCrescimento:
    """Percentuais globais de crescimento (em %, ex: 10 = 10%)"""
    minimo: float = 0.0
    medio: float = 0.0
    maximo: float = 0.0

    def para_cenario(self, cenario: str) -> float:
        """Percentual aplicado ao cenário (previsto usa o mínimo)"""
        return getattr(self, CRESCIMENTO_POR_CENARIO[validar_cenario(cenario)])

    def to_dict(self) -> Dict[str, float]:
        return {"minimo": self.minimo, "medio": self.medio, "maximo": self.maximo}

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'PercentuaisCrescimento':
        data = data if isinstance(data, dict) else {}
        return cls(
            minimo=para_numero(data.get("minimo")),
            medio=para_numero(data.get("medio")),
            maximo=para_numero(data.get("maximo")),
        )


# ============================================
# DADOS BASE (DIGITADOS PELO USUÁRIO)
# ============================================

@dataclass
class DadosBase:
    """Séries base e percentuais de crescimento"""
    despesas_variaveis: List[float] = field(default_factory=serie_vazia)
    despesas_fixas: List[float] = field(default_factory=serie_vazia)  # ano anterior
    investimentos: List[float] = field(default_factory=serie_vazia)
    faturamento_reurb: List[float] = field(default_factory=serie_vazia)
    faturamento_geo: List[float] = field(default_factory=serie_vazia)
    faturamento_plan: List[float] = field(default_factory=serie_vazia)
    faturamento_reg: List[float] = field(default_factory=serie_vazia)
    faturamento_nn: List[float] = field(default_factory=serie_vazia)
    # Componentes de marketing
    trafego: List[float] = field(default_factory=serie_vazia)
    social_media: List[float] = field(default_factory=serie_vazia)
    producao_conteudo: List[float] = field(default_factory=serie_vazia)
    crescimento: PercentuaisCrescimento = field(default_factory=PercentuaisCrescimento)

    def __post_init__(self):
        for campo in CAMPOS_EDITAVEIS:
            setattr(self, campo, normalizar_serie(getattr(self, campo)))

    def serie(self, campo: str) -> List[float]:
        if campo not in CAMPOS_EDITAVEIS:
            raise KeyError(f"Série base desconhecida: {campo}")
        return getattr(self, campo)

    def definir_serie(self, campo: str, valores: Iterable[Any]) -> bool:
        """Substitui a série inteira. Retorna True se algo mudou."""
        nova = normalizar_serie(valores)
        if nova == self.serie(campo):
            return False
        setattr(self, campo, nova)
        return True

    def editar(self, campo: str, mes: int, valor: Any) -> bool:
        """Altera um mês. Retorna True se o valor mudou."""
        serie = self.serie(campo)
        novo = para_numero(valor)
        if serie[validar_mes(mes)] == novo:
            return False
        serie[mes] = novo
        return True

    def editar_crescimento(self, campo: str, valor: Any) -> bool:
        if campo not in ("minimo", "medio", "maximo"):
            raise KeyError(f"Percentual desconhecido: {campo}")
        novo = para_numero(valor)
        if getattr(self.crescimento, campo) == novo:
            return False
        setattr(self.crescimento, campo, novo)
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Formato do agregado 'projection' (chaves camelCase)"""
        dados = {chave: list(self.serie(campo)) for campo, chave in CAMPOS_BASE.items()}
        dados["mktComponents"] = {
            chave: list(self.serie(campo)) for campo, chave in COMPONENTES_MKT.items()
        }
        dados["growth"] = self.crescimento.to_dict()
        return dados

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'DadosBase':
        """
        Aceita o formato camelCase da API e a linha crua do banco
        (snake_case, ex: despesas_variaveis / mkt_components).
        """
        data = data if isinstance(data, dict) else {}
        valores = {}
        for campo, chave in CAMPOS_BASE.items():
            valores[campo] = data.get(chave, data.get(campo))

        componentes = como_dict(data.get("mktComponents", data.get("mkt_components")))
        for campo, chave in COMPONENTES_MKT.items():
            valores[campo] = componentes.get(chave, componentes.get(campo))

        return cls(
            crescimento=PercentuaisCrescimento.from_dict(como_dict(data.get("growth"))),
            **valores
        )
