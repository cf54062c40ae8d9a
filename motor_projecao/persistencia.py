"""
Ponte de Persistência - Motor de Projeção
Serializa cada categoria no formato da API, versiona os salvamentos
e transforma qualquer falha do repositório em mensagem para o usuário.
"""

import asyncio
from typing import Any, Dict, List, Optional, Protocol, Tuple

from .config import CATEGORIA_PROJECAO, CATEGORIAS_LABEL, DESPESAS_FIXAS, MKT
from .estruturas import CAMPOS_BASE, Cenarios, DadosBase, como_dict
from .logger import get_logger
from .overrides import OverrideTracker

logger = get_logger("motor_projecao.persistencia")


class Store(Protocol):
    def load(self, categoria: str) -> Optional[Dict[str, Any]]: ...

    def save(self, categoria: str, dados: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    def clear_all(self) -> None: ...


# ============================================
# FORMATO DOS DADOS
# ============================================

def serializar_projecao(motor) -> Dict[str, Any]:
    """
    Agregado 'projection': séries base, componentes de mkt, percentuais
    e os arrays de edição manual. `mkt` espelha o previsto do Mkt.
    """
    dados = motor.dados.to_dict()
    dados["mkt"] = list(motor.derivados[MKT].previsto)
    dados["overrides"] = motor.overrides.to_dict()
    return dados


def desserializar_projecao(data: Optional[Dict]) -> Tuple[DadosBase, Optional[OverrideTracker]]:
    """Overrides = None quando o servidor não devolveu o campo"""
    data = data if isinstance(data, dict) else {}
    dados = DadosBase.from_dict(data)
    if "overrides" not in data:
        return dados, None
    return dados, OverrideTracker.from_dict(como_dict(data.get("overrides")))


def serializar_categoria(categoria: str, cenarios: Cenarios) -> Dict[str, List[float]]:
    dados = cenarios.to_dict()
    if categoria == DESPESAS_FIXAS:
        # coluna da tabela de despesas fixas se chama "media"
        return {"previsto": dados["previsto"], "media": dados["medio"], "maximo": dados["maximo"]}
    return dados


def desserializar_categoria(data: Optional[Dict]) -> Cenarios:
    return Cenarios.from_dict(data)


def canonico_valido(categoria: str, data: Any) -> bool:
    """Eco do servidor só é aplicado se trouxer os campos da categoria"""
    if not isinstance(data, dict):
        return False
    if categoria == CATEGORIA_PROJECAO:
        chaves = set(CAMPOS_BASE) | set(CAMPOS_BASE.values()) | {"growth", "mktComponents", "mkt_components"}
        return any(chave in data for chave in chaves)
    return "previsto" in data


# ============================================
# PONTE
# ============================================

class PersistenceBridge:
    """
    Acesso assíncrono ao repositório, uma categoria por chamada.

    Cada save recebe uma versão crescente por categoria. A resposta só é
    devolvida para reconciliação se nenhuma versão mais nova daquela
    categoria já tiver sido emitida ou aplicada; respostas antigas que
    chegam fora de ordem são descartadas.
    """

    def __init__(self, store: Store):
        self.store = store
        self.versao_emitida: Dict[str, int] = {}
        self.versao_aplicada: Dict[str, int] = {}
        self.status: Dict[str, str] = {}
        self.mensagens: List[str] = []

    def _mensagem(self, texto: str):
        self.mensagens.append(texto)

    @staticmethod
    def _label(categoria: str) -> str:
        return CATEGORIAS_LABEL.get(categoria, categoria)

    async def load(self, categoria: str) -> Optional[Dict[str, Any]]:
        """None = categoria ausente ou erro (usar valores zerados)"""
        try:
            dados = await asyncio.to_thread(self.store.load, categoria)
        except Exception as e:
            logger.warning("[SYNC] Falha ao carregar %s: %s", categoria, e)
            self._mensagem(f"Não foi possível carregar {self._label(categoria)}; usando valores zerados.")
            return None

        if dados is None:
            logger.info("[SYNC] %s ausente no servidor", categoria)
            return None
        if not isinstance(dados, dict):
            logger.warning("[SYNC] Formato inesperado em %s: %s", categoria, type(dados).__name__)
            return None
        return dados

    def reservar_versao(self, categoria: str) -> int:
        """
        Reserva a próxima versão da categoria. Deve ser chamado no momento
        do evento, antes de agendar o save: respostas de saves anteriores
        que ainda não foram tratadas passam a ser obsoletas na hora.
        """
        versao = self.versao_emitida.get(categoria, 0) + 1
        self.versao_emitida[categoria] = versao
        self.status[categoria] = "salvando"
        return versao

    async def save(self, categoria: str, dados: Dict[str, Any],
                   versao: Optional[int] = None) -> Optional[Dict[str, Any]]:
        """
        Salva e devolve o valor canônico a aplicar localmente.
        None = falhou ou a resposta ficou obsoleta (nada a aplicar).
        """
        if versao is None:
            versao = self.reservar_versao(categoria)

        try:
            canonico = await asyncio.to_thread(self.store.save, categoria, dados)
        except Exception as e:
            logger.error("[SYNC] Falha ao salvar %s (v%d): %s", categoria, versao, e)
            if self.versao_emitida[categoria] == versao:
                self.status[categoria] = "erro"
            self._mensagem(f"Erro ao salvar {self._label(categoria)}: alterações mantidas só localmente.")
            return None

        if versao < self.versao_emitida[categoria] or versao < self.versao_aplicada.get(categoria, 0):
            logger.info("[SYNC] Resposta obsoleta de %s descartada (v%d, atual v%d)",
                        categoria, versao, self.versao_emitida[categoria])
            return None

        self.versao_aplicada[categoria] = versao
        self.status[categoria] = "salvo"
        logger.info("[SYNC] %s salvo (v%d)", categoria, versao)
        return canonico if isinstance(canonico, dict) else dados

    def invalidar_pendentes(self):
        """Respostas de saves já enviados passam a ser tratadas como obsoletas"""
        for categoria in self.versao_emitida:
            self.versao_emitida[categoria] += 1
            if self.status.get(categoria) == "salvando":
                self.status[categoria] = "descartado"

    @property
    def salvando(self) -> bool:
        return any(s == "salvando" for s in self.status.values())

    async def clear_all(self) -> bool:
        """Limpeza total no servidor. False = nada foi limpo."""
        try:
            await asyncio.to_thread(self.store.clear_all)
        except Exception as e:
            logger.error("[SYNC] Falha na limpeza total: %s", e)
            self._mensagem("Erro ao limpar os dados da projeção no servidor; nada foi apagado.")
            return False

        logger.info("[SYNC] Limpeza total concluída no servidor")
        return True

