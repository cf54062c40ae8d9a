"""
Sessão de Projeção
Liga o motor síncrono à persistência assíncrona (asyncio, uma thread).
Cada evento do usuário roda o recálculo completo antes de qualquer save.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from .config import CATEGORIA_PROJECAO, CATEGORIAS_PERSISTIDAS, JANELA_DEBOUNCE
from .logger import get_logger
from .motor import MotorProjecao
from .overrides import OverrideTracker
from .persistencia import (
    PersistenceBridge, canonico_valido, desserializar_categoria,
    desserializar_projecao, serializar_categoria, serializar_projecao,
)

logger = get_logger("motor_projecao.sessao")


class SessaoProjecao:
    """
    Controlador de eventos da projeção.

    Edições diretas do usuário são salvas com debounce por célula;
    categorias recalculadas em cascata são salvas na hora. A resposta
    do servidor vence o estado local daquela categoria, exceto quando
    já existe edição local mais nova esperando para ser enviada.
    """

    def __init__(self, ponte: PersistenceBridge, motor: Optional[MotorProjecao] = None,
                 janela_debounce: float = JANELA_DEBOUNCE):
        self.ponte = ponte
        self.motor = motor if motor is not None else MotorProjecao()
        self.janela_debounce = janela_debounce
        self._debounces: Dict[Tuple, asyncio.Task] = {}
        self._tarefas: Set[asyncio.Task] = set()
        self._limpando = False

    @property
    def mensagens(self) -> List[str]:
        return self.ponte.mensagens

    @property
    def salvando(self) -> bool:
        return bool(self._debounces) or self.ponte.salvando

    # ============================================
    # CARGA INICIAL
    # ============================================

    async def carregar(self) -> List[str]:
        """
        Carrega todas as categorias (falhas viram valores zerados),
        recalcula tudo e salva o que divergiu das fórmulas.
        """
        categorias = [CATEGORIA_PROJECAO] + CATEGORIAS_PERSISTIDAS
        respostas = await asyncio.gather(*(self.ponte.load(cat) for cat in categorias))
        brutos = dict(zip(categorias, respostas))

        dados, overrides = desserializar_projecao(brutos[CATEGORIA_PROJECAO])
        derivados = {
            cat: desserializar_categoria(bruto)
            for cat, bruto in brutos.items()
            if cat != CATEGORIA_PROJECAO and bruto is not None
        }

        mudaram = self.motor.carregar_estado(dados, overrides or OverrideTracker(), derivados)
        logger.info("[CARGA] %d categorias carregadas, %d divergentes das fórmulas",
                    len(derivados), len(mudaram))
        self._salvar_cascata(mudaram)
        return mudaram

    # ============================================
    # EDIÇÕES DO USUÁRIO
    # ============================================

    def editar_base(self, campo: str, mes: int, valor: Any) -> List[str]:
        if self._edicao_bloqueada():
            return []
        antes = serializar_projecao(self.motor)
        mudaram = self.motor.editar_base(campo, mes, valor)
        self._apos_edicao(("base", campo, mes), antes, mudaram)
        return mudaram

    def definir_serie_base(self, campo: str, valores: Iterable[Any]) -> List[str]:
        if self._edicao_bloqueada():
            return []
        antes = serializar_projecao(self.motor)
        mudaram = self.motor.definir_serie_base(campo, valores)
        self._apos_edicao(("serie", campo), antes, mudaram)
        return mudaram

    def editar_crescimento(self, campo: str, valor: Any) -> List[str]:
        if self._edicao_bloqueada():
            return []
        antes = serializar_projecao(self.motor)
        mudaram = self.motor.editar_crescimento(campo, valor)
        self._apos_edicao(("crescimento", campo), antes, mudaram)
        return mudaram

    def editar_celula(self, categoria: str, cenario: str, mes: int, valor: Any) -> List[str]:
        """Edição manual de célula derivada (fica fixada até limpar tudo)"""
        if self._edicao_bloqueada():
            return []
        antes = serializar_projecao(self.motor)
        mudaram = self.motor.set_override(categoria, cenario, mes, valor)
        self._apos_edicao(("celula", categoria, cenario, mes), antes, mudaram, direta=categoria)
        return mudaram

    def _edicao_bloqueada(self) -> bool:
        # durante a limpeza nenhum save novo pode chegar ao servidor depois dela
        if not self._limpando:
            return False
        logger.warning("[EDICAO] Ignorada: limpeza total em andamento")
        self.ponte.mensagens.append("Limpeza em andamento; a edição foi ignorada.")
        return True

    def _apos_edicao(self, celula: Tuple, antes: Dict[str, Any], mudaram: List[str],
                     direta: Optional[str] = None):
        if serializar_projecao(self.motor) != antes:
            self._agendar_debounce(CATEGORIA_PROJECAO, celula)
        for categoria in mudaram:
            if categoria not in CATEGORIAS_PERSISTIDAS:
                continue
            if categoria == direta:
                self._agendar_debounce(categoria, celula)
            else:
                self._salvar_agora(categoria)

    # ============================================
    # LIMPEZA TOTAL
    # ============================================

    async def limpar_tudo(self) -> bool:
        """
        Limpa o servidor primeiro; o estado local só é zerado se deu certo.
        Saves pendentes terminam antes, para nenhum chegar depois da limpeza,
        e edições feitas enquanto ela roda são recusadas.
        """
        self._limpando = True
        try:
            await self.aguardar_pendentes()
            if not await self.ponte.clear_all():
                return False

            self.ponte.invalidar_pendentes()
            self.motor.limpar_tudo()
            return True
        finally:
            self._limpando = False

    # ============================================
    # AGENDAMENTO DOS SAVES
    # ============================================

    def _rastrear(self, coro) -> asyncio.Task:
        tarefa = asyncio.ensure_future(coro)
        self._tarefas.add(tarefa)
        tarefa.add_done_callback(self._tarefas.discard)
        return tarefa

    def _agendar_debounce(self, categoria: str, celula: Tuple):
        chave = (categoria,) + celula
        anterior = self._debounces.pop(chave, None)
        if anterior is not None:
            anterior.cancel()
        versao = self.ponte.reservar_versao(categoria)
        self._debounces[chave] = self._rastrear(self._salvar_apos_janela(chave, categoria, versao))

    async def _salvar_apos_janela(self, chave: Tuple, categoria: str, versao: int):
        await asyncio.sleep(self.janela_debounce)
        self._debounces.pop(chave, None)
        await self._salvar(categoria, versao=versao)

    def _salvar_agora(self, categoria: str):
        # payload congelado no momento do evento
        versao = self.ponte.reservar_versao(categoria)
        self._rastrear(self._salvar(categoria, self._serializar(categoria), versao))

    def _salvar_cascata(self, categorias: Iterable[str]):
        for categoria in categorias:
            if categoria in CATEGORIAS_PERSISTIDAS:
                self._salvar_agora(categoria)

    def _debounce_pendente(self, categoria: str) -> bool:
        return any(chave[0] == categoria for chave in self._debounces)

    def _serializar(self, categoria: str) -> Dict[str, Any]:
        if categoria == CATEGORIA_PROJECAO:
            return serializar_projecao(self.motor)
        return serializar_categoria(categoria, self.motor.snapshot(categoria))

    async def _salvar(self, categoria: str, dados: Optional[Dict[str, Any]] = None,
                      versao: Optional[int] = None):
        if dados is None:
            dados = self._serializar(categoria)
        canonico = await self.ponte.save(categoria, dados, versao)
        if canonico is None or self._debounce_pendente(categoria):
            return
        self._reconciliar(categoria, canonico)

    def _reconciliar(self, categoria: str, canonico: Dict[str, Any]):
        if not canonico_valido(categoria, canonico):
            logger.warning("[SYNC] Eco de %s sem dados reconhecíveis; mantendo estado local", categoria)
            return

        if categoria == CATEGORIA_PROJECAO:
            dados, overrides = desserializar_projecao(canonico)
            self._salvar_cascata(self.motor.aplicar_dados_base(dados, overrides))
        elif self.motor.aplicar_canonico(categoria, desserializar_categoria(canonico)):
            logger.info("[SYNC] %s atualizado com o valor do servidor", categoria)

    async def aguardar_pendentes(self):
        """Espera todos os saves (inclusive os em debounce) terminarem"""
        while self._tarefas:
            await asyncio.gather(*list(self._tarefas), return_exceptions=True)
