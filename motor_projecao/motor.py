"""
Motor de Projeção - Núcleo de cálculo
Mantém séries base, edições manuais e o cache das categorias derivadas
"""

from typing import Any, Dict, Iterable, List, Optional

from .estruturas import Cenarios, DadosBase, validar_cenario, validar_mes
from .grafo import DependencyGraph
from .logger import get_logger
from .overrides import OverrideTracker
from .regras import CRESCIMENTO

logger = get_logger("motor_projecao.motor")


class MotorProjecao:
    """
    Motor de cálculo da projeção anual.

    Toda mutação (série base, percentual, célula fixada, limpeza) roda o
    recálculo em cascata de forma síncrona e devolve a lista de categorias
    derivadas que mudaram, para o chamador decidir o que persistir.
    """

    def __init__(self, dados: Optional[DadosBase] = None,
                 overrides: Optional[OverrideTracker] = None):
        self.dados = dados if dados is not None else DadosBase()
        self.overrides = overrides if overrides is not None else OverrideTracker()
        self.grafo = DependencyGraph()
        self.derivados: Dict[str, Cenarios] = {cat: Cenarios() for cat in self.grafo.ordem}
        self.recalcular_tudo()

    # ============================================
    # RECÁLCULO
    # ============================================

    def recompute(self, alterados: Iterable[str]) -> List[str]:
        """Recalcula tudo que depende dos nós alterados"""
        return self.grafo.recompute(alterados, self.dados, self.derivados, self.overrides)

    def recalcular_tudo(self) -> List[str]:
        return self.recompute(sorted(self.grafo.raizes) + self.grafo.ordem)

    # ============================================
    # LEITURA
    # ============================================

    @property
    def categorias(self) -> List[str]:
        return self.grafo.categorias

    def _validar_categoria(self, categoria: str) -> str:
        if categoria not in self.derivados:
            raise KeyError(f"Categoria derivada desconhecida: {categoria}")
        return categoria

    def snapshot(self, categoria: str) -> Cenarios:
        """Cópia do estado atual de uma categoria derivada"""
        return self.derivados[self._validar_categoria(categoria)].copia()

    def valor(self, categoria: str, cenario: str, mes: int) -> float:
        cenarios = self.derivados[self._validar_categoria(categoria)]
        return cenarios.serie(cenario)[validar_mes(mes)]

    def is_overridden(self, categoria: str, cenario: str, mes: int) -> bool:
        return self.overrides.is_overridden(categoria, cenario, mes)

    # ============================================
    # MUTAÇÕES DO USUÁRIO
    # ============================================

    def editar_base(self, campo: str, mes: int, valor: Any) -> List[str]:
        """Edita um mês de uma série base"""
        if not self.dados.editar(campo, mes, valor):
            return []
        return self.recompute([campo])

    def definir_serie_base(self, campo: str, valores: Iterable[Any]) -> List[str]:
        """Substitui uma série base inteira"""
        if not self.dados.definir_serie(campo, valores):
            return []
        return self.recompute([campo])

    def editar_crescimento(self, campo: str, valor: Any) -> List[str]:
        """Edita um dos percentuais (minimo, medio, maximo)"""
        if not self.dados.editar_crescimento(campo, valor):
            return []
        return self.recompute([CRESCIMENTO])

    def set_override(self, categoria: str, cenario: str, mes: int, valor: Any) -> List[str]:
        """Fixa manualmente uma célula de categoria derivada"""
        self._validar_categoria(categoria)
        validar_cenario(cenario)
        if not self.overrides.set_override(categoria, cenario, mes, valor):
            return []
        logger.info("[EDICAO] %s/%s/%d fixado em %s", categoria, cenario, mes,
                    self.overrides.get(categoria, cenario, mes))
        return self.recompute([categoria])

    def limpar_tudo(self) -> List[str]:
        """
        Zera séries base, percentuais e todas as edições manuais.
        Só deve ser chamado depois que a limpeza no servidor deu certo.
        """
        self.dados = DadosBase()
        self.overrides.clear_all()
        logger.info("[LIMPEZA] Estado local zerado")
        return self.recalcular_tudo()

    # ============================================
    # ESTADO VINDO DA PERSISTÊNCIA
    # ============================================

    def carregar_estado(self, dados: DadosBase, overrides: OverrideTracker,
                        derivados: Optional[Dict[str, Cenarios]] = None) -> List[str]:
        """
        Substitui o estado completo (carga inicial).
        Os derivados persistidos só servem de cache: o recálculo total
        sobrescreve o que divergir das fórmulas.
        """
        self.dados = dados
        self.overrides = self._filtrar_overrides(overrides)
        for categoria, cenarios in (derivados or {}).items():
            if categoria in self.derivados:
                self.derivados[categoria] = cenarios.copia()
        return self.recalcular_tudo()

    def aplicar_dados_base(self, dados: DadosBase, overrides: Optional[OverrideTracker] = None) -> List[str]:
        """Aplica dados base canônicos devolvidos pelo servidor"""
        mesmo_estado = dados == self.dados
        if overrides is not None:
            overrides = self._filtrar_overrides(overrides)
            mesmo_estado = mesmo_estado and list(overrides) == list(self.overrides)
        if mesmo_estado:
            return []

        self.dados = dados
        if overrides is not None:
            self.overrides = overrides
        return self.recalcular_tudo()

    def aplicar_canonico(self, categoria: str, cenarios: Cenarios) -> bool:
        """Valor devolvido pelo servidor vence o cache local da categoria"""
        self._validar_categoria(categoria)
        if self.derivados[categoria] == cenarios:
            return False
        self.derivados[categoria] = cenarios.copia()
        return True

    def _filtrar_overrides(self, overrides: OverrideTracker) -> OverrideTracker:
        """Descarta edições de categorias que o motor não conhece"""
        filtrado = OverrideTracker()
        for (categoria, cenario, mes), valor in overrides:
            if categoria in self.derivados:
                filtrado.set_override(categoria, cenario, mes, valor)
            else:
                logger.warning("[EDICAO] Categoria ignorada ao carregar edições: %s", categoria)
        return filtrado
