"""
Grafo de Dependências - Motor de Projeção
Ordem fixa de avaliação e propagação de recálculos
"""

from graphlib import TopologicalSorter
from typing import Dict, Iterable, List, Mapping, Set

from .estruturas import Cenarios, DadosBase
from .logger import get_logger
from .overrides import OverrideTracker
from .regras import REGRAS, Regra

logger = get_logger("motor_projecao.grafo")


class DependencyGraph:
    """
    DAG fixo entre séries base, percentuais e categorias derivadas.

    recompute() recebe os nós alterados (raízes ou categorias com
    células fixadas/soltas) e recalcula, em ordem topológica, todas as
    categorias alcançáveis a partir deles. O recálculo é sempre total:
    12 meses x 3 cenários de cada categoria afetada.
    """

    def __init__(self, regras: Mapping[str, Regra] = None):
        self.regras: Mapping[str, Regra] = regras if regras is not None else REGRAS

        self.dependentes: Dict[str, Set[str]] = {}
        for regra in self.regras.values():
            for entrada in regra.entradas:
                self.dependentes.setdefault(entrada, set()).add(regra.categoria)

        self.raizes: Set[str] = set(self.dependentes) - set(self.regras)

        grafo = {
            cat: [e for e in regra.entradas if e in self.regras]
            for cat, regra in self.regras.items()
        }
        # static_order levanta CycleError se alguém quebrar o DAG
        self.ordem: List[str] = list(TopologicalSorter(grafo).static_order())

    @property
    def categorias(self) -> List[str]:
        return list(self.ordem)

    def afetados(self, alterados: Iterable[str]) -> List[str]:
        """Categorias a recalcular, em ordem topológica"""
        pendentes = []
        for no in alterados:
            if no not in self.regras and no not in self.raizes:
                raise KeyError(f"Nó desconhecido no grafo: {no}")
            pendentes.append(no)

        sujos: Set[str] = {no for no in pendentes if no in self.regras}
        while pendentes:
            no = pendentes.pop()
            for dependente in self.dependentes.get(no, ()):
                if dependente not in sujos:
                    sujos.add(dependente)
                    pendentes.append(dependente)

        return [cat for cat in self.ordem if cat in sujos]

    def recompute(self, alterados: Iterable[str], dados: DadosBase,
                  derivados: Dict[str, Cenarios], tracker: OverrideTracker) -> List[str]:
        """
        Recalcula as categorias afetadas e atualiza `derivados` no lugar.

        Returns:
            Categorias cujo valor mudou (em ordem topológica)
        """
        mudaram = []
        for categoria in self.afetados(alterados):
            regra = self.regras[categoria]
            novo = regra.calcular(categoria, dados, derivados, tracker)
            if derivados.get(categoria) != novo:
                derivados[categoria] = novo
                mudaram.append(categoria)

        if mudaram:
            logger.info("[RECALC] Categorias alteradas: %s", ", ".join(mudaram))
        return mudaram
