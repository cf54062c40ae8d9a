"""
Edições Manuais - Motor de Projeção
Células fixadas pelo usuário: (categoria, cenário, mês) -> valor
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple

from .config import CENARIOS, NUM_MESES
from .estruturas import para_numero, validar_cenario, validar_mes

Chave = Tuple[str, str, int]


class OverrideTracker:
    """
    Registro de células editadas manualmente.

    Uma célula registrada sempre devolve o valor fixado, independente
    do que mudar nas entradas da fórmula. O único caminho para soltar
    uma célula é clear_all().
    """

    def __init__(self):
        self._valores: Dict[Chave, float] = {}

    def set_override(self, categoria: str, cenario: str, mes: int, valor: Any) -> bool:
        """Fixa o valor da célula. Retorna True se o estado mudou."""
        chave = (categoria, validar_cenario(cenario), validar_mes(mes))
        # valor fixado é devolvido como veio, sem arredondar
        novo = para_numero(valor)
        if chave in self._valores and self._valores[chave] == novo:
            return False
        self._valores[chave] = novo
        return True

    def is_overridden(self, categoria: str, cenario: str, mes: int) -> bool:
        return (categoria, cenario, mes) in self._valores

    def get(self, categoria: str, cenario: str, mes: int) -> Optional[float]:
        return self._valores.get((categoria, cenario, mes))

    def clear_all(self) -> None:
        # Troca o dicionário inteiro: nenhum leitor vê um estado parcial
        self._valores = {}

    def categorias(self) -> List[str]:
        """Categorias com pelo menos uma célula fixada"""
        return sorted({chave[0] for chave in self._valores})

    def __iter__(self) -> Iterator[Tuple[Chave, float]]:
        return iter(sorted(self._valores.items()))

    def __len__(self) -> int:
        return len(self._valores)

    # ============================================
    # SERIALIZAÇÃO (arrays de edição manual)
    # ============================================

    def to_dict(self) -> Dict[str, Dict[str, List[Optional[float]]]]:
        """
        {categoria: {cenario: [valor ou None x 12]}}
        Só inclui categorias que têm células fixadas.
        """
        dados: Dict[str, Dict[str, List[Optional[float]]]] = {}
        for (categoria, cenario, mes), valor in self._valores.items():
            por_cenario = dados.setdefault(
                categoria, {c: [None] * NUM_MESES for c in CENARIOS}
            )
            por_cenario[cenario][mes] = valor
        return dados

    @classmethod
    def from_dict(cls, data: Optional[Dict]) -> 'OverrideTracker':
        """Reconstrói o registro; entradas malformadas são ignoradas"""
        tracker = cls()
        if not isinstance(data, dict):
            return tracker

        for categoria, por_cenario in data.items():
            if not isinstance(por_cenario, dict):
                continue
            for cenario in CENARIOS:
                valores = por_cenario.get(cenario)
                if not isinstance(valores, list):
                    continue
                for mes, valor in enumerate(valores[:NUM_MESES]):
                    if valor is None:
                        continue
                    tracker.set_override(categoria, cenario, mes, valor)
        return tracker
