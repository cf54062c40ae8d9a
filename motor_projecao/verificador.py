"""
Verificador de Sincronização - Motor de Projeção
Diagnóstico: compara o estado em memória com o que está persistido.
Não altera nada no motor nem no servidor.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .config import (
    CATEGORIA_PROJECAO, CATEGORIAS_PERSISTIDAS, CENARIOS, MESES_ABREV, NUM_MESES,
    format_currency, format_number,
)
from .estruturas import CAMPOS_EDITAVEIS, arredondar
from .logger import get_logger
from .persistencia import PersistenceBridge, desserializar_categoria, desserializar_projecao

logger = get_logger("motor_projecao.verificador")


@dataclass
class Divergencia:
    """Um valor diferente entre memória e servidor"""
    serie: str
    mes: Optional[int]  # None para percentuais (sem mês)
    local: float
    persistido: float

    def descricao(self) -> str:
        if self.mes is None:
            return (f"{self.serie}: local {format_number(self.local, 2)}% "
                    f"x servidor {format_number(self.persistido, 2)}%")
        return (f"{self.serie} {MESES_ABREV[self.mes]}: local {format_currency(self.local)} "
                f"x servidor {format_currency(self.persistido)}")


@dataclass
class ResultadoVerificacao:
    categoria: str
    in_sync: bool
    diffs: List[Divergencia] = field(default_factory=list)
    erro: Optional[str] = None


def _comparar_series(nome: str, local: List[float], persistido: List[float]) -> List[Divergencia]:
    diffs = []
    for mes in range(NUM_MESES):
        a, b = arredondar(local[mes]), arredondar(persistido[mes])
        if a != b:
            diffs.append(Divergencia(nome, mes, a, b))
    return diffs


class SyncVerifier:
    """Comparação categoria a categoria"""

    def __init__(self, motor, ponte: PersistenceBridge):
        self.motor = motor
        self.ponte = ponte

    async def verify(self, categoria: str) -> ResultadoVerificacao:
        bruto = await self.ponte.load(categoria)
        if bruto is None:
            return ResultadoVerificacao(categoria, False, erro="Categoria ausente ou inacessível no servidor")

        if categoria == CATEGORIA_PROJECAO:
            diffs = self._diffs_projecao(bruto)
        else:
            local = self.motor.snapshot(categoria)
            persistido = desserializar_categoria(bruto)
            diffs = []
            for cenario in CENARIOS:
                diffs.extend(_comparar_series(cenario, local.serie(cenario), persistido.serie(cenario)))

        if diffs:
            logger.warning("[VERIFICACAO] %s com %d divergência(s)", categoria, len(diffs))
            for diff in diffs:
                logger.debug("[VERIFICACAO]   %s", diff.descricao())
        return ResultadoVerificacao(categoria, not diffs, diffs)

    def _diffs_projecao(self, bruto: Dict) -> List[Divergencia]:
        persistido, _ = desserializar_projecao(bruto)
        local = self.motor.dados

        diffs = []
        for campo in CAMPOS_EDITAVEIS:
            diffs.extend(_comparar_series(campo, local.serie(campo), persistido.serie(campo)))

        for campo in ("minimo", "medio", "maximo"):
            a = arredondar(getattr(local.crescimento, campo))
            b = arredondar(getattr(persistido.crescimento, campo))
            if a != b:
                diffs.append(Divergencia(f"growth.{campo}", None, a, b))
        return diffs

    async def verificar_todas(self) -> Dict[str, ResultadoVerificacao]:
        resultados = {}
        for categoria in [CATEGORIA_PROJECAO] + CATEGORIAS_PERSISTIDAS:
            resultados[categoria] = await self.verify(categoria)
        return resultados
