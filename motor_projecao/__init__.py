"""
Motor de Projeção
=================

Projeção anual em três cenários (Previsto / Médio / Máximo) com
recálculo em cascata, células fixadas manualmente e persistência
por categoria (API HTTP ou Supabase).

Uso básico:
-----------
    from motor_projecao import MotorProjecao

    motor = MotorProjecao()
    motor.definir_serie_base("despesas_variaveis", [1000] * 12)
    motor.editar_crescimento("minimo", 10)
    motor.valor("variable-expenses", "previsto", 0)   # 1100.0

    # Fixar uma célula (só sai com limpar_tudo)
    motor.set_override("variable-expenses", "previsto", 0, 5000)

Com persistência:
-----------------
    import asyncio
    from motor_projecao import ApiStore, PersistenceBridge, SessaoProjecao

    async def main():
        sessao = SessaoProjecao(PersistenceBridge(ApiStore()))
        await sessao.carregar()
        sessao.editar_base("faturamento_geo", 0, 25000)
        await sessao.aguardar_pendentes()

    asyncio.run(main())

Configuração (.streamlit/secrets.toml):
---------------------------------------
    [api]
    base_url = "https://seu-servidor"
    token = "..."

    [supabase]
    url = "https://xxxx.supabase.co"
    key = "..."
"""

from .config import APP_VERSION

from .estruturas import (
    Cenarios,
    DadosBase,
    PercentuaisCrescimento,
)

from .overrides import OverrideTracker
from .grafo import DependencyGraph
from .motor import MotorProjecao

from .armazenamento import (
    ApiStore,
    SupabaseStore,
    ErroPersistencia,
)

from .persistencia import (
    PersistenceBridge,
    serializar_projecao,
    serializar_categoria,
)

from .sessao import SessaoProjecao
from .verificador import SyncVerifier, ResultadoVerificacao, Divergencia
from .relatorios import tabela_projecao
from .excel_export import exportar_projecao_excel

__version__ = APP_VERSION

__all__ = [
    # Núcleo de cálculo
    'MotorProjecao',
    'DependencyGraph',
    'OverrideTracker',

    # Estruturas
    'Cenarios',
    'DadosBase',
    'PercentuaisCrescimento',

    # Persistência
    'ApiStore',
    'SupabaseStore',
    'ErroPersistencia',
    'PersistenceBridge',
    'SessaoProjecao',
    'SyncVerifier',
    'ResultadoVerificacao',
    'Divergencia',
    'serializar_projecao',
    'serializar_categoria',

    # Relatórios
    'tabela_projecao',
    'exportar_projecao_excel',
]
