"""
Configurações do Motor de Projeção
Projeção anual com cenários Previsto / Médio / Máximo
"""

import os
from typing import Dict, Optional

# Configurações do sistema
APP_NAME = "Motor de Projeção"
APP_VERSION = "1.4.0"
APP_SUBTITLE = "Projeção Anual | Receitas, Despesas e Resultado"

# Meses
MESES = [
    "Janeiro", "Fevereiro", "Março", "Abril", "Maio", "Junho",
    "Julho", "Agosto", "Setembro", "Outubro", "Novembro", "Dezembro"
]

MESES_ABREV = ["Jan", "Fev", "Mar", "Abr", "Mai", "Jun",
               "Jul", "Ago", "Set", "Out", "Nov", "Dez"]

NUM_MESES = 12

# Trimestres: (rótulo, mês inicial, mês final) - inclusivo
TRIMESTRES = [
    ("1 TRI", 0, 2),
    ("2 TRI", 3, 5),
    ("3 TRI", 6, 8),
    ("4 TRI", 9, 11),
]

# Cenários
CENARIOS = ["previsto", "medio", "maximo"]

CENARIOS_LABEL = {
    "previsto": "Previsto",
    "medio": "Médio",
    "maximo": "Máximo",
}

# Previsto usa o percentual MÍNIMO (nomenclatura do negócio)
CRESCIMENTO_POR_CENARIO = {
    "previsto": "minimo",
    "medio": "medio",
    "maximo": "maximo",
}

# ============================================
# CATEGORIAS (chaves compatíveis com a API)
# ============================================

CATEGORIA_PROJECAO = "projection"

DESPESAS_FIXAS = "fixed-expenses"
DESPESAS_VARIAVEIS = "variable-expenses"
MKT = "mkt"
INVESTIMENTOS = "investments"
FATURAMENTO_REURB = "faturamento-reurb"
FATURAMENTO_GEO = "faturamento-geo"
FATURAMENTO_PLAN = "faturamento-plan"
FATURAMENTO_REG = "faturamento-reg"
FATURAMENTO_NN = "faturamento-nn"
FATURAMENTO_TOTAL = "faturamento-total"
BUDGET = "budget"
RESULTADO = "resultado"

# Fixas + Variáveis: só existe em memória, não tem endpoint próprio
DESPESAS_TOTAIS = "despesas-totais"

FATURAMENTOS = [
    FATURAMENTO_REURB,
    FATURAMENTO_GEO,
    FATURAMENTO_PLAN,
    FATURAMENTO_REG,
    FATURAMENTO_NN,
]

# Categorias persistidas individualmente (uma por recurso)
CATEGORIAS_PERSISTIDAS = [
    DESPESAS_FIXAS,
    DESPESAS_VARIAVEIS,
    MKT,
    INVESTIMENTOS,
    *FATURAMENTOS,
    FATURAMENTO_TOTAL,
    BUDGET,
    RESULTADO,
]

CATEGORIAS_LABEL = {
    DESPESAS_TOTAIS: "Despesas Totais",
    DESPESAS_VARIAVEIS: "Despesas Variáveis",
    DESPESAS_FIXAS: "Despesas Fixas",
    INVESTIMENTOS: "Investimentos",
    MKT: "Mkt",
    FATURAMENTO_REURB: "Faturamento REURB",
    FATURAMENTO_GEO: "Faturamento GEO",
    FATURAMENTO_PLAN: "Faturamento PLAN",
    FATURAMENTO_REG: "Faturamento REG",
    FATURAMENTO_NN: "Faturamento NN",
    FATURAMENTO_TOTAL: "Faturamento Total",
    BUDGET: "Orçamento",
    RESULTADO: "Resultado",
}

# ============================================
# PARÂMETROS DE CÁLCULO
# ============================================

FATOR_DEGRAU_FIXAS = 1.10  # 10% a cada trimestre
CASAS_DECIMAIS = 2

# ============================================
# PERSISTÊNCIA
# ============================================

JANELA_DEBOUNCE = 0.5  # segundos entre teclas na mesma célula
TIMEOUT_HTTP = 15
TABELA_SUPABASE = "projecao_categorias"
RPC_LIMPAR_TUDO = "limpar_dados_projecao"
ROTA_LIMPAR_TUDO = "clear-all-projection-data"


def _ler_secret(secao: str, chave: str) -> Optional[str]:
    """Lê valor de .streamlit/secrets.toml (None se não houver)"""
    try:
        import streamlit as st
        return st.secrets[secao][chave]
    except Exception:
        return None


def obter_config_api() -> Dict[str, Optional[str]]:
    """
    Retorna URL base e token da API de projeção.
    Ordem: secrets.toml [api] e depois variáveis de ambiente.
    """
    base_url = _ler_secret("api", "base_url") or os.getenv("PROJECAO_API_URL", "http://localhost:3001")
    token = _ler_secret("api", "token") or os.getenv("PROJECAO_API_TOKEN")
    return {"base_url": base_url, "token": token}


# Formatação de valores
def format_currency(value, prefix="R$ "):
    """Formata valor como moeda brasileira"""
    if value is None or (isinstance(value, float) and str(value) == 'nan'):
        return "-"
    try:
        return f"{prefix}{value:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    except (TypeError, ValueError):
        return "-"


def format_number(value, decimals=0):
    """Formata número com separador de milhar"""
    if value is None or (isinstance(value, float) and str(value) == 'nan'):
        return "-"
    try:
        return f"{value:,.{decimals}f}".replace(",", "X").replace(".", ",").replace("X", ".")
    except (TypeError, ValueError):
        return "-"
