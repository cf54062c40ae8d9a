"""
Armazenamento - Motor de Projeção
Adaptadores do repositório externo (uma categoria por chamada):
API HTTP /api/{categoria} ou tabela no Supabase
"""

from datetime import datetime
from typing import Any, Dict, Optional

import requests
import streamlit as st
from supabase import Client, create_client

from .config import (
    RPC_LIMPAR_TUDO, ROTA_LIMPAR_TUDO, TABELA_SUPABASE, TIMEOUT_HTTP,
    obter_config_api,
)
from .logger import get_logger

logger = get_logger("motor_projecao.armazenamento")


class ErroPersistencia(Exception):
    """Servidor respondeu, mas recusou a operação"""


# ============================================
# API HTTP
# ============================================

class ApiStore:
    """
    Cliente da API de projeção.
    Leituras são públicas; escritas exigem token Bearer.
    Cada chamada usa requests direto, sem Session compartilhada entre threads.
    """

    def __init__(self, base_url: str = None, token: str = None,
                 timeout: int = TIMEOUT_HTTP):
        if base_url is None or token is None:
            cfg = obter_config_api()
            base_url = base_url or cfg["base_url"]
            token = token or cfg["token"]
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout

    def _url(self, recurso: str) -> str:
        return f"{self.base_url}/api/{recurso}"

    def _headers_escrita(self) -> Dict[str, str]:
        if not self.token:
            raise ErroPersistencia("Token ausente: configure [api] token em secrets.toml")
        return {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/json",
        }

    def load(self, categoria: str) -> Optional[Dict[str, Any]]:
        url = self._url(categoria)
        logger.info("[API] GET %s", url)
        response = requests.get(url, headers={"Accept": "application/json"}, timeout=self.timeout)
        if response.status_code == 404:
            return None
        response.raise_for_status()
        return response.json()

    def save(self, categoria: str, dados: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        url = self._url(categoria)
        logger.info("[API] PUT %s", url)
        response = requests.put(url, json=dados, headers=self._headers_escrita(), timeout=self.timeout)
        response.raise_for_status()
        corpo = response.json()
        if not corpo.get("success"):
            raise ErroPersistencia(corpo.get("error") or f"Servidor recusou {categoria}")
        return corpo.get("data")

    def clear_all(self) -> None:
        url = self._url(ROTA_LIMPAR_TUDO)
        logger.info("[API] DELETE %s", url)
        response = requests.delete(url, headers=self._headers_escrita(), timeout=self.timeout)
        response.raise_for_status()
        corpo = response.json()
        if not corpo.get("success"):
            raise ErroPersistencia(corpo.get("message") or "Servidor não limpou os dados")


# ============================================
# SUPABASE
# ============================================

@st.cache_resource
def get_supabase() -> Optional[Client]:
    """Retorna cliente Supabase (cached)"""
    try:
        url = st.secrets["supabase"]["url"]
        key = st.secrets["supabase"]["key"]
        return create_client(url, key)
    except Exception as e:
        logger.error("[SUPABASE] Erro ao conectar: %s", e)
        return None


class SupabaseStore:
    """
    Uma linha por categoria na tabela `projecao_categorias`
    (colunas: categoria, data jsonb, updated_at).
    A limpeza total é uma função no banco, executada numa transação.
    """

    def __init__(self, client: Client = None, tabela: str = TABELA_SUPABASE):
        self.supabase = client if client is not None else get_supabase()
        self.tabela = tabela

    def _cliente(self) -> Client:
        if not self.supabase:
            raise ErroPersistencia("Supabase indisponível")
        return self.supabase

    def load(self, categoria: str) -> Optional[Dict[str, Any]]:
        response = self._cliente().table(self.tabela).select("*").eq("categoria", categoria).execute()
        return response.data[0].get("data") if response.data else None

    def save(self, categoria: str, dados: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        response = self._cliente().table(self.tabela).upsert({
            "categoria": categoria,
            "data": dados,
            "updated_at": datetime.now().isoformat(),
        }).execute()
        return response.data[0].get("data") if response.data else None

    def clear_all(self) -> None:
        self._cliente().rpc(RPC_LIMPAR_TUDO).execute()
