import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence, Union

import requests

from .text_normalizer import normalize_name

logger = logging.getLogger(__name__)


class CityIndexError(RuntimeError):
    """Base de municípios indisponível ou em formato inesperado."""


class StaticCityNameIndex:
    """Base fixa em memória (fixtures de teste, overrides da API)."""

    def __init__(self, names: Sequence[str]):
        self._names = [normalize_name(n) for n in names]

    def load(self) -> List[str]:
        return self._names


class CityNameIndex:
    """
    Lista oficial de municípios com cache local.

    Carregada no primeiro uso: baixa da fonte remota quando o cache local
    não existe ou quando o último commit do arquivo remoto é mais novo
    que o mtime do cache. Chamadas concorrentes compartilham a mesma carga.
    Falhas não ficam memorizadas (a próxima chamada tenta de novo).
    """

    def __init__(
            self,
            cache_path: Union[str, Path],
            source_url: str,
            commits_url: Optional[str] = None,
            timeout: float = 15.0,
            session: Optional[requests.Session] = None
    ):
        self.cache_path = Path(cache_path)
        self.source_url = source_url
        self.commits_url = commits_url
        self.timeout = timeout
        self._http = session or requests
        self._cache: Optional[List[str]] = None
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, settings) -> "CityNameIndex":
        return cls(
            cache_path=settings.cities_cache_file,
            source_url=settings.CITIES_URL,
            commits_url=settings.CITIES_COMMITS_URL,
            timeout=settings.HTTP_TIMEOUT,
        )

    def load(self) -> List[str]:
        if self._cache is not None:
            return self._cache

        with self._lock:
            # Outra chamada pode ter concluído a carga enquanto esperávamos
            if self._cache is not None:
                return self._cache

            try:
                if not self.needs_download() and self.cache_path.exists():
                    logger.info("Carregando cidades do cache local: %s", self.cache_path)
                    cities = self._load_local()
                else:
                    logger.info("Baixando lista de cidades de %s", self.source_url)
                    cities = self._download_and_persist()
            except Exception:
                logger.exception("Erro ao carregar cidades")
                raise

            self._cache = cities
            return cities

    def needs_download(self) -> bool:
        """True quando não há cache local ou a fonte remota é mais nova."""
        if not self.cache_path.exists():
            return True
        if not self.commits_url:
            return False

        try:
            response = self._http.get(self.commits_url, timeout=self.timeout)
            response.raise_for_status()
            commits = response.json()
            if not isinstance(commits, list) or not commits:
                return False

            committed_at = commits[0]["commit"]["committer"]["date"]
            remote_time = datetime.fromisoformat(committed_at.replace("Z", "+00:00"))
            local_time = datetime.fromtimestamp(self.cache_path.stat().st_mtime, tz=timezone.utc)
        except (requests.RequestException, ValueError, KeyError, TypeError) as e:
            logger.warning("Não foi possível verificar atualizações, usando cache local: %s", e)
            return False

        if remote_time > local_time:
            logger.info("Versão mais recente disponível no repositório")
            return True

        logger.info("Cache local já está atualizado")
        return False

    def _load_local(self) -> List[str]:
        with open(self.cache_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def _download_and_persist(self) -> List[str]:
        response = self._http.get(self.source_url, timeout=self.timeout)
        response.raise_for_status()
        data = response.json()

        if not isinstance(data, list):
            raise CityIndexError("Falha ao baixar dados de cidades")

        cities = [normalize_name(item["nome"]) for item in data if item.get("nome")]

        self.cache_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.cache_path, "w", encoding="utf-8") as f:
            json.dump(cities, f, indent=2, ensure_ascii=False)
        logger.info("Lista de cidades salva em: %s", self.cache_path)

        return cities
