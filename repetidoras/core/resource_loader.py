"""
Carregador de recursos JSON com fallback entre fontes.

Cada fonte é tentada em ordem; a primeira que retorna JSON válido vence.
Caminhos locais e URLs usam estratégias diferentes, escolhidas pelo esquema.
"""
import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import requests

logger = logging.getLogger(__name__)

REGEX_PROTOCOL = re.compile(r'^\s*[a-zA-Z]+://')


class SourceUnavailableError(RuntimeError):
    """Nenhuma das fontes candidatas pôde ser carregada."""

    def __init__(self, sources: Sequence[str]):
        super().__init__("Não foi possível carregar nenhum arquivo")
        self.sources = list(sources)


class LocalFileFetcher:
    """Lê JSON do disco, tentando o caminho e variações relativas."""

    def __init__(self, root: Optional[Union[str, Path]] = None):
        self.root = Path(root) if root else Path.cwd()

    def candidates(self, source: str) -> List[Path]:
        paths = [Path(source)]
        if not os.path.isabs(source):
            paths += [Path('.') / source, Path('..') / source, Path('../..') / source]
            paths.append(self.root / source)

        seen = set()
        unique = []
        for p in paths:
            key = os.path.normpath(str(p))
            if key not in seen:
                seen.add(key)
                unique.append(p)
        return unique

    def fetch(self, source: str) -> Any:
        for path in self.candidates(source):
            if path.is_file():
                with open(path, "r", encoding="utf-8") as f:
                    return json.load(f)
        raise FileNotFoundError(f"File not found: {source}")


class HttpFetcher:
    """Baixa JSON via HTTP(S)."""

    def __init__(self, timeout: float = 15.0, session: Optional[requests.Session] = None):
        self.timeout = timeout
        self._http = session or requests

    def fetch(self, source: str) -> Any:
        response = self._http.get(source, timeout=self.timeout)
        response.raise_for_status()
        return response.json()


class ResourceLoader:
    """
    Implementa load(sources, cache_key) -> JSON.

    O resultado fica guardado em memória sob cache_key durante a vida
    do processo; chamadas seguintes não tocam disco nem rede.
    """

    def __init__(
            self,
            local: Optional[LocalFileFetcher] = None,
            remote: Optional[HttpFetcher] = None
    ):
        self.local = local or LocalFileFetcher()
        self.remote = remote or HttpFetcher()
        self._store: Dict[str, Any] = {}

    def fetcher_for(self, source: str):
        return self.remote if REGEX_PROTOCOL.match(source) else self.local

    def load(self, sources: Union[str, Iterable[str]], cache_key: str) -> Any:
        if cache_key in self._store:
            return self._store[cache_key]

        source_list = [sources] if isinstance(sources, str) else list(sources)

        for source in source_list:
            try:
                data = self.fetcher_for(source).fetch(source)
            except (OSError, ValueError, requests.RequestException) as e:
                logger.warning("Falha ao carregar '%s': %s", source, e)
                continue

            if data is not None:
                self._store[cache_key] = data
                return data

        raise SourceUnavailableError(source_list)

    def clear(self, cache_key: Optional[str] = None) -> None:
        if cache_key is None:
            self._store.clear()
        else:
            self._store.pop(cache_key, None)
