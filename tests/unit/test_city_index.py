import json
import os
import threading
import time

import pytest
import requests
from unittest.mock import MagicMock, patch

from repetidoras.core.city_index import CityIndexError, CityNameIndex, StaticCityNameIndex

pytestmark = pytest.mark.unit

SOURCE_URL = "https://example.org/municipios.json"
COMMITS_URL = "https://example.org/commits"


def _response(payload):
    response = MagicMock()
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def cache_file(tmp_path):
    return tmp_path / "cidades" / "brasil.cidades.json"


def test_base_estatica_normaliza_nomes():
    index = StaticCityNameIndex(["São Paulo", " Ribeirão Preto "])
    assert index.load() == ["sao paulo", "ribeirao preto"]


def test_sem_cache_baixa_e_persiste(cache_file):
    index = CityNameIndex(cache_file, SOURCE_URL)

    with patch("repetidoras.core.city_index.requests.get") as mock_get:
        mock_get.return_value = _response([{"nome": "São Paulo"}, {"nome": "Campinas"}])
        cities = index.load()

    assert cities == ["sao paulo", "campinas"]
    assert json.loads(cache_file.read_text(encoding="utf-8")) == ["sao paulo", "campinas"]
    mock_get.assert_called_once_with(SOURCE_URL, timeout=15.0)


def test_carga_memorizada(cache_file):
    index = CityNameIndex(cache_file, SOURCE_URL)

    with patch("repetidoras.core.city_index.requests.get") as mock_get:
        mock_get.return_value = _response([{"nome": "Santos"}])
        first = index.load()
        second = index.load()

    assert first is second
    assert mock_get.call_count == 1


def test_cache_local_sem_verificacao_remota(cache_file):
    cache_file.parent.mkdir(parents=True)
    cache_file.write_text(json.dumps(["santos"]), encoding="utf-8")
    index = CityNameIndex(cache_file, SOURCE_URL)

    with patch("repetidoras.core.city_index.requests.get") as mock_get:
        assert index.load() == ["santos"]

    mock_get.assert_not_called()


def test_commit_remoto_mais_novo_forca_download(cache_file):
    cache_file.parent.mkdir(parents=True)
    cache_file.write_text(json.dumps(["velha"]), encoding="utf-8")
    os.utime(cache_file, (0, 0))

    def fake_get(url, timeout):
        if url == COMMITS_URL:
            return _response([{"commit": {"committer": {"date": "2024-01-01T00:00:00Z"}}}])
        return _response([{"nome": "Nova Cidade"}])

    index = CityNameIndex(cache_file, SOURCE_URL, commits_url=COMMITS_URL)
    with patch("repetidoras.core.city_index.requests.get", side_effect=fake_get):
        assert index.load() == ["nova cidade"]


def test_cache_atualizado_nao_baixa(cache_file):
    cache_file.parent.mkdir(parents=True)
    cache_file.write_text(json.dumps(["santos"]), encoding="utf-8")

    commits = _response([{"commit": {"committer": {"date": "2000-01-01T00:00:00Z"}}}])
    index = CityNameIndex(cache_file, SOURCE_URL, commits_url=COMMITS_URL)
    with patch("repetidoras.core.city_index.requests.get", return_value=commits) as mock_get:
        assert index.load() == ["santos"]

    mock_get.assert_called_once_with(COMMITS_URL, timeout=15.0)


def test_falha_na_verificacao_usa_cache(cache_file):
    cache_file.parent.mkdir(parents=True)
    cache_file.write_text(json.dumps(["santos"]), encoding="utf-8")

    index = CityNameIndex(cache_file, SOURCE_URL, commits_url=COMMITS_URL)
    with patch("repetidoras.core.city_index.requests.get",
               side_effect=requests.ConnectionError("offline")):
        assert index.needs_download() is False
        assert index.load() == ["santos"]


def test_formato_invalido_nao_fica_memorizado(cache_file):
    index = CityNameIndex(cache_file, SOURCE_URL)

    with patch("repetidoras.core.city_index.requests.get") as mock_get:
        mock_get.return_value = _response({"erro": "limite"})
        with pytest.raises(CityIndexError):
            index.load()

        mock_get.return_value = _response([{"nome": "Campinas"}])
        assert index.load() == ["campinas"]

    assert mock_get.call_count == 2


def test_sessao_injetada(cache_file):
    session = MagicMock()
    session.get.return_value = _response([{"nome": "Rio Claro"}])

    index = CityNameIndex(cache_file, SOURCE_URL, timeout=3.0, session=session)

    assert index.load() == ["rio claro"]
    session.get.assert_called_once_with(SOURCE_URL, timeout=3.0)


def test_chamadas_concorrentes_compartilham_a_carga(cache_file):
    index = CityNameIndex(cache_file, SOURCE_URL)
    start = threading.Barrier(5)
    results = []

    def slow_get(url, timeout):
        time.sleep(0.1)
        return _response([{"nome": "Campinas"}])

    def worker():
        start.wait()
        results.append(index.load())

    with patch("repetidoras.core.city_index.requests.get", side_effect=slow_get) as mock_get:
        threads = [threading.Thread(target=worker) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

    assert mock_get.call_count == 1
    assert len(results) == 5
    assert all(r is results[0] for r in results)
    assert results[0] == ["campinas"]
