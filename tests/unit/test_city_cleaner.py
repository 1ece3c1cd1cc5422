import pytest

from repetidoras.core.city_cleaner import clean_city

pytestmark = pytest.mark.unit


@pytest.mark.parametrize("entrada,uf,esperado", [
    ("Campinas - SP", "sp", "Campinas"),
    ("Campinas/SP", "sp", "Campinas"),
    ("Campinas, Brasil", "sp", "Campinas"),
    ("São José dos Campos-SP", "sp", "São José dos Campos"),
    ("Santos.", "sp", "Santos"),
    ("Curitiba - Parana", "pr", "Curitiba"),
    ("  -Belo Horizonte/MG  ", "mg", "Belo Horizonte"),
])
def test_remove_qualificadores_no_fim(entrada, uf, esperado):
    assert clean_city(entrada, uf) == esperado


def test_qualificador_no_inicio_permanece():
    assert clean_city("SP Campinas", "sp") == "SP Campinas"


def test_pontuacao_interna_vira_espaco():
    assert clean_city("Santo.Andre", "sp") == "Santo Andre"


def test_sigla_sem_separador_nao_e_removida():
    # "Campinassp" não tem separador antes da sigla
    assert clean_city("Campinassp", "sp") == "Campinassp"


@pytest.mark.parametrize("entrada", ["", None])
def test_vazio(entrada):
    assert clean_city(entrada, "sp") == ""
