import pytest

from repetidoras.core.city_index import StaticCityNameIndex


def pytest_configure(config):
    """Registra markers customizados para evitar warnings."""
    config.addinivalue_line(
        "markers", "unit: Testes unitários dos normalizadores"
    )
    config.addinivalue_line(
        "markers", "contract: Contratos de saída (modelos de rádio, arquivos)"
    )
    config.addinivalue_line(
        "markers", "e2e: Lote completo de ponta a ponta"
    )
    config.addinivalue_line(
        "markers", "api: Testes dos endpoints HTTP"
    )


CIDADES_BASE = [
    "campinas",
    "sao paulo",
    "santos",
    "santo andre",
    "santo antonio de posse",
    "santo amaro da imperatriz",
    "sao jose dos campos",
    "rio de janeiro",
    "rio claro",
    "belo horizonte",
    "curitiba",
    "porto alegre",
    "florianopolis",
    "ribeirao preto",
]


@pytest.fixture
def cidades():
    return list(CIDADES_BASE)


@pytest.fixture
def city_index():
    return StaticCityNameIndex(CIDADES_BASE)


@pytest.fixture
def make_raw():
    """Fábrica de registros crus no formato do feed radioid.net."""
    def _make(**overrides):
        record = {
            "state": "SP",
            "country": "Brazil",
            "status": "Active",
            "city": "Campinas",
            "frequency": "439.01250",
            "offset": "-5.000",
            "color_code": "1",
            "id": "724001",
            "ts_linked": "TS1 TS2",
            "callsign": "PY2ABC",
            "trustee": "PY2XYZ",
            "locator": "GG66",
            "map": 1,
            "map_info": "",
            "ipsc_network": "BRANDMEISTER",
            "assigned": "peer",
            "details": "repetidora da serra",
        }
        record.update(overrides)
        return record
    return _make
