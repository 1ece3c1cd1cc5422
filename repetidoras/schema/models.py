from pydantic import BaseModel, ConfigDict, Field
from typing import Any, Dict, List, Optional, Union


class RawRepeaterRecord(BaseModel): ##     Registro cru do feed (radioid.net), campos extras preservados
    model_config = ConfigDict(extra="allow")

    state: Optional[str] = None
    country: Optional[str] = None
    status: Optional[str] = None
    city: Optional[str] = None
    frequency: Optional[Union[float, str]] = None
    offset: Optional[Union[float, str]] = None
    color_code: Optional[Union[int, float, str]] = None
    id: Optional[Union[int, float, str]] = None
    ts_linked: Optional[str] = None

    callsign: Optional[Any] = None
    locator: Optional[Any] = None
    trustee: Optional[Any] = None
    map: Optional[Any] = None
    map_info: Optional[Any] = None
    ipsc_network: Optional[Any] = None
    assigned: Optional[Any] = None


class RecordInfo(BaseModel): ##     Metadados do operador agrupados fora do registro principal
    model_config = ConfigDict(extra="allow")

    dmr_id: Optional[Union[int, float]] = None
    # Repassados como vieram do feed
    callsign: Optional[Any] = None
    ipsc: Optional[Any] = None
    assigned: Optional[Any] = None
    trustee: Optional[Any] = None
    locator: Optional[Any] = None
    map: Optional[Any] = None
    map_info: Optional[Any] = None


class NormalizedRecord(BaseModel): ##     Contrato entre o pipeline e os exportadores (JSON/CSV)
    model_config = ConfigDict(extra="allow")

    rx: Optional[Union[int, float]] = None
    tx: Optional[Union[int, float]] = None
    offset: Optional[Union[int, float]] = None
    color: Optional[Union[int, float]] = None
    timeslot: Optional[List[int]] = None
    info: RecordInfo = Field(default_factory=RecordInfo)

    # [UF, Cidade] ou [UF, Cidade, índice de duplicata]
    location: List[Union[str, int]]

    @property
    def state_code(self) -> str:
        return str(self.location[0]).lower()

    @property
    def city(self) -> str:
        return str(self.location[1])

    @property
    def duplicate_index(self) -> Optional[int]:
        return self.location[2] if len(self.location) > 2 else None

    def to_json(self) -> Dict[str, Any]:
        """Somente os campos presentes na origem (tx ausente continua ausente)."""
        return self.model_dump(exclude_unset=True)
