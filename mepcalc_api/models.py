"""Pydantic models for MEPCalc API requests."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field

from mepcalc.impedance import Impedance


# --- Enums ---

class NetworkType(str, Enum):
    L = "L"
    PI = "Pi"
    T = "T"


class Topology(str, Enum):
    LOWPASS = "lowpass"
    HIGHPASS = "highpass"


class MatchingPosition(str, Enum):
    LOAD = "load"
    SOURCE = "source"


class ESeries(str, Enum):
    E6 = "E6"
    E12 = "E12"
    E24 = "E24"


class ExportFormat(str, Enum):
    CSV = "csv"
    JSON = "json"
    TXT = "txt"


# --- Shared ---

class SaveOptions(BaseModel):
    """Optional history recording for any calculation."""
    save: bool = Field(False, description="Record this calculation in the history")
    project_name: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)


class ImpedanceModel(BaseModel):
    resistance: float = Field(..., ge=0, description="Real part (Ohms)")
    reactance: float = Field(0.0, description="Imaginary part (Ohms), positive = inductive")

    def to_impedance(self) -> Impedance:
        return Impedance(self.resistance, self.reactance)


class LabelledImpedance(ImpedanceModel):
    label: str = Field(..., min_length=1, max_length=50)


# --- RF ---

class MatchingRequest(SaveOptions):
    frequency_mhz: float = Field(..., gt=0, description="Design frequency (MHz)")
    source_impedance: ImpedanceModel = Field(default_factory=lambda: ImpedanceModel(resistance=50.0))
    load_impedance: ImpedanceModel
    network: NetworkType = NetworkType.L
    topology: Topology = Topology.LOWPASS
    q: Optional[float] = Field(None, ge=0, description="Loaded Q for Pi/T networks")
    z0: float = Field(50.0, gt=0, description="Reference impedance (Ohms)")
    matching_position: MatchingPosition = MatchingPosition.LOAD
    e_series: ESeries = ESeries.E12


class FrequencyResponseRequest(MatchingRequest):
    span_ratio: float = Field(0.5, gt=0, lt=2, description="Sweep span as a fraction of the centre")
    num_points: int = Field(201, ge=3, le=2001)
    threshold_db: float = Field(10.0, gt=0, description="Return loss defining the matched band")


class SmithChartRequest(BaseModel):
    points: list[LabelledImpedance] = Field(default_factory=list, max_length=50)
    z0: float = Field(50.0, gt=0)
    include_grid: bool = True
    grid_points: int = Field(64, ge=8, le=512)


class SmithChartSvgRequest(BaseModel):
    points: list[LabelledImpedance] = Field(default_factory=list, max_length=50)
    z0: float = Field(50.0, gt=0)
    size: int = Field(400, ge=100, le=2000)
    title: str = Field("Smith Chart", max_length=100)


# --- Cable ---

class CableConfigModel(BaseModel):
    """Cable construction and installation. Invalid combinations are reported by the resolver."""
    insulation: str = "xlpe"
    armoured: bool = False
    arrangement: str = "multicore"
    method: str = "C"
    conductors: int = 3
    layout: Optional[str] = None
    system: str = "ac"


class CableSizeRequest(CableConfigModel, SaveOptions):
    design_current: float = Field(..., gt=0, description="Design current Ib (A)")
    length: float = Field(..., gt=0, description="Route length (m)")
    voltage: float = Field(400.0, gt=0, description="Nominal voltage (V)")
    ambient_temperature: float = Field(30.0, ge=-40, le=120, description="Ambient temperature (°C)")
    circuits: int = Field(1, ge=1, le=100, description="Number of grouped circuits")
    max_voltage_drop_percent: float = Field(4.0, gt=0, le=100)


class CableOptionsRequest(BaseModel):
    insulation: str = "xlpe"
    armoured: bool = False
    arrangement: str = "multicore"
    method: Optional[str] = None
    conductors: Optional[int] = None


# --- Electrical ---

class PowerFactorRequest(SaveOptions):
    power_kw: float = Field(..., gt=0, description="Active power (kW)")
    initial_pf: float = Field(..., gt=0, le=1)
    target_pf: float = Field(..., gt=0, le=1)
    thd_percent: float = Field(0.0, ge=0, description="Total harmonic distortion (%)")


class CircuitProtectionRequest(SaveOptions):
    fault_level: float = Field(..., gt=0, description="Prospective fault current at the source (A)")
    device_rating: float = Field(..., gt=0, description="Device rating In (A)")
    device_type: str = Field("mccb", description="mcb, mccb or fuse")
    cable_csa: float = Field(..., gt=0, description="Conductor size (mm²)")
    cable_length: float = Field(..., gt=0, description="Cable length (m)")
    disconnection_time: float = Field(0.4, gt=0, description="Required disconnection time (s)")
    insulation: str = "xlpe"


class FuseTimeRequest(SaveOptions):
    rated_current: float = Field(..., gt=0)
    actual_current: float = Field(..., gt=0)
    fuse_type: str = "gG"


class LightingControlRequest(SaveOptions):
    area: float = Field(..., gt=0, description="Floor area (m²)")
    lpd: float = Field(..., ge=0, description="Lighting power density (W/m²)")


class LuminaireModel(BaseModel):
    id: str
    name: str
    wattage: float = Field(..., ge=0)


class SpaceLuminaire(BaseModel):
    luminaire_id: str
    quantity: int = Field(..., ge=0)


class SpaceModel(BaseModel):
    id: str
    name: str
    type: str
    area: float = Field(..., gt=0)
    luminaires: list[SpaceLuminaire] = Field(default_factory=list)


class LPDRequest(SaveOptions):
    spaces: list[SpaceModel]
    luminaires: list[LuminaireModel]


class LoadBalanceRequest(SaveOptions):
    phase_a: float = Field(..., ge=0, description="L1 current (A)")
    phase_b: float = Field(..., ge=0, description="L2 current (A)")
    phase_c: float = Field(..., ge=0, description="L3 current (A)")
    limit_percent: float = Field(10.0, gt=0, le=100)


# --- Export and history ---

class ExportRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    discipline: str
    inputs: dict[str, Any] = Field(default_factory=dict)
    results: dict[str, Any] = Field(default_factory=dict)
    calculator_name: Optional[str] = None
    project_name: Optional[str] = None
    notes: Optional[str] = None


class HistoryImportRequest(BaseModel):
    data: str = Field(..., description="JSON produced by GET /api/history-export")
