from __future__ import annotations

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from .models import M_TO_CM, MonitorReadout, PipelineConfig
from .pipeline import InvalidSampleError, VelocityPipeline


class ReadoutResponse(BaseModel):
    velocity_cm_s: float
    vti_cm: float
    vessel_radius_mm: float
    stroke_volume_ml: float
    ejecting: bool
    cycles_completed: int


class WaveformResponse(BaseModel):
    capacity: int
    velocity_cm_s: list[float]


class VesselRadiusUpdate(BaseModel):
    radius_mm: float = Field(gt=0)


class SampleBatch(BaseModel):
    velocities_m_s: list[float] = Field(min_length=1)


class CycleItem(BaseModel):
    index: int
    sample_count: int
    duration_s: float
    vti_cm: float
    peak_velocity_cm_s: float
    stroke_volume_ml: float


class SampleBatchResult(BaseModel):
    accepted: int
    cycles: list[CycleItem]


def _readout_response(readout: MonitorReadout) -> ReadoutResponse:
    return ReadoutResponse(
        velocity_cm_s=readout.velocity_cm_s,
        vti_cm=readout.vti_cm,
        vessel_radius_mm=readout.vessel_radius_mm,
        stroke_volume_ml=readout.stroke_volume_ml,
        ejecting=readout.ejecting,
        cycles_completed=readout.cycles_completed,
    )


def create_monitor_app(
    pipeline: VelocityPipeline | None = None,
    config: PipelineConfig | None = None,
) -> FastAPI:
    # Handlers are async and never await, so each mutation runs to completion
    # on the event loop thread before the next request is served.
    app = FastAPI(
        title="VTI Monitor API",
        version="0.1.0",
        description="Live velocity, waveform, VTI and stroke volume for one Doppler stream.",
    )
    app.state.pipeline = pipeline or VelocityPipeline(config)

    def _pipeline() -> VelocityPipeline:
        return app.state.pipeline

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/api/v1/readout", response_model=ReadoutResponse)
    async def get_readout() -> ReadoutResponse:
        return _readout_response(_pipeline().readout())

    @app.get("/api/v1/waveform", response_model=WaveformResponse)
    async def get_waveform() -> WaveformResponse:
        points = _pipeline().waveform() * M_TO_CM
        return WaveformResponse(capacity=int(points.size), velocity_cm_s=points.tolist())

    @app.put("/api/v1/vessel-radius", response_model=ReadoutResponse)
    async def put_vessel_radius(payload: VesselRadiusUpdate) -> ReadoutResponse:
        try:
            _pipeline().set_vessel_radius_mm(payload.radius_mm)
        except ValueError as error:
            raise HTTPException(status_code=422, detail=str(error)) from error
        return _readout_response(_pipeline().readout())

    @app.post("/api/v1/samples", response_model=SampleBatchResult)
    async def post_samples(payload: SampleBatch) -> SampleBatchResult:
        target = _pipeline()
        cycles: list[CycleItem] = []
        accepted = 0
        for index, value in enumerate(payload.velocities_m_s):
            try:
                cycle = target.on_sample(value)
            except InvalidSampleError as error:
                raise HTTPException(
                    status_code=422,
                    detail=f"velocities_m_s[{index}]: {error} ({accepted} samples applied)",
                ) from error
            accepted += 1
            if cycle is not None:
                cycles.append(
                    CycleItem(
                        index=cycle.index,
                        sample_count=cycle.sample_count,
                        duration_s=cycle.duration_s,
                        vti_cm=cycle.vti_m * M_TO_CM,
                        peak_velocity_cm_s=cycle.peak_velocity_m_s * M_TO_CM,
                        stroke_volume_ml=cycle.stroke_volume_ml,
                    )
                )
        return SampleBatchResult(accepted=accepted, cycles=cycles)

    @app.post("/api/v1/reset", response_model=ReadoutResponse)
    async def post_reset() -> ReadoutResponse:
        _pipeline().on_reset()
        return _readout_response(_pipeline().readout())

    return app
