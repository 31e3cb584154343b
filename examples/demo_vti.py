from vti_monitor.models import PipelineConfig
from vti_monitor.pipeline import VelocityPipeline
from vti_monitor.synthetic import SyntheticStreamConfig, generate_velocity_stream


def main() -> None:
    stream = generate_velocity_stream(SyntheticStreamConfig(heart_rate_bpm=65.0))
    # Full-rate integration so the last VTI is comparable with the generated ground truth.
    pipeline = VelocityPipeline(PipelineConfig(downsample_factor=1))
    pipeline.set_vessel_radius_mm(11.0)

    for velocity in stream.velocity_m_s:
        cycle = pipeline.on_sample(velocity)
        if cycle is not None:
            print(f"Cycle {cycle.index}: VTI {cycle.vti_m * 100:.2f} cm")

    readout = pipeline.readout()
    print("VTI summary")
    print(f"Beats simulated: {stream.beat_count}")
    print(f"True VTI: {stream.true_vti_m * 100:.2f} cm")
    print(f"Last VTI: {readout.vti_cm:.2f} cm")
    print(f"Vessel radius: {readout.vessel_radius_mm:.1f} mm")
    print(f"Stroke volume: {readout.stroke_volume_ml:.1f} ml")


if __name__ == "__main__":
    main()
