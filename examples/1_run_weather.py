import logging

from weathersim import build_dataset, load_config

logging.basicConfig(level=logging.INFO)

# Load weather engine configuration from YAML file
config = load_config("config/weather_config.yaml")
print("Weather engine configuration loaded successfully.")

dataset = build_dataset(config, warmup_days=2)
frame = dataset.to_frame()
print(f"Simulated {len(frame)} timesteps in {len(dataset.summaries)} environments.")

for summary in dataset.summaries:
    print(
        f"{summary.title}: {summary.days_simulated} day(s), "
        f"{summary.total_missing} missing, {summary.total_out_of_range} out of range"
    )

print(frame.groupby("environment")[["dry_bulb", "beam_solar", "diffuse_solar"]].describe())
