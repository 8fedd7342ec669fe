from weathersim import EnvironmentScheduler, load_config

# Drive the scheduler step by step, as a host simulation loop would
config = load_config("config/weather_config.yaml")
scheduler = EnvironmentScheduler(config)
scheduler.load()

while scheduler.get_next_environment():
    environment = scheduler.environment
    print(f"Environment '{environment.title}' ({environment.kind.value})")
    scheduler.begin_environment()
    for day in range(environment.simulated_days):
        today = scheduler.advance_day()
        noon = scheduler.current(12, config.timesteps_per_hour)
        if day < 3:
            print(
                f"  {today.year}-{today.month:02d}-{today.day:02d} day type {today.day_type}: "
                f"{noon.dry_bulb:.1f} C at noon, beam {noon.beam_solar:.0f} W/m2"
            )
    summary = scheduler.end_environment()
    print(f"  {summary.days_simulated} day(s), {summary.year_rollovers} year rollover(s)")
