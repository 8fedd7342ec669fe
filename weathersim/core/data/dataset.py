from dataclasses import asdict
from typing import Iterator, List, Optional

import pandas as pd

from weathersim.core.state import OutdoorConditions
from weathersim.environment.config import EnvironmentSummary
from weathersim.environment.scheduler import EnvironmentScheduler, SchedulerPhase


class WeatherDataset:
    """Runs every environment of a scheduler and yields the conditions of each timestep.

    A scheduler runs its environment list once; iterate a fresh dataset to
    repeat the run.
    """

    def __init__(self, scheduler: EnvironmentScheduler, warmup_days: int = 0):
        self.scheduler = scheduler
        self.warmup_days = warmup_days
        self.summaries: List[EnvironmentSummary] = []

    def __iter__(self) -> Iterator[OutdoorConditions]:
        scheduler = self.scheduler
        if scheduler.phase is SchedulerPhase.IDLE:
            scheduler.load()
        self.summaries = []
        n = scheduler.timesteps_per_hour

        while scheduler.get_next_environment():
            scheduler.begin_environment()
            for _ in range(self.warmup_days):
                scheduler.advance_day(warmup=True)
            for _ in range(scheduler.environment.simulated_days):
                scheduler.advance_day()
                for hour in range(1, 25):
                    for timestep in range(1, n + 1):
                        yield scheduler.current(hour, timestep)
            self.summaries.append(scheduler.end_environment())

    def to_frame(self, environment: Optional[str] = None) -> pd.DataFrame:
        """Collect the run into a DataFrame with one row per timestep."""
        rows = []
        for conditions in self:
            if environment is not None and conditions.environment != environment:
                continue
            row = asdict(conditions)
            east, north, up = row.pop("sun_direction")
            row.update(sun_east=east, sun_north=north, sun_up=up)
            row["weekday"] = int(row["weekday"])
            rows.append(row)
        return pd.DataFrame(rows)
