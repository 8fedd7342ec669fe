import logging
from enum import Enum
from typing import List, Optional, Tuple

from weathersim.config import WeatherEngineConfig
from weathersim.core.calendar.config import DaylightSavingConfig, SpecialDayConfig
from weathersim.core.calendar.dates import (
    WeekDay,
    day_of_week,
    day_of_year,
    days_in_month,
    days_in_year,
    find_year_for_weekday,
    leap_add_for,
    month_day_from_day_of_year,
)
from weathersim.core.calendar.resolver import (
    RolloverPolicy,
    reset_weekdays_by_month,
    resolve_dst,
    resolve_special_days,
    weekday_by_day_of_year,
    weekday_of,
    weekdays_by_month,
)
from weathersim.core.data.sources.base import DayRequest, RecordSource
from weathersim.core.data.sources.config import WeatherFileSourceConfig
from weathersim.core.data.sources.epw.reader import EPWWeatherFile
from weathersim.core.data.sources.factory import RecordSourceFactory, SourceContext
from weathersim.core.errors import (
    CalendarError,
    ConfigurationError,
    Diagnostics,
    LoggingDiagnostics,
)
from weathersim.core.providers.psychrometrics import Psychrometrics, PsychrolibPsychrometrics
from weathersim.core.providers.schedules import InMemorySchedules, ScheduleProvider
from weathersim.core.sky import SkyModel
from weathersim.core.solar.geometry import DailySolarCoefficients, SiteGeometry, sun_direction_cosines
from weathersim.core.state import CalendarState, DailyWeatherRecord, OutdoorConditions, WeatherEngineState
from weathersim.environment.config import (
    Environment,
    EnvironmentKind,
    EnvironmentSummary,
    RepeatPolicy,
)

logger = logging.getLogger(__name__)


class SchedulerPhase(Enum):
    IDLE = "idle"
    LOADED = "loaded"
    OPENING = "opening"
    RUNNING_DAYS = "running_days"
    CLOSING = "closing"
    EXHAUSTED = "exhausted"


class EnvironmentScheduler:
    """
    Drives the ordered list of environments and the day-level lookahead.

    The host calls ``load`` once, then for every environment
    ``get_next_environment``, ``begin_environment``, ``advance_day`` once per
    simulated day, ``current`` at every timestep and ``end_environment``.
    Environments run in order: design days, weather-file design periods,
    run periods.
    """

    def __init__(
        self,
        config: WeatherEngineConfig,
        diagnostics: Optional[Diagnostics] = None,
        psychrometrics: Optional[Psychrometrics] = None,
        schedules: Optional[ScheduleProvider] = None,
    ):
        self.config = config
        self.diagnostics = diagnostics or LoggingDiagnostics(__name__)
        self.psychrometrics = psychrometrics or PsychrolibPsychrometrics()
        self.schedules = (
            schedules
            if schedules is not None
            else InMemorySchedules(config.schedules, config.timesteps_per_hour)
        )
        self._state = WeatherEngineState(timesteps_per_hour=config.timesteps_per_hour)
        self._phase = SchedulerPhase.IDLE

        self.environments: List[Environment] = []
        self.weather_file: Optional[EPWWeatherFile] = None
        self.site: Optional[SiteGeometry] = None
        self.elevation = 0.0
        self.location_name = ""
        self._design_day_sources: List[Optional[RecordSource]] = []

        self._index = -1
        self._opening_calendar: Optional[CalendarState] = None
        self._start_year = 0
        self._start_weekday = WeekDay.SUNDAY
        self._date: Tuple[int, int, int] = (0, 1, 1)
        self._cycle_day = 0
        self._warmup = False

    @property
    def state(self) -> WeatherEngineState:
        return self._state

    @property
    def phase(self) -> SchedulerPhase:
        return self._phase

    @property
    def environment(self) -> Optional[Environment]:
        if 0 <= self._index < len(self.environments):
            return self.environments[self._index]
        return None

    @property
    def timesteps_per_hour(self) -> int:
        return self.config.timesteps_per_hour

    def _require(self, *phases: SchedulerPhase) -> None:
        if self._phase not in phases:
            expected = ", ".join(p.value for p in phases)
            raise RuntimeError(
                f"Operation not allowed in phase '{self._phase.value}' (expected {expected})."
            )

    # Loading

    def load(self) -> List[Environment]:
        """Validate the configuration, open the weather file and build the environment list."""
        self._require(SchedulerPhase.IDLE)
        config = self.config

        try:
            sky_model = SkyModel(config.sky_temperature, self.psychrometrics, self.schedules)
        except ConfigurationError as exc:
            self.diagnostics.severe(str(exc))
            sky_model = SkyModel(psychrometrics=self.psychrometrics)

        context = SourceContext(
            timesteps_per_hour=config.timesteps_per_hour,
            missing=self._state.missing,
            psychrometrics=self.psychrometrics,
            sky_model=sky_model,
            diagnostics=self.diagnostics,
            schedules=self.schedules,
            sun_is_up=config.sun_is_up_threshold,
        )

        if config.weather_file is not None:
            self.weather_file = RecordSourceFactory.create(
                WeatherFileSourceConfig(path=config.weather_file), context
            )
            header = self.weather_file.open()
            location = header.location
            self.site = SiteGeometry(
                latitude=location.latitude,
                longitude=location.longitude,
                time_zone=location.time_zone,
            )
            self.elevation = location.elevation
            self.location_name = location.title

        if config.location is not None:
            self.site = SiteGeometry(
                latitude=config.location.latitude,
                longitude=config.location.longitude,
                time_zone=config.location.time_zone,
            )
            self.elevation = config.location.elevation
            self.location_name = config.location.name

        context.site = self.site
        context.elevation = self.elevation
        self._design_day_sources = []
        for design_day in config.design_days:
            try:
                self._design_day_sources.append(RecordSourceFactory.create(design_day, context))
            except ConfigurationError as exc:
                self.diagnostics.severe(str(exc))
                self._design_day_sources.append(None)

        self.environments = self._build_environments()
        self._check_severe("Weather engine configuration")

        if not self.environments:
            self.diagnostics.warning("No environments to simulate.")
        logger.info(
            "Loaded %d environment(s) for %s", len(self.environments), self.location_name
        )
        self._phase = SchedulerPhase.LOADED
        return self.environments

    def _check_severe(self, context: str) -> None:
        check = getattr(self.diagnostics, "check_severe", None)
        if check is not None:
            check(context)

    def _build_environments(self) -> List[Environment]:
        config = self.config
        environments = []

        if config.run_design_days:
            for index, design_day in enumerate(config.design_days):
                environments.append(
                    Environment(
                        kind=EnvironmentKind.DESIGN_DAY,
                        title=design_day.name,
                        begin_month=design_day.month,
                        begin_day=design_day.day,
                        end_month=design_day.month,
                        end_day=design_day.day,
                        use_dst=design_day.dst,
                        design_day_index=index,
                    )
                )

        if not config.run_weather_file_periods:
            return environments

        header = self.weather_file.header if self.weather_file is not None else None
        for days in config.weather_file_days:
            if days.period is not None:
                period = header.find_period(days.period) if header is not None else None
                if period is None:
                    self.diagnostics.severe(
                        f"Weather file days '{days.name}': period '{days.period}' "
                        "is not defined in the weather file."
                    )
                    continue
                begin, end = (period.start.month, period.start.day), (period.end.month, period.end.day)
            else:
                begin, end = (days.begin_month, days.begin_day), (days.end_month, days.end_day)
            environments.append(
                Environment(
                    kind=EnvironmentKind.RUN_PERIOD_DESIGN,
                    title=days.name,
                    begin_month=begin[0],
                    begin_day=begin[1],
                    end_month=end[0],
                    end_day=end[1],
                    start_weekday=days.start_weekday,
                    use_dst=days.use_dst,
                    use_holidays=True,
                    use_rain=days.use_rain,
                    use_snow=days.use_snow,
                )
            )

        for period in config.run_periods:
            environments.append(
                Environment(
                    kind=EnvironmentKind.RUN_PERIOD_WEATHER,
                    title=period.name,
                    begin_month=period.begin_month,
                    begin_day=period.begin_day,
                    end_month=period.end_month,
                    end_day=period.end_day,
                    begin_year=period.begin_year,
                    end_year=period.end_year,
                    start_weekday=period.start_weekday,
                    num_repeats=period.num_repeats,
                    repeat_policy=period.repeat_policy,
                    use_dst=period.use_dst,
                    use_holidays=period.use_holidays,
                    use_rain=period.use_rain,
                    use_snow=period.use_snow,
                    apply_weekend_rule=period.apply_weekend_rule,
                    actual_weather=period.treat_weather_as_actual,
                )
            )
        return environments

    # Environment selection

    def get_next_environment(self) -> bool:
        """Select the next environment; False once the list is exhausted."""
        if self._phase is SchedulerPhase.EXHAUSTED:
            return False
        self._require(SchedulerPhase.LOADED, SchedulerPhase.OPENING)

        self._index += 1
        if self._index >= len(self.environments):
            self._phase = SchedulerPhase.EXHAUSTED
            if self.weather_file is not None:
                self.weather_file.close()
            logger.info("All environments simulated")
            return False

        env = self.environments[self._index]
        if env.is_design_day:
            self._open_design_day(env)
        else:
            self._open_weather_period(env)
        self._state.environment_index = self._index
        self._phase = SchedulerPhase.OPENING
        logger.info(
            "Opening environment '%s' (%s, %d/%d - %d/%d, %d day(s))",
            env.title, env.kind.value, env.begin_month, env.begin_day,
            env.end_month, env.end_day, env.simulated_days,
        )
        return True

    def _open_design_day(self, env: Environment) -> None:
        source = self._design_day_sources[env.design_day_index]
        day_type = source.day_type
        weekday = WeekDay(day_type) if day_type <= 7 else WeekDay.SUNDAY
        leap = (env.begin_month, env.begin_day) == (2, 29)
        year = find_year_for_weekday(env.begin_month, env.begin_day, weekday, leap=leap)
        leap_add = leap_add_for(year)
        table = weekdays_by_month(env.begin_month, env.begin_day, weekday, leap_add)
        env.weekdays_by_month = table
        env.total_days = 1
        self._start_year = year
        self._start_weekday = weekday
        self._opening_calendar = self._resolve_calendar(env, year, leap_add, table)

    def _leap_add(self, env: Environment, year: int) -> int:
        if env.actual_weather:
            return leap_add_for(year)
        header = self.weather_file.header
        return leap_add_for(year) if header.leap_year_observed else 0

    def _open_weather_period(self, env: Environment) -> None:
        if self.weather_file is None:
            self.diagnostics.fatal(
                f"Environment '{env.title}' needs a weather file.", ConfigurationError
            )
        header = self.weather_file.header

        if env.actual_weather:
            year = env.begin_year
        elif env.begin_year is not None and env.start_weekday is None:
            year = env.begin_year
        else:
            weekday = env.start_weekday
            if weekday is None:
                if not header.data_periods:
                    self.diagnostics.fatal(
                        f"Environment '{env.title}': the weather file defines no data period.",
                        ConfigurationError,
                    )
                period = header.data_periods[0]
                file_table = weekdays_by_month(
                    period.start_month, period.start_day, period.start_weekday, 0
                )
                weekday = weekday_of(file_table, env.begin_month, env.begin_day)
            leap = (env.begin_month, env.begin_day) == (2, 29)
            year = find_year_for_weekday(env.begin_month, env.begin_day, weekday, leap=leap)

        begin_year = env.begin_year if env.actual_weather else None
        end_year = env.end_year if env.actual_weather else None
        self.weather_file.validate_run_period(
            env.title,
            (env.begin_month, env.begin_day, begin_year),
            (env.end_month, env.end_day, end_year),
            actual_weather=env.actual_weather,
        )

        leap_add = self._leap_add(env, year)
        begin_day = min(env.begin_day, days_in_month(env.begin_month, leap_add))
        start_weekday = day_of_week(year, env.begin_month, begin_day)
        table = weekdays_by_month(env.begin_month, begin_day, start_weekday, leap_add)

        env.weekdays_by_month = table
        env.total_days = self._span_days(env, year)
        self._start_year = year
        self._start_weekday = start_weekday
        self._opening_calendar = self._resolve_calendar(env, year, leap_add, table)

    def _span_days(self, env: Environment, start_year: int) -> int:
        """Days from the begin date to the end date of one cycle."""
        if env.begin_year is not None:
            end_year = start_year + (env.end_year - env.begin_year)
        elif (env.end_month, env.end_day) >= (env.begin_month, env.begin_day):
            end_year = start_year
        else:
            end_year = start_year + 1

        total = 0
        for year in range(start_year, end_year + 1):
            leap_add = self._leap_add(env, year)
            if year == start_year:
                begin_day = min(env.begin_day, days_in_month(env.begin_month, leap_add))
                first = day_of_year(env.begin_month, begin_day, leap_add)
            else:
                first = 1
            if year == end_year:
                end_day = min(env.end_day, days_in_month(env.end_month, leap_add))
                last = day_of_year(env.end_month, end_day, leap_add)
            else:
                last = days_in_year(leap_add)
            total += last - first + 1
        return total

    def _resolve_calendar(
        self, env: Environment, year: int, leap_add: int, table: Tuple[WeekDay, ...]
    ) -> CalendarState:
        """Weekday, daylight saving and special-day tables for one calendar year."""
        calendar = CalendarState(leap_add=leap_add, current_year=year, weekdays_by_month=table)
        calendar.weekday_by_day_of_year = weekday_by_day_of_year(table, leap_add)
        if env.is_design_day:
            return calendar

        header = self.weather_file.header
        dst = None
        if env.use_dst:
            if self.config.daylight_saving is not None:
                dst = self.config.daylight_saving
            elif header.has_dst:
                dst = DaylightSavingConfig(start=header.dst_start, end=header.dst_end)

        specials: List[SpecialDayConfig] = list(self.config.special_days)
        if env.use_holidays:
            specials.extend(header.holidays)

        try:
            resolution = resolve_dst(table, dst, leap_add)
            calendar.day_types = resolve_special_days(
                table, specials, leap_add, env.apply_weekend_rule, self.diagnostics
            )
        except CalendarError as exc:
            self.diagnostics.fatal(f"Environment '{env.title}': {exc}", ConfigurationError)
        calendar.dst_active = resolution.active
        calendar.dst_start = (resolution.start_month, resolution.start_day)
        calendar.dst_end = (resolution.end_month, resolution.end_day)
        return calendar

    # Running

    def _source(self, env: Environment) -> RecordSource:
        if env.is_design_day:
            return self._design_day_sources[env.design_day_index]
        return self.weather_file

    def begin_environment(self) -> None:
        """Reset the engine state and read the first day into the lookahead buffer."""
        self._require(SchedulerPhase.OPENING)
        env = self.environment

        self._state.reset_for_environment(
            pressure_default=self.psychrometrics.standard_pressure(self.elevation)
        )
        self._state.calendar = self._opening_calendar
        self._state.cycle = 1
        self._date = (self._start_year, env.begin_month, env.begin_day)
        self._cycle_day = 1
        self._warmup = False

        self._read_tomorrow(first_day=True)
        self._phase = SchedulerPhase.RUNNING_DAYS

    def _read_tomorrow(self, first_day: bool) -> DailyWeatherRecord:
        env = self.environment
        calendar = self._state.calendar
        year, month, day = self._date
        ordinal = day_of_year(month, day, calendar.leap_add)
        weekday = WeekDay(int(calendar.weekday_by_day_of_year[ordinal - 1]))

        request = DayRequest(
            year=year,
            month=month,
            day=day,
            day_of_year=ordinal,
            weekday=weekday,
            leap_add=calendar.leap_add,
            first_day=first_day,
            use_rain=env.use_rain,
            use_snow=env.use_snow,
            actual_weather=env.actual_weather,
        )
        record = self._source(env).read_day(request)

        if not env.is_design_day:
            special = int(calendar.day_types[ordinal - 1])
            record.holiday_index = special
            record.day_type = special if special else int(weekday)
            record.dst_active = bool(calendar.dst_active[ordinal - 1])
        self._state.tomorrow = record
        return record

    def advance_day(self, warmup: bool = False) -> DailyWeatherRecord:
        """Promote the lookahead day to today and read the next one.

        During warmup the first day is repeated and nothing new is read.
        """
        self._require(SchedulerPhase.RUNNING_DAYS)
        env = self.environment
        today = self._state.promote_tomorrow()

        if warmup:
            self._state.day_of_sim = 1
            self._warmup = True
            return today

        if self._warmup:
            self._warmup = False
        else:
            self._state.day_of_sim += 1

        if self._state.day_of_sim < env.simulated_days:
            restart = self._step_date(env)
            self._read_tomorrow(first_day=restart)
        return today

    def _step_date(self, env: Environment) -> bool:
        """Move the lookahead date forward one day; True when a new cycle starts."""
        calendar = self._state.calendar
        year, month, day = self._date

        if self._cycle_day >= env.total_days:
            self._state.cycle += 1
            self._cycle_day = 1
            if env.actual_weather:
                new_year = env.begin_year
            elif (env.begin_month, env.begin_day) <= (month, day):
                new_year = year + 1
            else:
                new_year = year
            leap_add = self._leap_add(env, new_year)
            begin_day = min(env.begin_day, days_in_month(env.begin_month, leap_add))
            if env.actual_weather:
                table = weekdays_by_month(
                    env.begin_month, begin_day,
                    day_of_week(new_year, env.begin_month, begin_day), leap_add,
                )
            elif env.repeat_policy is RepeatPolicy.SAME_WEEKDAY:
                table = weekdays_by_month(env.begin_month, begin_day, self._start_weekday, leap_add)
            else:
                table = reset_weekdays_by_month(
                    calendar.weekdays_by_month, leap_add, env.begin_month, begin_day,
                    month, day, RolloverPolicy.ROLL_FORWARD, previous_leap_add=calendar.leap_add,
                )
            self._state.calendar = self._resolve_calendar(env, new_year, leap_add, table)
            self._date = (new_year, env.begin_month, begin_day)
            logger.info("Environment '%s' starts cycle %d", env.title, self._state.cycle)
            return True

        self._cycle_day += 1
        ordinal = day_of_year(month, day, calendar.leap_add)
        if ordinal >= days_in_year(calendar.leap_add):
            new_year = year + 1
            leap_add = self._leap_add(env, new_year)
            table = reset_weekdays_by_month(
                calendar.weekdays_by_month, leap_add, 1, 1, 12, 31,
                RolloverPolicy.YEAR_BOUNDARY, previous_leap_add=calendar.leap_add,
            )
            self._state.calendar = self._resolve_calendar(env, new_year, leap_add, table)
            self._state.year_rollovers += 1
            self._date = (new_year, 1, 1)
            logger.info("Environment '%s' rolls over into %d", env.title, new_year)
        else:
            next_month, next_day = month_day_from_day_of_year(ordinal + 1, calendar.leap_add)
            self._date = (year, next_month, next_day)
        return False

    def current(self, hour: int, timestep: int) -> OutdoorConditions:
        """Outdoor conditions at ``timestep`` of ``hour`` of today (both 1-based)."""
        self._require(SchedulerPhase.RUNNING_DAYS)
        today = self._state.today
        if today is None:
            raise RuntimeError("No current day; call advance_day() first.")
        n = self.timesteps_per_hour
        if not 1 <= hour <= 24:
            raise ValueError(f"Hour must be between 1 and 24, got {hour}.")
        if not 1 <= timestep <= n:
            raise ValueError(f"Timestep must be between 1 and {n}, got {timestep}.")

        h, t = hour - 1, timestep - 1
        coefficients = DailySolarCoefficients(
            sin_declination=today.sin_declination,
            cos_declination=today.cos_declination,
            equation_of_time=today.equation_of_time,
            a=today.ashrae_a,
            b=today.ashrae_b,
            c=today.ashrae_c,
            annual_variation=today.annual_variation,
        )
        sun = sun_direction_cosines(h + (timestep - 0.5) / n, coefficients, self.site)
        station = self.config.weather_station

        return OutdoorConditions(
            environment=self.environment.title,
            day_of_sim=self._state.day_of_sim,
            year=today.year,
            month=today.month,
            day=today.day,
            hour=hour,
            timestep=timestep,
            day_of_year=today.day_of_year,
            weekday=today.weekday,
            day_type=today.day_type,
            holiday_index=today.holiday_index,
            dst_active=today.dst_active,
            dry_bulb=float(today.dry_bulb[h, t]),
            dew_point=float(today.dew_point[h, t]),
            rel_hum=float(today.rel_hum[h, t]),
            hum_ratio=float(today.hum_ratio[h, t]),
            pressure=float(today.pressure[h, t]),
            wind_speed=float(today.wind_speed[h, t]),
            wind_dir=float(today.wind_dir[h, t]),
            sky_temp=float(today.sky_temp[h, t]),
            horiz_ir=float(today.horiz_ir[h, t]),
            beam_solar=float(today.beam_solar[h, t]),
            diffuse_solar=float(today.diffuse_solar[h, t]),
            liquid_precip=float(today.liquid_precip[h, t]),
            albedo=float(today.albedo[h, t]),
            total_sky_cover=float(today.total_sky_cover[h, t]),
            opaque_sky_cover=float(today.opaque_sky_cover[h, t]),
            is_rain=bool(today.is_rain[h, t]),
            is_snow=bool(today.is_snow[h, t]),
            sun_is_up=bool(sun[2] >= self.config.sun_is_up_threshold),
            sun_direction=tuple(float(v) for v in sun),
            ground_reflectance=float(self.config.ground_reflectance[today.month - 1]),
            wind_sensor_height=station.wind_sensor_height,
            temperature_sensor_height=station.temperature_sensor_height,
        )

    def end_environment(self) -> EnvironmentSummary:
        """Report missing and out-of-range data and close the environment."""
        self._require(SchedulerPhase.RUNNING_DAYS)
        self._phase = SchedulerPhase.CLOSING
        env = self.environment
        missing = self._state.missing
        missing.report(self.diagnostics, env.title)

        summary = EnvironmentSummary(
            title=env.title,
            kind=env.kind,
            days_simulated=self._state.day_of_sim,
            year_rollovers=self._state.year_rollovers,
            cycles=self._state.cycle,
            missing={f.value: n for f, n in missing.missing.items() if n},
            out_of_range={f.value: n for f, n in missing.out_of_range.items() if n},
        )
        logger.info(
            "Closed environment '%s' after %d day(s)", env.title, summary.days_simulated
        )
        self._phase = SchedulerPhase.LOADED
        return summary

    def close(self) -> None:
        if self.weather_file is not None:
            self.weather_file.close()
        self._phase = SchedulerPhase.EXHAUSTED
