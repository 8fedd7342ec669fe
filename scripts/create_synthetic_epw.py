import numpy as np
import pandas as pd

year = 2023
start_time = pd.Timestamp(f"{year}-01-01 01:00:00")
time_index = pd.date_range(start=start_time, periods=8760, freq="h")

np.random.seed(42)
day = (time_index.dayofyear.to_numpy() - 1) / 365.0
hour = time_index.hour.to_numpy()
hour[hour == 0] = 24

seasonal = 10.0 - 12.0 * np.cos(2 * np.pi * day)
diurnal = 5.0 * np.sin(2 * np.pi * (hour - 9) / 24)
dry_bulb = seasonal + diurnal + np.random.normal(0, 1.0, size=len(time_index))
dew_point = dry_bulb - np.random.uniform(2, 8, size=len(time_index))
daylight = np.clip(np.sin(np.pi * (hour - 6) / 12), 0, None)
beam = np.round(600 * daylight * np.random.uniform(0.3, 1.0, size=len(time_index)))
diffuse = np.round(150 * daylight)

# An EPW hour 24 belongs to the day it ends.
stamp = time_index - pd.Timedelta(hours=1)
df = pd.DataFrame({
    "year": stamp.year,
    "month": stamp.month,
    "day": stamp.day,
    "hour": hour,
    "minute": 60,
    "source": "?9?9?9?9E0?9?9?9?9?9?9?9?9?9?9?9?9?9?9?9*9*9?9?9?9",
    "dry_bulb": dry_bulb.round(1),
    "dew_point": dew_point.round(1),
    "rel_hum": np.clip(100 - 5 * (dry_bulb - dew_point), 5, 100).round(),
    "pressure": 101325,
    "et_horiz": 9999,
    "et_direct": 9999,
    "horiz_ir": 9999,
    "global_horiz": (beam * 0.6 + diffuse).round(),
    "direct_normal": beam,
    "diffuse_horiz": diffuse,
    "global_illum": 999999,
    "direct_illum": 999999,
    "diffuse_illum": 999999,
    "zenith_lum": 9999,
    "wind_dir": np.random.uniform(0, 360, size=len(time_index)).round(),
    "wind_speed": np.random.uniform(0, 8, size=len(time_index)).round(1),
    "total_sky": np.random.randint(0, 11, size=len(time_index)),
    "opaque_sky": 0,
    "visibility": 9999,
    "ceiling": 99999,
    "weather_obs": 9,
    "weather_codes": "999999999",
    "precip_water": 999,
    "aerosol": 0.999,
    "snow_depth": 0,
    "days_since_snow": 88,
    "albedo": 0.2,
    "liquid_precip": 0,
    "liquid_rate": 1,
})
df["opaque_sky"] = (df["total_sky"] * 0.6).round().astype(int)

header = [
    "LOCATION,Synthetic City,ST,USA,Synthetic,999999,40.00,-105.00,-7.0,1650.0",
    "DESIGN CONDITIONS,0",
    "TYPICAL/EXTREME PERIODS,1,Summer - Week Nearest Max Temperature For Period,Extreme,7/ 9,7/15",
    "GROUND TEMPERATURES,0",
    "HOLIDAYS/DAYLIGHT SAVINGS,No,0,0,0",
    "COMMENTS 1,Synthetic weather generated with numpy",
    "COMMENTS 2,For testing only",
    f"DATA PERIODS,1,1,Data,{time_index[0].day_name()},1/ 1,12/31",
]

with open("synthetic.epw", "w") as file:
    file.write("\n".join(header) + "\n")
    df.to_csv(file, header=False, index=False, lineterminator="\n")
print("Synthetic weather file synthetic.epw created!")
