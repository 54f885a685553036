# config.py
"""
Configurations for the weatherlens analysis core.

This module contains the metric configuration table and the analysis
constants shared across the normalizer, aggregator, trend engine, period
segmenter and distribution analyzer. Functions receive the metric table as an
explicit argument and fall back to METRIC_CONFIGS when none is given.
"""

from weatherlens.models.weather import MetricConfig

# Raw record field names as delivered by the sensor export
RAW_TIMESTAMP_FORMAT = "dd/MM/yyyy HH:mm:ss"
RAW_AQI_FIELDS = ("mq135PPM", "aqiPpm")

# Normalizer constants
LUX_DAY_THRESHOLD = 400
RAIN_ANALOG_MAX = 4095
UNKNOWN_STATUS = "Unknown"
SUNRISE = "Sunrise"
SUNSET = "Sunset"

METRIC_CONFIGS = {
    "temperature": MetricConfig(
        name="Temperature",
        unit="°C",
        color="hsl(var(--chart-1))",
        healthy_min=0,
        healthy_max=35,
    ),
    "humidity": MetricConfig(
        name="Humidity",
        unit="%",
        color="hsl(var(--chart-2))",
        healthy_min=30,
        healthy_max=70,
    ),
    "precipitation": MetricConfig(
        name="Precipitation",
        unit="",
        color="hsl(var(--chart-3))",
        is_string=True,
    ),
    "precipitationIntensity": MetricConfig(
        name="Rain Intensity",
        unit="%",
        color="hsl(200, 70%, 50%)",
        healthy_min=0,
        healthy_max=100,
    ),
    "airQuality": MetricConfig(
        name="Air Quality",
        unit="",
        color="hsl(var(--chart-4))",
        is_string=True,
    ),
    "aqiPpm": MetricConfig(
        name="AQI (ppm)",
        unit="ppm",
        color="hsl(var(--chart-5))",
        healthy_min=0,
        healthy_max=300,
    ),
    "lux": MetricConfig(
        name="Light Level",
        unit="lux",
        color="hsl(30, 80%, 55%)",
    ),
    "pressure": MetricConfig(
        name="Pressure",
        unit="hPa",
        color="hsl(120, 60%, 45%)",
        healthy_min=980,
        healthy_max=1040,
    ),
}

NUMERIC_METRICS = [key for key, cfg in METRIC_CONFIGS.items() if not cfg.is_string]

# Aggregation levels ("raw" is the identity passthrough)
AGGREGATION_LEVELS = ("raw", "hourly", "daily", "weekly", "monthly")

# Trend overlay options
TREND_TYPES = (
    "none",
    "linear",
    "logarithmic",
    "exponential",
    "power",
    "polynomial",
    "movingAverage",
)
DEFAULT_POLYNOMIAL_ORDER = 2
MIN_POLYNOMIAL_ORDER = 2
DEFAULT_MOVING_AVERAGE_PERIOD = 7
MIN_MOVING_AVERAGE_PERIOD = 2
TREND_PRECISION = 2

# Day/night duration regrouping
DURATION_LEVELS = ("weekly", "monthly", "annually")

# Histogram binning
MIN_HISTOGRAM_BINS = 3
MAX_HISTOGRAM_BINS = 10
HISTOGRAM_EDGE_EPSILON = 0.00001

# Axis domain used when no numeric data is selected
DEFAULT_AXIS_DOMAIN = (0, 10)
