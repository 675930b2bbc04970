"""
Weather package.

Open-Meteo client (geocoding + daily forecasts), the provider contract it
implements, forecast records, and the cache-aside forecast service.
"""
