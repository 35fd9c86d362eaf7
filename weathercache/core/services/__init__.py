from .lookup import LookupOutcome, LookupResult, WeatherLookupService
from .refresher import WeatherRefresher

__all__ = ["LookupOutcome", "LookupResult", "WeatherLookupService", "WeatherRefresher"]
