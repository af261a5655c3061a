import pytest

from config import config
from domain.tax_calculator import TaxCalculator


@pytest.fixture(scope="function")
def calculator() -> TaxCalculator:
    return TaxCalculator()


@pytest.fixture(autouse=True)
def _reset_config_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("GAINS_TAX_TAX_RATE", "GAINS_TAX_EXEMPTION_THRESHOLD", "GAINS_TAX_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    config.cache_clear()
