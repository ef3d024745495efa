import os
import sys

import pytest

# Add src to path for internal imports
src_path = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'src')
if src_path not in sys.path:
    sys.path.insert(0, src_path)

from kitchen_quote.config.settings import Settings, DEFAULT_RATES
from kitchen_quote.engine.models import JobParameters, PricingConfig, Options
from kitchen_quote.services.quote_session import QuoteSession


@pytest.fixture(scope="function")
def settings(tmp_path):
    """Settings rooted in a temp dir, independent of the environment."""
    return Settings(
        project_root=tmp_path,
        preferences_path=tmp_path / 'preferences.json',
        history_capacity=20,
        default_rates=dict(DEFAULT_RATES),
    )


@pytest.fixture(scope="function")
def session(settings):
    return QuoteSession(settings=settings)


@pytest.fixture
def config():
    return PricingConfig()


@pytest.fixture
def params():
    return JobParameters()


@pytest.fixture
def options():
    return Options()


@pytest.fixture
def zero_job():
    """A job where every cost line is zero."""
    params = JobParameters(
        workers=0, materials_per_day=0, equipment_per_day=0, include_insurance=False,
    )
    options = Options(include_transport=False)
    return params, options
