"""Tests for the recorder."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from api_pulse.core.exceptions import StorageError
from api_pulse.core.recorder import Recorder
from api_pulse.core.store import ObservationStore
from api_pulse.models.observation import ProbeStatus

from .conftest import FIXED_NOW, make_result


@pytest.mark.functional
async def test_record_stores_result_unchanged(store):
    recorder = Recorder(store)
    result = make_result(
        name="OpenWeather Demo",
        status_code=401,
        response_time_ms=300,
        status=ProbeStatus.DOWN,
        error_message="HTTP 401"
    )

    observation = await recorder.record(result)

    assert observation.id is not None
    assert observation.target_name == "OpenWeather Demo"
    assert observation.status_code == 401
    assert observation.response_time_ms == 300
    assert observation.status is ProbeStatus.DOWN
    assert observation.error_message == "HTTP 401"
    assert observation.observed_at == FIXED_NOW

    stored = await store.find_all()
    assert len(stored) == 1
    assert stored[0].id == observation.id


@pytest.mark.unit
async def test_record_propagates_storage_error():
    store = MagicMock(spec=ObservationStore)
    store.insert = AsyncMock(side_effect=StorageError("disk full"))

    with pytest.raises(StorageError):
        await Recorder(store).record(make_result())
