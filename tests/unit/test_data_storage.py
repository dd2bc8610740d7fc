"""Unit tests for data storage."""

import json
from datetime import datetime

import pytest

from farmedic.data.models import AppState, HistoryItem, HydrationState, Medication
from farmedic.data.storage import (
    DataManager,
    decode_medications,
    encode_medications,
)
from tests.fixtures.state_samples import preferences_file_content


def _sample_medications() -> list[Medication]:
    return [
        Medication(
            id=1,
            name="Ibuprofen",
            dosage="400 mg",
            times=["08:00", "16:00", "00:00"],
            next_dose="16:00",
            frequency_hours=8.0,
            last_taken=datetime(2024, 1, 1, 8, 5, 30),
        ),
        Medication(
            id=2,
            name="Omeprazol",
            dosage="20 mg",
            times=["07:15", "19:15"],
            next_dose="07:15",
            frequency_hours=12.0,
            reminders_enabled=False,
        ),
    ]


def test_medication_list_round_trip():
    medications = _sample_medications()

    assert decode_medications(encode_medications(medications)) == medications


def test_empty_medication_list_round_trip():
    assert decode_medications(encode_medications([])) == []


@pytest.mark.asyncio
async def test_load_without_file_returns_defaults(data_manager):
    """Test loading when nothing was ever saved."""
    state = await data_manager.load_state()

    assert state == AppState()
    assert state.hydration_state.goal == 8
    assert state.hydration_state.reminders_enabled is True


@pytest.mark.asyncio
async def test_save_and_load_state(data_manager, temp_data_dir):
    """Test that saved state loads back equal."""
    # Given: Full state
    state = AppState(
        medications=_sample_medications(),
        hydration_state=HydrationState(
            last_drunk=datetime(2024, 1, 1, 9, 0),
            daily_intake=2,
            goal=10,
            custom_frequency=1.5,
        ),
        history=[HistoryItem(id=1, type="Hydration", description="250ml of water", time="09:00")],
    )

    # When: Saving and loading with a fresh manager
    await data_manager.save_state(state)
    loaded = await DataManager(data_dir=str(temp_data_dir)).load_state()

    # Then: State should be identical
    assert loaded == state


@pytest.mark.asyncio
async def test_preferences_file_holds_three_text_blobs(data_manager, temp_data_dir):
    await data_manager.save_state(AppState(medications=_sample_medications()))

    content = json.loads((temp_data_dir / "preferences.json").read_text(encoding="utf-8"))

    assert set(content) == {"medications", "hydration_state", "history"}
    assert all(isinstance(value, str) for value in content.values())
    assert json.loads(content["medications"])[0]["name"] == "Ibuprofen"
    assert json.loads(content["history"]) == []


@pytest.mark.asyncio
async def test_load_existing_preferences(data_manager, temp_data_dir):
    """Test loading a preferences file written earlier."""
    (temp_data_dir / "preferences.json").write_text(preferences_file_content())

    state = await data_manager.load_state()

    assert [med.name for med in state.medications] == ["Ibuprofen", "Vitamin D"]
    assert state.medications[0].last_taken == datetime(2024, 1, 1, 8, 5)
    assert state.medications[1].reminders_enabled is False
    assert state.hydration_state.daily_intake == 3
    assert state.history[0].description == "250ml of water"


@pytest.mark.asyncio
async def test_corrupted_section_resets_only_that_section(data_manager, temp_data_dir):
    """Test that a broken medications blob does not affect other sections."""
    (temp_data_dir / "preferences.json").write_text(
        preferences_file_content(medications="[{ not json")
    )

    state = await data_manager.load_state()

    assert state.medications == []
    assert state.hydration_state.daily_intake == 3
    assert len(state.history) == 2


@pytest.mark.asyncio
async def test_section_with_missing_fields_resets_to_default(data_manager, temp_data_dir):
    (temp_data_dir / "preferences.json").write_text(
        preferences_file_content(medications=[{"id": 1, "name": "Ibuprofen"}])
    )

    assert await data_manager.load_medications() == []
    assert (await data_manager.load_hydration_state()).daily_intake == 3
    assert len(await data_manager.load_history()) == 2


@pytest.mark.asyncio
async def test_corrupted_file_returns_defaults(data_manager, temp_data_dir):
    """Test recovery from corrupted preferences file."""
    (temp_data_dir / "preferences.json").write_text("{ invalid json }")

    state = await data_manager.load_state()

    assert state == AppState()


@pytest.mark.asyncio
async def test_invalid_datetime_becomes_none(data_manager, temp_data_dir):
    medications = [dict(med) for med in json.loads(encode_medications(_sample_medications()))]
    medications[0]["last_taken"] = "yesterday-ish"
    (temp_data_dir / "preferences.json").write_text(
        preferences_file_content(medications=medications)
    )

    loaded = await data_manager.load_medications()

    assert loaded[0].last_taken is None
    assert loaded[0].name == "Ibuprofen"


@pytest.mark.asyncio
async def test_atomic_write_success(data_manager, temp_data_dir):
    """Test atomic write pattern."""
    await data_manager.save_state(AppState())

    assert (temp_data_dir / "preferences.json").exists()
    assert not (temp_data_dir / "preferences.json.tmp").exists()


@pytest.mark.asyncio
async def test_atomic_write_failure_recovery(data_manager, temp_data_dir, monkeypatch):
    """Test recovery from write failure."""
    import aiofiles

    class MockAsyncFile:
        async def __aenter__(self):
            raise IOError("Disk full")

        async def __aexit__(self, *args):
            pass

    real_open = aiofiles.open

    def mock_open_fail(*args, **kwargs):
        if "w" in kwargs.get("mode", ""):
            return MockAsyncFile()
        return real_open(*args, **kwargs)

    monkeypatch.setattr("aiofiles.open", mock_open_fail)

    with pytest.raises(IOError):
        await data_manager.save_state(AppState())

    assert not (temp_data_dir / "preferences.json.tmp").exists()
    assert not (temp_data_dir / "preferences.json").exists()


@pytest.mark.asyncio
async def test_clear(data_manager, temp_data_dir):
    assert await data_manager.clear() is False

    await data_manager.save_state(AppState())
    assert await data_manager.clear() is True
    assert not (temp_data_dir / "preferences.json").exists()
