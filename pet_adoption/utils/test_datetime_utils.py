# pet_adoption/utils/test_datetime_utils.py
"""
Pruebas de las utilidades de fecha.

Uso: python -m pytest pet_adoption/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timedelta, timezone
from pet_adoption.utils.datetime_utils import DateTimeUtils


def test_parse_iso_datetime():
    """Distintas variantes ISO se normalizan a UTC."""
    test_cases = [
        "2024-01-15T10:30:00Z",
        "2024-01-15T10:30:00+02:00",
        "2024-01-15T10:30:00.123456Z",
        "2024-01-15T10:30:00"
    ]

    for iso_string in test_cases:
        dt = DateTimeUtils.parse_iso_datetime(iso_string)
        assert isinstance(dt, datetime)
        assert dt.tzinfo == timezone.utc

    shifted = DateTimeUtils.parse_iso_datetime("2024-01-15T10:30:00+02:00")
    assert shifted.hour == 8


def test_for_firestore():
    """date -> datetime y datetime sin zona -> UTC, también anidados."""
    test_data = {
        'fecha': date(2020, 1, 15),
        'created_at': datetime(2024, 1, 15, 10, 30),
        'nested': {'event_date': date(2023, 12, 25)},
        'list_data': [{'created_at': datetime(2024, 1, 1)}]
    }

    converted = DateTimeUtils.for_firestore(test_data)

    assert isinstance(converted['fecha'], datetime)
    assert isinstance(converted['nested']['event_date'], datetime)
    assert converted['list_data'][0]['created_at'].tzinfo == timezone.utc
    assert converted['fecha'].tzinfo == timezone.utc


def test_from_firestore_parses_known_date_fields_only():
    data = {
        'created_at': "2024-01-15T10:30:00Z",
        'nombre': "2024-01-15T10:30:00Z",
        'borrado_en': None,
    }

    converted = DateTimeUtils.from_firestore(data)

    assert isinstance(converted['created_at'], datetime)
    assert converted['nombre'] == "2024-01-15T10:30:00Z"
    assert converted['borrado_en'] is None


def test_is_expired():
    assert DateTimeUtils.is_expired(DateTimeUtils.now() - timedelta(seconds=1))
    assert not DateTimeUtils.is_expired(DateTimeUtils.now() + timedelta(minutes=5))
    assert DateTimeUtils.is_expired(None)
    assert DateTimeUtils.is_expired("no-es-fecha")


def test_error_handling():
    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("invalid-date")

    with pytest.raises(ValueError):
        DateTimeUtils.parse_iso_datetime("")
