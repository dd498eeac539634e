"""
Shared pytest fixtures for EVDash.

`make_record` builds a complete record with sensible defaults so each test
only spells out the fields it cares about. `sample_records` is a small mixed
dataset used across the engine tests.
"""

import pytest

from evdash.models import (
    CAFV, CITY, COUNTY, EV_TYPE, MAKE, MODEL, MODEL_YEAR, POSTAL_CODE, STATE, VIN,
)

BEV = "Battery Electric Vehicle (BEV)"
PHEV = "Plug-in Hybrid Electric Vehicle (PHEV)"

CSV_HEADER = ",".join([
    VIN, COUNTY, CITY, STATE, POSTAL_CODE, MODEL_YEAR, MAKE, MODEL, EV_TYPE,
    f'"{CAFV}"', "Electric Range",
])


def make_record(**fields):
    """Record with defaults; keyword names are column names with spaces as '_'."""
    rec = {
        VIN: "5YJ3E1EA0K",
        COUNTY: "King",
        CITY: "Seattle",
        STATE: "WA",
        POSTAL_CODE: "98101",
        MODEL_YEAR: "2020",
        MAKE: "TESLA",
        MODEL: "MODEL 3",
        EV_TYPE: BEV,
        CAFV: "Clean Alternative Fuel Vehicle Eligible",
    }
    for key, value in fields.items():
        rec[key.replace("_", " ")] = value
    return rec


@pytest.fixture
def sample_records():
    return [
        make_record(Make="TESLA", Model="MODEL Y", Model_Year="2021", County="King", City="Seattle"),
        make_record(Make="NISSAN", Model="LEAF", Model_Year="2019", County="Snohomish", City="Everett"),
        make_record(Make="TESLA", Model="MODEL 3", Model_Year="2020", County="King", City="Bellevue"),
        make_record(Make="CHEVROLET", Model="VOLT", Model_Year="2019", County="Pierce", City="Tacoma",
                    Electric_Vehicle_Type=PHEV),
        make_record(Make="TESLA", Model="MODEL S", Model_Year="2021", County="Snohomish", City="Everett"),
        make_record(Make="KIA", Model="NIRO", Model_Year="2021", County="King", City="Seattle",
                    Electric_Vehicle_Type=PHEV),
    ]


@pytest.fixture
def records_23():
    """23 records with distinct VINs, for paging tests."""
    return [make_record(**{"VIN_(1-10)": f"VIN{i:04d}"}) for i in range(23)]
