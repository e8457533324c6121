from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import List
import sys

import pytest

# Ensure project root is on sys.path for absolute imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from gridbook import Workbook


@pytest.fixture
def people() -> List[dict]:
    return [{"name": "John", "age": 30}, {"name": "Jane", "age": 25}]


@pytest.fixture
def scores() -> List[dict]:
    return [
        {"team": "A", "name": "Ann", "score": 1},
        {"team": "B", "name": "Bob", "score": 2},
        {"team": "A", "name": "Cid", "score": 3},
    ]


@pytest.fixture
def sales() -> List[dict]:
    return [
        {"region": "North", "product": "Bolts", "sales": 10, "day": date(2024, 1, 1)},
        {"region": "North", "product": "Nuts", "sales": 5, "day": date(2024, 1, 3)},
        {"region": "South", "product": "Bolts", "sales": 7, "day": date(2024, 1, 8)},
    ]


@pytest.fixture
def people_workbook(people) -> Workbook:
    workbook = Workbook()
    sheet = workbook.create_sheet("People")
    sheet.append_header(["Name", "Age"])
    sheet.append_records(people)
    return workbook
