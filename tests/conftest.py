from __future__ import annotations

import json

import pytest

from tableprojector.config.mapping import default_mapping


@pytest.fixture
def payee_records() -> list[dict]:
    return [
        {"caseIssueId": "a1", "caseIssueName": "Wage Claim", "citationForm": "12-CV", "factor": 0.25},
        {"caseIssueId": "a2", "caseIssueName": "Overtime", "citationForm": "14-CV", "factor": 0.75},
    ]


@pytest.fixture
def payee_payload(payee_records) -> str:
    return json.dumps(payee_records)


@pytest.fixture
def mapping():
    return default_mapping()
