import sys, os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

import pytest

from rgpd_gateway import InMemoryConsentRepo, LLMInput, MemoryAuditSink


@pytest.fixture
def audit():
    return MemoryAuditSink()


@pytest.fixture
def consent_repo():
    return InMemoryConsentRepo()


def make_input(text=None, messages=None, *, tenant_id="tenant-a", actor_id=None,
               purpose="ai_processing"):
    return LLMInput(
        purpose=purpose,
        tenant_id=tenant_id,
        policy="P0",
        actor_id=actor_id,
        text=text,
        messages=messages,
    )
