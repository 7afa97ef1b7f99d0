import pytest

from conftest import FakeCapability
from incident_manager.autopilot.ai.classifier import (
    MANUAL_REVIEW_MESSAGE,
    AIClassifier,
    KeywordClassifier,
    fallback_analysis,
    infer_target,
)
from incident_manager.autopilot.models import Priority, RemediationAction, StaffMember
from incident_manager.autopilot.staff import AI_ASSISTANT, StaffDirectory
from incident_manager.errors import UpstreamUnavailable


@pytest.mark.parametrize(
    "title, description, expected",
    [
        ("Database server crashed", "connections refused", ("server_down", Priority.CRITICAL, RemediationAction.RESTART_SERVICE)),
        ("Checkout is down", "", ("server_down", Priority.CRITICAL, RemediationAction.RESTART_SERVICE)),
        ("High CPU", "api-server at 92%", ("high_cpu", Priority.HIGH, RemediationAction.SCALE_UP)),
        ("Requests are SLOW", "p99 above 5s", ("high_cpu", Priority.HIGH, RemediationAction.SCALE_UP)),
        ("Redis memory", "usage climbing", ("memory_leak", Priority.HIGH, RemediationAction.CLEAR_CACHE)),
        ("Heap leak suspected", "", ("memory_leak", Priority.HIGH, RemediationAction.CLEAR_CACHE)),
        ("Certificate expires in 3 days", "TLS handshake warnings", ("unknown", Priority.MEDIUM, RemediationAction.NOTIFY_HUMAN)),
    ],
)
def test_keyword_policy(title, description, expected):
    result = KeywordClassifier().analyze(title, description)

    assert (result.type, result.priority, result.action) == expected
    assert result.recommendation


def test_keyword_precedence_down_beats_cpu_and_memory():
    result = KeywordClassifier().analyze("CPU and memory spiked", "then the node went down")

    assert result.action is RemediationAction.RESTART_SERVICE


def test_keyword_cpu_beats_memory():
    result = KeywordClassifier().analyze("cpu pressure", "memory fine")

    assert result.action is RemediationAction.SCALE_UP


@pytest.mark.parametrize(
    "text, target",
    [
        ("Database server crashed, connections refused", "database"),
        ("postgres primary unreachable", "database"),
        ("payment-api latency", "api"),
        ("Redis cache evictions", "cache"),
        ("auth-service returns 503", "auth-service"),
        ("Authentication tokens rejected", "auth-service"),
        ("Certificate expiring soon", None),
    ],
)
def test_infer_target(text, target):
    assert infer_target(text) == target


@pytest.mark.parametrize(
    "title, assignee",
    [
        ("Database server crashed", "Anna"),
        ("payment api is slow", "Johan"),
        ("redis cache memory leak", "Lisa"),
        ("Something odd happened", AI_ASSISTANT),
    ],
)
def test_keyword_assignment_by_specialization(title, assignee):
    assert KeywordClassifier().analyze(title, "").assigned_to == assignee


def test_keyword_assignment_without_staff_uses_assistant():
    classifier = KeywordClassifier(StaffDirectory([]))

    assert classifier.analyze("Database crashed", "").assigned_to == AI_ASSISTANT


@pytest.mark.asyncio
async def test_keyword_classify_returns_wire_shape():
    result = await KeywordClassifier().classify("API server crashed", "")

    assert not result.degraded
    assert result.value["action"] == "restart_service"
    assert result.value["target"] == "api"
    assert result.value["assignedTo"] == "Johan"


@pytest.mark.asyncio
async def test_ai_classifier_passes_roster_and_keeps_answer():
    capability = FakeCapability(
        {
            "type": "high_cpu",
            "priority": "high",
            "action": "scale_up",
            "target": "api",
            "recommendation": "Add two more api replicas.",
            "assignedTo": "Johan",
        }
    )
    result = await AIClassifier(capability).classify("Payment API slow", "CPU at 92%")

    assert not result.degraded
    assert result.value["assignedTo"] == "Johan"
    prompt = capability.prompts[0]
    assert "Johan: API & Performance" in prompt
    assert "Payment API slow" in prompt


@pytest.mark.asyncio
async def test_ai_classifier_replaces_unknown_assignee():
    capability = FakeCapability(
        {
            "type": "unknown",
            "priority": "low",
            "action": "notify_human",
            "target": "null",
            "recommendation": "Have a look.",
            "assignedTo": "Bob",
        }
    )
    result = await AIClassifier(capability).classify("Odd log line", "")

    assert result.value["assignedTo"] == AI_ASSISTANT
    assert result.value["target"] is None


@pytest.mark.asyncio
async def test_ai_classifier_without_staff_assigns_assistant():
    capability = FakeCapability(
        {"type": "x", "priority": "low", "action": "none", "target": None, "recommendation": "-", "assignedTo": "Anna"}
    )
    result = await AIClassifier(capability, staff=StaffDirectory([])).classify("t", "d")

    assert result.value["assignedTo"] == AI_ASSISTANT


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [UpstreamUnavailable("503 from router", source="llm"), ValueError("bad"), "plain text"],
)
async def test_ai_classifier_falls_back_on_errors(response):
    result = await AIClassifier(FakeCapability(response)).classify("t", "d")

    assert result.degraded
    assert result.value == fallback_analysis().to_dict()
    assert result.value["recommendation"] == MANUAL_REVIEW_MESSAGE
    assert result.value["assignedTo"] == AI_ASSISTANT


@pytest.mark.asyncio
async def test_ai_classifier_times_out_to_fallback():
    capability = FakeCapability({"type": "late"}, delay=1.0)
    result = await AIClassifier(capability, timeout=0.01).classify("t", "d")

    assert result.degraded
    assert result.value["action"] == "notify_human"


@pytest.mark.asyncio
async def test_ai_classifier_leaves_schema_problems_for_validation():
    capability = FakeCapability(
        {"type": "server_down", "priority": "p1", "action": "reboot_everything", "target": "api", "recommendation": "x"}
    )
    result = await AIClassifier(capability).classify("t", "d")

    assert not result.degraded
    assert result.value["action"] == "reboot_everything"


def test_custom_roster_match_skips_assistant():
    staff = StaffDirectory(
        [
            StaffMember(id="9", name=AI_ASSISTANT, specialization="Cache everything"),
            StaffMember(id="10", name="Mira", specialization="Cache & CDN"),
        ]
    )

    assert staff.match(["cache"]).name == "Mira"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "answered, target",
    [
        ("Redis", "cache"),
        ("redis cache", "cache"),
        ("Cache", "cache"),
        ("payment-api", "api"),
        ("Postgres primary", "database"),
        ("auth-service", "auth-service"),
        ("checkout-worker", None),
        ("N/A", None),
    ],
)
async def test_ai_targets_map_onto_known_resources(answered, target):
    capability = FakeCapability(
        {
            "type": "memory_leak",
            "priority": "high",
            "action": "clear_cache",
            "target": answered,
            "recommendation": "Flush the cache.",
            "assignedTo": "Lisa",
        }
    )
    result = await AIClassifier(capability).classify("Redis memory leak", "")

    assert result.value["target"] == target


@pytest.mark.asyncio
async def test_ai_and_keyword_paths_agree_on_target():
    title = "Redis cache memory leak"
    capability = FakeCapability(
        {
            "type": "memory_leak",
            "priority": "high",
            "action": "clear_cache",
            "target": "Redis",
            "recommendation": "Flush the cache.",
            "assignedTo": "Lisa",
        }
    )
    ai_result = await AIClassifier(capability).classify(title, "")

    assert ai_result.value["target"] == KeywordClassifier().analyze(title, "").target


@pytest.mark.asyncio
async def test_analysis_prompt_lists_known_targets():
    capability = FakeCapability({"type": "unknown"})
    await AIClassifier(capability).classify("t", "d")

    assert '"api" | "auth-service" | "database" | "cache" | null' in capability.prompts[0]
