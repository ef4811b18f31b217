"""
Tests for Life OS models

Test strategy:
1. Unit tests for individual components (models, formulas, validators)
2. Store tests against in-memory storage and a fake remote
3. No real API calls in tests (use mocks)
"""

import json

import pytest
from pydantic import ValidationError

from lifeos.models import (
    AppData,
    AssetClass,
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Goal,
    Habit,
    Investment,
    Liability,
    LoanType,
    Task,
    TaxProfile,
    Transaction,
    TransactionType,
)
from lifeos.models.validation import VALID, ValidationOutcome
from lifeos.store import build_default_data

from tests.conftest import NOW


class TestEntityModels:
    """Tests for aggregate entity models."""

    def test_task_defaults(self):
        """Test a task created with only a title."""
        task = Task(id="t1", title="Write report")
        assert task.completed is False
        assert task.priority.value == "P4"
        assert task.category.value == "Inbox"

    def test_task_strips_whitespace(self):
        """Test that whitespace is stripped from titles."""
        task = Task(id="t1", title="  Stretch  ")
        assert task.title == "Stretch"

    def test_blank_due_date_is_none(self):
        """Test that an empty form value clears an optional date."""
        task = Task(id="t1", title="Call bank", due_date="")
        assert task.due_date is None

    def test_entities_are_immutable(self):
        """Test that entities cannot be modified in place."""
        habit = Habit(id="h1", title="Walk")
        with pytest.raises(ValidationError):
            habit.streak = 3

    def test_transaction_rejects_non_positive_amount(self):
        """Test that amounts must be positive."""
        with pytest.raises(ValidationError):
            Transaction(
                id="x", amount=0, description="Nothing",
                type=TransactionType.EXPENSE, date=NOW,
            )

    def test_liability_paid_cannot_exceed_total(self):
        """Test that repaid principal is bounded by the loan amount."""
        with pytest.raises(ValidationError, match="Paid amount cannot exceed total amount"):
            Liability(id="l1", name="Loan", total_amount=1000, paid_amount=1500, start_date=NOW)

    def test_liability_outstanding(self):
        """Test outstanding principal."""
        loan = Liability(
            id="l1", name="Bike", total_amount=80000, paid_amount=30000,
            start_date=NOW, loan_type=LoanType.PERSONAL,
        )
        assert loan.outstanding == 50000

    def test_tax_profile_totals(self):
        """Test gross income and deduction totals."""
        profile = TaxProfile(
            salary=1_000_000, other_sources=20_000,
            deduction_80c=150_000, deduction_80d=25_000,
        )
        assert profile.gross_income == 1_020_000
        assert profile.total_deductions == 175_000


class TestSerialization:
    """Tests for the persisted (camelCase) document shape."""

    def test_camel_case_field_names(self):
        """Test that documents use the stored field names."""
        doc = Task(id="t1", title="Plan", is_today_focus=True).to_document()
        assert doc["isTodayFocus"] is True
        assert "is_today_focus" not in doc

    def test_irregular_aliases(self):
        """Test fields whose stored names don't follow plain camelCase."""
        investment = Investment(
            id="i1", name="Index", asset_class=AssetClass.EQUITY,
            is_sip=True, monthly_sip_amount=500,
        )
        doc = investment.to_document()
        assert doc["isSIP"] is True
        assert doc["monthlySIPAmount"] == 500
        assert doc["assetClass"] == "Equity (Growth)"

        goal = Goal(id="g1", title="House", required_sip=1200)
        assert goal.to_document()["requiredSIP"] == 1200

        tax = TaxProfile(deduction_80c=150_000).to_document()
        assert tax["deduction80C"] == 150_000
        assert "deduction80D" in tax and "deduction80CCD" in tax

    def test_parse_stored_document(self):
        """Test that a camelCase document parses into models."""
        investment = Investment.model_validate({
            "id": "i1",
            "name": "Gold",
            "assetClass": "Commodity (Hedge)",
            "isSIP": False,
            "monthlySIPAmount": 0,
        })
        assert investment.asset_class == AssetClass.COMMODITY

    def test_partial_document_takes_defaults(self):
        """Test that absent root fields take their type defaults."""
        data = AppData.model_validate({"missionStatement": "Be kind"})
        assert data.mission_statement == "Be kind"
        assert data.tasks == ()
        assert data.savings_config.months_multiplier == 6
        assert data.risk_profile is None

    def test_root_round_trip(self):
        """Test that a serialized root parses back field for field."""
        root = build_default_data(NOW)
        text = json.dumps(root.to_document())
        restored = AppData.model_validate(json.loads(text))
        assert restored == root
        assert restored.financial_tools[2].fields == root.financial_tools[2].fields


class TestValidationOutcome:
    """Tests for guard results."""

    def test_truthiness(self):
        """Test that an outcome is truthy only when valid."""
        assert VALID
        assert not ValidationOutcome(valid=False, error="bad")


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        """Test AuditEvent creation."""
        event = AuditEvent(
            event_type=AuditEventType.STATE_LOADED,
            description="Loaded",
        )
        assert event.event_id is not None
        assert event.timestamp.tzinfo is not None
        assert event.severity == AuditSeverity.INFO

    def test_builder_captures_error(self):
        """Test that failure events carry the error type and message."""
        event = AuditEventBuilder.remote_write_failed("user-1", TimeoutError("slow"))
        assert event.event_type == AuditEventType.REMOTE_WRITE_FAILED
        assert event.severity == AuditSeverity.WARNING
        assert event.error_type == "TimeoutError"
        assert event.error_message == "slow"

    def test_to_log_dict(self):
        """Test conversion to structured log fields."""
        event = AuditEventBuilder.mutation_applied("add_task", "tasks", "t1")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "mutation_applied"
        assert log_dict["entity_type"] == "tasks"
        assert log_dict["entity_id"] == "t1"
        assert log_dict["details"] == {"operation": "add_task"}
