"""
Tests for the aggregate state store.

Stores are loaded from empty in-memory storage, so they start from the
default document with a fixed clock and predictable ids.
"""

import asyncio
import json
from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from lifeos.finance.formulas import emi, plan_financial_goal, risk_profile_for_score
from lifeos.models import (
    FinancialToolStatus,
    GoalHorizon,
    InterestCalculation,
    LifeGoal,
    LifeGoalType,
    MasterCategory,
    Necessity,
    Priority,
    RiskLabel,
    SavingsConfig,
    TaskCategory,
    TransactionType,
)
from lifeos.models.audit import AuditEventType
from lifeos.queries import TransactionQuery, TransactionQueryExecutor
from lifeos.store import (
    DEFAULT_STORAGE_KEY,
    DataStore,
    LoadState,
    StoreNotLoadedError,
    build_default_data,
)

from tests.conftest import NOW


def stored_document(local_store):
    return json.loads(local_store.get_item(DEFAULT_STORAGE_KEY))


class TestLoading:
    """Tests for the load sequence."""

    def test_first_run_loads_defaults(self, store):
        """Test that empty storage without a session yields the default shape."""
        assert store.load_state == LoadState.LOADED
        assert store.load_source == "defaults"
        assert store.state == build_default_data(NOW)

    def test_mutation_before_load_raises(self, make_store):
        store = make_store(load=False)
        assert store.load_state == LoadState.UNINITIALIZED
        with pytest.raises(StoreNotLoadedError):
            store.add_task(title="Too early")
        with pytest.raises(StoreNotLoadedError):
            store.state

    def test_load_is_idempotent(self, store):
        """Test that a second load returns the current root untouched."""
        store.add_task(title="Keep me")
        before = store.state
        assert asyncio.run(store.load()) is before

    def test_load_notifies_subscribers(self, make_store):
        store = make_store(load=False)
        seen = []
        store.subscribe(seen.append)
        asyncio.run(store.load())
        assert seen == [store.state]


class TestImmutability:
    """Tests that mutations derive new roots."""

    def test_previous_root_is_unchanged(self, store):
        before = store.state
        snapshot = before.to_document()

        store.add_task(title="New task")
        store.toggle_habit("1", "2024-03-15")
        store.set_financial_tool_field("2", "Number", "ABCDE1234F")

        assert store.state is not before
        assert before.to_document() == snapshot
        assert len(store.state.tasks) == len(before.tasks) + 1
        assert before.habits[0].history == {}
        assert before.financial_tools[1].fields["Number"] == ""

    def test_nested_maps_are_read_only(self, store):
        store.toggle_habit("1", "2024-03-15")
        before = store.state

        with pytest.raises(TypeError):
            before.habits[0].history["2024-03-01"] = True
        with pytest.raises(TypeError):
            before.financial_tools[1].fields["Number"] = "changed"
        assert before.habits[0].history == {"2024-03-15": True}
        assert store.state.to_document()["habits"][0]["history"] == {"2024-03-15": True}

    def test_unchanged_collections_are_shared(self, store):
        before = store.state
        store.add_task(title="New task")
        assert store.state.habits is before.habits

    def test_unknown_id_is_a_no_op(self, store, local_store):
        before = store.state
        assert store.update_task("missing", title="Nope") is None
        assert store.delete_habit("missing") is False
        assert store.toggle_habit("missing", "2024-03-15") is None
        assert store.state is before
        assert local_store.get_item(DEFAULT_STORAGE_KEY) is None

    def test_invalid_input_leaves_root_untouched(self, store, local_store):
        before = store.state
        with pytest.raises(ValidationError):
            store.add_transaction(amount=-50, description="Refund", type=TransactionType.EXPENSE)
        with pytest.raises(ValidationError):
            store.update_task("1", priority="P9")
        with pytest.raises(ValidationError):
            store.add_transaction(
                amount=float("inf"), description="Oops", type=TransactionType.EXPENSE,
            )
        with pytest.raises(ValidationError):
            store.update_tax_profile(salary=float("nan"))
        assert store.state is before
        assert local_store.get_item(DEFAULT_STORAGE_KEY) is None

    def test_unknown_update_field_rejected(self, store):
        with pytest.raises(TypeError, match="Unknown Task field"):
            store.update_task("1", colour="red")

    def test_update_never_changes_id(self, store):
        task = store.update_task("1", id="hijack", title="Renamed")
        assert task.id == "1"
        assert store.state.tasks[0].title == "Renamed"


class TestPlannerOperations:
    """Tests for tasks, habits, goals and contacts."""

    def test_task_crud(self, store):
        task = store.add_task(title="Book flights", priority=Priority.P2)
        assert task.id == "id-100"
        assert store.state.tasks[-1] == task

        store.update_task(task.id, completed=True)
        assert store.state.tasks[-1].completed is True

        assert store.delete_task(task.id) is True
        assert task.id not in {t.id for t in store.state.tasks}

    def test_new_habit_starts_empty(self, store):
        habit = store.add_habit(title="Journal", streak=40, history={"2024-01-01": True})
        assert habit.streak == 0
        assert habit.history == {}

    def test_toggle_habit_adjusts_streak(self, store):
        """Test that marking a day adds one and un-marking takes one away."""
        store.toggle_habit("1", date(2024, 3, 15))
        habit = store.state.habits[0]
        assert habit.history == {"2024-03-15": True}
        assert habit.streak == 6

        store.toggle_habit("1", "2024-03-15")
        habit = store.state.habits[0]
        assert habit.history == {"2024-03-15": False}
        assert habit.streak == 5

    def test_toggle_habit_streak_never_negative(self, store):
        habit = store.add_habit(title="Run")
        store.update_habit(habit.id, history={"2024-03-14": True})
        toggled = store.toggle_habit(habit.id, "2024-03-14")
        assert toggled.history == {"2024-03-14": False}
        assert toggled.streak == 0

    def test_financial_goal_is_planned_on_creation(self, store):
        goal = store.add_goal(
            title="Home down payment", is_financial=True,
            current_cost=1_000_000, years_away=5, inflation_rate=6, progress=30,
        )
        plan = plan_financial_goal(1_000_000, 5, 6)
        assert goal.future_value == plan.future_value
        assert goal.required_sip == plan.required_sip
        assert goal.horizon == GoalHorizon.FIVE_YEARS
        assert goal.progress == 0

    def test_plain_goal_is_not_planned(self, store):
        goal = store.add_goal(title="Learn Spanish", progress=10)
        assert goal.future_value is None
        assert goal.progress == 10

    def test_goal_update_and_delete(self, store):
        store.update_goal("1", progress=60)
        assert store.state.goals[0].progress == 60
        assert store.delete_goal("1")
        assert store.state.goals == ()

    def test_contact_crud(self, store):
        contact = store.add_contact(name="Priya", company="Acme")
        assert contact.last_contacted == NOW
        store.update_contact(contact.id, stage="Won", deal_value=5_000)
        assert store.state.contacts[-1].stage.value == "Won"
        assert store.delete_contact(contact.id)

    def test_set_life_goals_creates_vision_tasks_once(self, store):
        goals = [
            LifeGoal(id="lg1", title="Financial freedom", type=LifeGoalType.MUST_HAVE),
            LifeGoal(id="lg2", title="Sail the coast", type=LifeGoalType.GOOD_TO_HAVE),
        ]
        store.set_life_goals(goals)

        vision = [t for t in store.state.tasks if t.category == TaskCategory.VISION]
        assert [t.title for t in vision] == [
            "Plan strategy for: Financial freedom",
            "Plan strategy for: Sail the coast",
        ]
        assert [t.priority for t in vision] == [Priority.P1, Priority.P3]

        store.set_life_goals(goals + [LifeGoal(id="lg3", title="Write a book")])
        assert len(store.state.life_goals) == 3
        assert len([t for t in store.state.tasks if t.category == TaskCategory.VISION]) == 2

    def test_update_mission(self, store):
        store.update_mission("Build calmly.")
        assert store.state.mission_statement == "Build calmly."


class TestMoneyOperations:
    """Tests for transactions, wishlist and the balance sheet."""

    def test_transactions_are_prepended(self, store):
        tx = store.add_transaction(amount=75, description="Taxi", type=TransactionType.EXPENSE)
        assert store.state.transactions[0] == tx
        assert tx.date == NOW

    def test_month_filter_after_adding_expense(self, store):
        """Test that a March expense shows up in March totals only."""
        def month_total(month):
            query = TransactionQuery.for_month(2024, month, type=TransactionType.EXPENSE)
            return TransactionQueryExecutor(store.state.transactions).total(query)

        march_before, april_before = month_total(3), month_total(4)
        store.add_transaction(
            amount=150, description="Groceries", type=TransactionType.EXPENSE,
            category="Food", master_category=MasterCategory.CONSUMPTION,
            necessity=Necessity.NEED, date=datetime(2024, 3, 1, tzinfo=timezone.utc),
        )
        assert month_total(3) == march_before + 150
        assert month_total(4) == april_before

    def test_wishlist_item_is_stamped(self, store):
        item = store.add_wishlist_item(name="Headphones", amount=250)
        assert item.created_at == NOW
        assert store.delete_wishlist_item(item.id)
        assert store.state.wishlist == ()

    def test_convert_wishlist_item_is_single_mutation(self, store):
        item = store.add_wishlist_item(
            name="Camera", amount=900, category=MasterCategory.GROWTH,
        )
        roots = []
        store.subscribe(roots.append)

        tx = store.convert_wishlist_item_to_expense(item.id)

        assert len(roots) == 1
        assert store.state.wishlist == ()
        assert store.state.transactions[0] == tx
        assert tx.amount == 900
        assert tx.description == "Camera"
        assert tx.category == "Wishlist"
        assert tx.necessity == Necessity.WANT
        assert tx.master_category == MasterCategory.GROWTH
        assert store.convert_wishlist_item_to_expense(item.id) is None

    def test_liability_emi_computed_when_omitted(self, store, local_store):
        """Test that a loan without an EMI gets one computed and persisted."""
        loan = store.add_liability(
            name="Scooter", total_amount=15_000, interest_rate=8.5,
            tenure_months=60, calculation_method=InterestCalculation.REDUCING,
        )
        expected = emi(15_000, 8.5, 60, InterestCalculation.REDUCING)
        assert loan.monthly_payment == pytest.approx(expected)
        assert loan.start_date == NOW
        persisted = stored_document(local_store)["liabilities"][-1]
        assert persisted["monthlyPayment"] == pytest.approx(expected)

    def test_liability_explicit_emi_kept(self, store):
        loan = store.add_liability(name="Phone", total_amount=1_200, monthly_payment=100)
        assert loan.monthly_payment == 100

    def test_update_liability_clamps_paid_amount(self, store):
        assert store.update_liability("1", paid_amount=99_999).paid_amount == 15_000
        assert store.record_loan_payment("1", -20).paid_amount == 0
        assert store.record_loan_payment("1", 6_000).paid_amount == 6_000

    def test_resolve_helpers(self, store):
        goal = store.add_goal(title="Retirement", is_financial=True, current_cost=100, years_away=20)
        investment = store.add_investment(
            name="Index Fund", asset_class="Equity (Growth)", linked_goal_id=goal.id,
        )
        assert store.goal_for_investment(investment.id) == goal
        assert store.resolve_liability("1").name == "Car Loan"

        store.delete_goal(goal.id)
        assert store.goal_for_investment(investment.id) is None
        assert store.resolve_goal(None) is None

    def test_balance_sheet_crud(self, store):
        asset = store.add_asset(name="Gold", value=3_000, type="Investment")
        store.update_asset(asset.id, value=3_500)
        assert store.state.assets[-1].value == 3_500
        assert store.delete_asset(asset.id)

        policy = store.add_insurance(name="Family Floater", premium=600)
        store.update_insurance(policy.id, sum_assured=500_000)
        assert store.state.insurance_policies[-1].sum_assured == 500_000
        assert store.delete_insurance(policy.id)

        store.update_investment("1", current_value=26_000)
        assert store.state.investments[0].current_value == 26_000
        assert store.delete_investment("3")
        assert store.delete_liability("1")
        assert store.state.liabilities == ()


class TestEngineOperations:
    """Tests for tools, income opportunities and singletons."""

    def test_income_opportunity_is_scored(self, store):
        opp = store.add_income_opportunity(
            name="Consulting", interest=5, capability=4, effortlessness=2, return_potential=5,
        )
        assert opp.score == 16
        assert store.delete_income_opportunity(opp.id)

    def test_update_financial_tool_stamps_time(self, local_store, audit_logger):
        later = datetime(2024, 4, 1, tzinfo=timezone.utc)
        store = DataStore(local_store, audit_logger=audit_logger, clock=lambda: later)
        asyncio.run(store.load())
        tool = store.update_financial_tool("1", status=FinancialToolStatus.PENDING)
        assert tool.status == FinancialToolStatus.PENDING
        assert tool.last_updated == later

    def test_set_financial_tool_field_adds_arbitrary_keys(self, store):
        tool = store.set_financial_tool_field("2", "Number", "ABCDE1234F")
        tool = store.set_financial_tool_field("2", "Aadhaar Seeded", "Yes")
        assert tool.fields == {
            "Number": "ABCDE1234F",
            "Linked to Bank": "No",
            "Aadhaar Seeded": "Yes",
        }

    def test_toggle_financial_tool(self, store):
        assert store.toggle_financial_tool("3").status == FinancialToolStatus.COMPLETE
        assert store.toggle_financial_tool("3").status == FinancialToolStatus.INCOMPLETE

    def test_configure_savings(self, store):
        config = store.configure_savings(40_000, is_job_stable=False, has_dependents=True)
        assert config.months_multiplier == 12
        assert config.target_amount == 480_000
        assert config.is_configured
        assert store.state.savings_config == config

    def test_update_savings_config_replaces(self, store):
        store.update_savings_config(SavingsConfig(monthly_expense=100))
        assert store.state.savings_config == SavingsConfig(monthly_expense=100)

    def test_update_income_target_accepts_document(self, store):
        store.update_income_target({"needs": 10, "wants": 5, "taxBuffer": 1})
        assert store.state.income_target.total == 16

    def test_update_growth_strategy_merges(self, store):
        store.update_growth_strategy(unfair_advantage="Writing")
        store.update_growth_strategy(skills_to_acquire=["Sales"])
        strategy = store.state.growth_strategy
        assert strategy.unfair_advantage == "Writing"
        assert strategy.skills_to_acquire == ("Sales",)

    def test_update_tax_profile_merges(self, store):
        store.update_tax_profile(salary=1_200_000)
        store.update_tax_profile(deduction_80c=150_000)
        profile = store.state.tax_profile
        assert profile.salary == 1_200_000
        assert profile.deduction_80c == 150_000

    def test_set_risk_profile(self, store):
        store.set_risk_profile(risk_profile_for_score(27))
        assert store.state.risk_profile.label == RiskLabel.AGGRESSIVE
        store.set_risk_profile(None)
        assert store.state.risk_profile is None


class TestSubscribers:
    """Tests for change notification."""

    def test_subscribers_receive_new_root(self, store):
        seen = []
        unsubscribe = store.subscribe(seen.append)
        store.add_task(title="One")
        unsubscribe()
        store.add_task(title="Two")
        assert len(seen) == 1
        assert seen[0].tasks[-1].title == "One"

    def test_subscriber_errors_are_contained(self, store, audit_logger):
        def broken(root):
            raise RuntimeError("render failed")

        seen = []
        store.subscribe(broken)
        store.subscribe(seen.append)

        task = store.add_task(title="Still saved")

        assert store.state.tasks[-1] == task
        assert len(seen) == 1
        failures = [
            e for e in audit_logger.recent_events()
            if e.event_type == AuditEventType.SUBSCRIBER_FAILED
        ]
        assert failures and failures[0].error_message == "render failed"

    def test_mutations_are_audited(self, store, audit_logger):
        task = store.add_task(title="Audited")
        event = audit_logger.recent_events(1)[0]
        assert event.event_type == AuditEventType.MUTATION_APPLIED
        assert event.entity_type == "tasks"
        assert event.entity_id == task.id
