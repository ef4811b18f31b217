"""
Aggregate State Store

DataStore owns the single AppData root. Every mutation:
1. Derives a new root from the current one (the old root is never touched)
2. Writes the whole document to local storage before returning
3. Schedules a fire-and-forget remote write
4. Notifies subscribers

DESIGN DECISION: The store is an ordinary object, not a module-level
singleton. Storage, audit logging, the clock and id generation are all
injected, so tests build as many independent stores as they need.

Loading tries, in order: the remote record of the signed-in user, the
local document merged onto the defaults, and finally the defaults.
Storage failures during load are logged and fall through to the next
source; they never reach the caller.
"""

import asyncio
import json
import threading
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Callable, Optional, Union
from uuid import uuid4

from pydantic import ValidationError

from lifeos.audit import AuditLogger
from lifeos.finance.formulas import (
    emergency_fund_multiplier,
    emi,
    opportunity_score,
    plan_financial_goal,
)
from lifeos.models.app_data import AppData
from lifeos.models.base import Entity, LifeModel
from lifeos.models.finance import (
    FinancialAsset,
    FinancialTool,
    FinancialToolStatus,
    GrowthStrategy,
    IncomeOpportunity,
    IncomeTarget,
    InsurancePolicy,
    Investment,
    Liability,
    Necessity,
    RiskProfile,
    SavingsConfig,
    TaxProfile,
    Transaction,
    TransactionType,
    WishlistItem,
)
from lifeos.models.planner import (
    Contact,
    Goal,
    Habit,
    LifeGoal,
    LifeGoalType,
    Priority,
    Task,
    TaskCategory,
)
from lifeos.services.storage import (
    LocalStoreInterface,
    RemoteStoreInterface,
    StorageError,
)
from lifeos.store.defaults import build_default_data
from lifeos.store.merge import merge_with_defaults
from lifeos.store.sync import RemoteSync


DEFAULT_STORAGE_KEY = "life-os-data-v1"

Subscriber = Callable[[AppData], None]


class LoadState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    LOADED = "loaded"


class StoreNotLoadedError(RuntimeError):
    """A mutation was attempted before load() completed."""
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


def _apply_updates(entity: LifeModel, updates: dict[str, Any]) -> LifeModel:
    """
    Validate a partial update against the entity's model.

    The id never changes. Unknown field names are rejected.

    Raises:
        TypeError: For field names the model does not have
        pydantic.ValidationError: If the updated entity is invalid
    """
    model = type(entity)
    unknown = set(updates) - set(model.model_fields)
    if unknown:
        raise TypeError(f"Unknown {model.__name__} field(s): {', '.join(sorted(unknown))}")

    data = entity.model_dump()
    data.update({k: v for k, v in updates.items() if k != "id"})
    return model.model_validate(data)


class DataStore:
    """
    Single-writer container for the application root.

    Mutations are synchronous and serialized by a re-entrant lock, so a
    subscriber may itself call back into the store.
    """

    def __init__(
        self,
        local_store: LocalStoreInterface,
        remote_store: Optional[RemoteStoreInterface] = None,
        audit_logger: Optional[AuditLogger] = None,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self._local = local_store
        self._remote = remote_store
        self._audit_logger = audit_logger
        self._key = storage_key
        self._clock = clock or _utcnow
        self._id_factory = id_factory or _new_id

        self._lock = threading.RLock()
        self._state: Optional[AppData] = None
        self._load_state = LoadState.UNINITIALIZED
        self._loading: Optional[asyncio.Future] = None
        self._load_source: Optional[str] = None
        self._subscribers: list[Subscriber] = []
        self._sync = RemoteSync(remote_store, audit_logger) if remote_store else None

    # =========================================================================
    # READ SIDE
    # =========================================================================

    @property
    def state(self) -> AppData:
        """The current root. Raises StoreNotLoadedError before load()."""
        with self._lock:
            return self._require_loaded()

    @property
    def load_state(self) -> LoadState:
        return self._load_state

    @property
    def load_source(self) -> Optional[str]:
        """Where the root came from: "remote", "local" or "defaults"."""
        return self._load_source

    def resolve_goal(self, goal_id: Optional[str]) -> Optional[Goal]:
        if not goal_id:
            return None
        return next((g for g in self.state.goals if g.id == goal_id), None)

    def resolve_liability(self, liability_id: Optional[str]) -> Optional[Liability]:
        if not liability_id:
            return None
        return next((l for l in self.state.liabilities if l.id == liability_id), None)

    def goal_for_investment(self, investment_id: str) -> Optional[Goal]:
        """The goal an investment is linked to, if the link still resolves."""
        investment = next(
            (i for i in self.state.investments if i.id == investment_id), None
        )
        if investment is None:
            return None
        return self.resolve_goal(investment.linked_goal_id)

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """
        Register a callback invoked with every new root.

        Returns:
            A function that removes the subscription
        """
        with self._lock:
            self._subscribers.append(callback)
        return lambda: self.unsubscribe(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

    # =========================================================================
    # LOADING
    # =========================================================================

    async def load(self) -> AppData:
        """
        Load the root once. Later calls return the current root.
        """
        if self._load_state is LoadState.LOADED:
            return self.state
        if self._loading is None:
            self._loading = asyncio.ensure_future(self._load())
        return await asyncio.shield(self._loading)

    async def _load(self) -> AppData:
        self._load_state = LoadState.LOADING
        try:
            source = "remote"
            root = await self._load_remote()
            if root is None:
                source = "local"
                root = self._load_local()
            if root is None:
                source = "defaults"
                root = build_default_data(self._clock())
        except BaseException:
            self._load_state = LoadState.UNINITIALIZED
            self._loading = None
            raise

        with self._lock:
            self._state = root
            self._load_source = source
            self._load_state = LoadState.LOADED
            if self._audit_logger:
                self._audit_logger.log_state_loaded(source)
            self._notify(root)
        return root

    async def _load_remote(self) -> Optional[AppData]:
        if self._remote is None:
            return None

        user_id: Optional[str] = None
        try:
            user_id = await self._remote.current_user_id()
            if not user_id:
                if self._audit_logger:
                    self._audit_logger.log_remote_load_skipped("no session")
                return None

            record = await self._remote.fetch_record(user_id)
            if record is None:
                if self._audit_logger:
                    self._audit_logger.log_remote_load_skipped("no remote record")
                return None

            return AppData.model_validate(record)
        except (StorageError, ValidationError) as e:
            if self._audit_logger:
                self._audit_logger.log_remote_load_failed(user_id, e)
            return None

    def _load_local(self) -> Optional[AppData]:
        try:
            raw = self._local.get_item(self._key)
            if raw is None:
                return None
            document = json.loads(raw)
            if not isinstance(document, dict):
                raise ValueError("Stored document is not a JSON object")
            return merge_with_defaults(document, build_default_data(self._clock()))
        except (StorageError, ValueError, ValidationError) as e:
            if self._audit_logger:
                self._audit_logger.log_local_parse_failed(self._key, e)
            return None

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    async def flush(self) -> None:
        """Wait for in-flight remote writes."""
        if self._sync is not None:
            await self._sync.flush()

    def _require_loaded(self) -> AppData:
        if self._load_state is not LoadState.LOADED or self._state is None:
            raise StoreNotLoadedError("DataStore.load() has not completed")
        return self._state

    def _commit(
        self,
        operation: str,
        collection: str,
        derive: Callable[[AppData], Optional[AppData]],
        entity_id: Optional[str] = None,
    ) -> bool:
        """
        Swap in the root produced by derive(current) and persist it.

        derive returns None when there is nothing to change (unknown id);
        the root then stays identical and nothing is written.
        """
        with self._lock:
            current = self._require_loaded()
            new_root = derive(current)
            if new_root is None:
                return False

            self._state = new_root
            document = new_root.to_document()
            self._write_local(document)
            if self._sync is not None:
                self._sync.schedule(document)
            if self._audit_logger:
                self._audit_logger.log_mutation(operation, collection, entity_id)
            self._notify(new_root)
        return True

    def _write_local(self, document: dict[str, Any]) -> None:
        try:
            self._local.set_item(self._key, json.dumps(document))
        except StorageError as e:
            if self._audit_logger:
                self._audit_logger.log_local_write_failed(self._key, e)

    def _notify(self, root: AppData) -> None:
        for callback in list(self._subscribers):
            try:
                callback(root)
            except Exception as e:
                if self._audit_logger:
                    name = getattr(callback, "__qualname__", repr(callback))
                    self._audit_logger.log_subscriber_failed(name, e)

    # =========================================================================
    # GENERIC COLLECTION OPERATIONS
    # =========================================================================

    def _add(
        self,
        operation: str,
        collection: str,
        entity: Entity,
        prepend: bool = False,
    ) -> Entity:
        def derive(root: AppData) -> AppData:
            items = getattr(root, collection)
            items = (entity,) + items if prepend else items + (entity,)
            return root.model_copy(update={collection: items})

        self._commit(operation, collection, derive, entity.id)
        return entity

    def _update(
        self,
        operation: str,
        collection: str,
        entity_id: str,
        updates: Union[dict[str, Any], Callable[[Any], dict[str, Any]]],
    ) -> Optional[Entity]:
        """
        Apply updates to one entity. updates may be a callable computing
        the changes from the current entity.
        """
        updated: list[Entity] = []

        def derive(root: AppData) -> Optional[AppData]:
            items = getattr(root, collection)
            for index, item in enumerate(items):
                if item.id == entity_id:
                    changes = updates(item) if callable(updates) else updates
                    new_item = _apply_updates(item, changes)
                    updated.append(new_item)
                    new_items = items[:index] + (new_item,) + items[index + 1:]
                    return root.model_copy(update={collection: new_items})
            return None

        self._commit(operation, collection, derive, entity_id)
        return updated[0] if updated else None

    def _delete(self, operation: str, collection: str, entity_id: str) -> bool:
        def derive(root: AppData) -> Optional[AppData]:
            items = getattr(root, collection)
            kept = tuple(item for item in items if item.id != entity_id)
            if len(kept) == len(items):
                return None
            return root.model_copy(update={collection: kept})

        return self._commit(operation, collection, derive, entity_id)

    def _set(self, operation: str, field: str, value: Any) -> None:
        self._commit(operation, field, lambda root: root.model_copy(update={field: value}))

    def _merge(self, operation: str, field: str, updates: dict[str, Any]) -> LifeModel:
        merged: list[LifeModel] = []

        def derive(root: AppData) -> AppData:
            value = _apply_updates(getattr(root, field), updates)
            merged.append(value)
            return root.model_copy(update={field: value})

        self._commit(operation, field, derive)
        return merged[0]

    # =========================================================================
    # TASKS
    # =========================================================================

    def add_task(self, **fields: Any) -> Task:
        return self._add("add_task", "tasks", Task(id=self._id_factory(), **fields))

    def update_task(self, task_id: str, **updates: Any) -> Optional[Task]:
        return self._update("update_task", "tasks", task_id, updates)

    def delete_task(self, task_id: str) -> bool:
        return self._delete("delete_task", "tasks", task_id)

    # =========================================================================
    # HABITS
    # =========================================================================

    def add_habit(self, **fields: Any) -> Habit:
        """New habits start with no streak and an empty history."""
        fields.update(streak=0, history={})
        return self._add("add_habit", "habits", Habit(id=self._id_factory(), **fields))

    def update_habit(self, habit_id: str, **updates: Any) -> Optional[Habit]:
        return self._update("update_habit", "habits", habit_id, updates)

    def delete_habit(self, habit_id: str) -> bool:
        return self._delete("delete_habit", "habits", habit_id)

    def toggle_habit(self, habit_id: str, day: Union[date, str]) -> Optional[Habit]:
        """
        Flip the habit's history for day. Marking a day done adds one to
        the streak; un-marking it takes one away, never below zero.
        """
        key = day.isoformat() if isinstance(day, date) else day

        def toggle(habit: Habit) -> dict[str, Any]:
            done = not habit.history.get(key, False)
            streak = habit.streak + 1 if done else max(0, habit.streak - 1)
            return {"history": {**habit.history, key: done}, "streak": streak}

        return self._update("toggle_habit", "habits", habit_id, toggle)

    # =========================================================================
    # TRANSACTIONS & WISHLIST
    # =========================================================================

    def add_transaction(self, **fields: Any) -> Transaction:
        """Record a transaction. Newest transactions come first."""
        fields.setdefault("date", self._clock())
        transaction = Transaction(id=self._id_factory(), **fields)
        return self._add("add_transaction", "transactions", transaction, prepend=True)

    def add_wishlist_item(self, **fields: Any) -> WishlistItem:
        item = WishlistItem(id=self._id_factory(), created_at=self._clock(), **fields)
        return self._add("add_wishlist_item", "wishlist", item)

    def delete_wishlist_item(self, item_id: str) -> bool:
        return self._delete("delete_wishlist_item", "wishlist", item_id)

    def convert_wishlist_item_to_expense(self, item_id: str) -> Optional[Transaction]:
        """
        Buy a wishlist item: record it as a Want expense and drop it from
        the wishlist, in a single mutation.
        """
        created: list[Transaction] = []

        def derive(root: AppData) -> Optional[AppData]:
            item = next((w for w in root.wishlist if w.id == item_id), None)
            if item is None:
                return None
            transaction = Transaction(
                id=self._id_factory(),
                amount=item.amount,
                description=item.name,
                type=TransactionType.EXPENSE,
                category="Wishlist",
                master_category=item.category,
                necessity=Necessity.WANT,
                date=self._clock(),
            )
            created.append(transaction)
            return root.model_copy(update={
                "transactions": (transaction,) + root.transactions,
                "wishlist": tuple(w for w in root.wishlist if w.id != item_id),
            })

        self._commit("convert_wishlist_item_to_expense", "wishlist", derive, item_id)
        return created[0] if created else None

    # =========================================================================
    # ASSETS, LIABILITIES, INSURANCE, INVESTMENTS
    # =========================================================================

    def add_asset(self, **fields: Any) -> FinancialAsset:
        return self._add("add_asset", "assets", FinancialAsset(id=self._id_factory(), **fields))

    def update_asset(self, asset_id: str, **updates: Any) -> Optional[FinancialAsset]:
        return self._update("update_asset", "assets", asset_id, updates)

    def delete_asset(self, asset_id: str) -> bool:
        return self._delete("delete_asset", "assets", asset_id)

    def add_liability(self, **fields: Any) -> Liability:
        """
        Add a loan. When monthly_payment is omitted or 0 the EMI is computed
        from amount, rate, tenure and calculation method.
        """
        fields.setdefault("start_date", self._clock())
        draft = Liability(id=self._id_factory(), **fields)
        if not draft.monthly_payment and draft.total_amount and draft.tenure_months:
            payment = emi(
                draft.total_amount,
                draft.interest_rate,
                draft.tenure_months,
                draft.calculation_method,
            )
            draft = draft.model_copy(update={"monthly_payment": payment})
        return self._add("add_liability", "liabilities", draft)

    def update_liability(self, liability_id: str, **updates: Any) -> Optional[Liability]:
        """Partial update. The paid amount is clamped to [0, total amount]."""
        def clamp(loan: Liability) -> dict[str, Any]:
            changes = dict(updates)
            if "paid_amount" in changes:
                total = changes.get("total_amount", loan.total_amount)
                changes["paid_amount"] = max(0, min(total, changes["paid_amount"]))
            return changes

        return self._update("update_liability", "liabilities", liability_id, clamp)

    def record_loan_payment(self, liability_id: str, paid_amount: float) -> Optional[Liability]:
        """Set the principal repaid so far."""
        return self.update_liability(liability_id, paid_amount=paid_amount)

    def delete_liability(self, liability_id: str) -> bool:
        return self._delete("delete_liability", "liabilities", liability_id)

    def add_insurance(self, **fields: Any) -> InsurancePolicy:
        policy = InsurancePolicy(id=self._id_factory(), **fields)
        return self._add("add_insurance", "insurance_policies", policy)

    def update_insurance(self, policy_id: str, **updates: Any) -> Optional[InsurancePolicy]:
        return self._update("update_insurance", "insurance_policies", policy_id, updates)

    def delete_insurance(self, policy_id: str) -> bool:
        return self._delete("delete_insurance", "insurance_policies", policy_id)

    def add_investment(self, **fields: Any) -> Investment:
        investment = Investment(id=self._id_factory(), **fields)
        return self._add("add_investment", "investments", investment)

    def update_investment(self, investment_id: str, **updates: Any) -> Optional[Investment]:
        return self._update("update_investment", "investments", investment_id, updates)

    def delete_investment(self, investment_id: str) -> bool:
        return self._delete("delete_investment", "investments", investment_id)

    # =========================================================================
    # GOALS & CONTACTS
    # =========================================================================

    def add_goal(self, **fields: Any) -> Goal:
        """
        Add a vision goal. Financial goals get their future value, SIP and
        horizon computed once here and start at 0% progress.
        """
        if fields.get("is_financial"):
            plan = plan_financial_goal(
                fields.get("current_cost"),
                fields.get("years_away"),
                fields.get("inflation_rate"),
            )
            fields.update(
                future_value=plan.future_value,
                required_sip=plan.required_sip,
                horizon=plan.horizon,
                progress=0,
            )
        return self._add("add_goal", "goals", Goal(id=self._id_factory(), **fields))

    def update_goal(self, goal_id: str, **updates: Any) -> Optional[Goal]:
        return self._update("update_goal", "goals", goal_id, updates)

    def delete_goal(self, goal_id: str) -> bool:
        return self._delete("delete_goal", "goals", goal_id)

    def add_contact(self, **fields: Any) -> Contact:
        fields.setdefault("last_contacted", self._clock())
        return self._add("add_contact", "contacts", Contact(id=self._id_factory(), **fields))

    def update_contact(self, contact_id: str, **updates: Any) -> Optional[Contact]:
        return self._update("update_contact", "contacts", contact_id, updates)

    def delete_contact(self, contact_id: str) -> bool:
        return self._delete("delete_contact", "contacts", contact_id)

    # =========================================================================
    # INCOME OPPORTUNITIES & FINANCIAL TOOLS
    # =========================================================================

    def add_income_opportunity(self, **fields: Any) -> IncomeOpportunity:
        draft = IncomeOpportunity(id=self._id_factory(), **fields)
        scored = draft.model_copy(update={"score": opportunity_score(
            draft.interest, draft.capability, draft.effortlessness, draft.return_potential,
        )})
        return self._add("add_income_opportunity", "income_opportunities", scored)

    def delete_income_opportunity(self, opportunity_id: str) -> bool:
        return self._delete("delete_income_opportunity", "income_opportunities", opportunity_id)

    def update_financial_tool(self, tool_id: str, **updates: Any) -> Optional[FinancialTool]:
        """Partial update; lastUpdated is stamped on every change."""
        updates["last_updated"] = self._clock()
        return self._update("update_financial_tool", "financial_tools", tool_id, updates)

    def set_financial_tool_field(
        self,
        tool_id: str,
        name: str,
        value: str,
    ) -> Optional[FinancialTool]:
        """Set one free-form field, adding it if the tool does not have it."""
        now = self._clock()

        def set_field(tool: FinancialTool) -> dict[str, Any]:
            return {"fields": {**tool.fields, name: value}, "last_updated": now}

        return self._update("set_financial_tool_field", "financial_tools", tool_id, set_field)

    def toggle_financial_tool(self, tool_id: str) -> Optional[FinancialTool]:
        """Complete becomes Incomplete; anything else becomes Complete."""
        now = self._clock()

        def toggle(tool: FinancialTool) -> dict[str, Any]:
            status = (
                FinancialToolStatus.INCOMPLETE
                if tool.status == FinancialToolStatus.COMPLETE
                else FinancialToolStatus.COMPLETE
            )
            return {"status": status, "last_updated": now}

        return self._update("toggle_financial_tool", "financial_tools", tool_id, toggle)

    # =========================================================================
    # SINGLETONS
    # =========================================================================

    def update_savings_config(self, config: SavingsConfig) -> None:
        self._set("update_savings_config", "savings_config", SavingsConfig.model_validate(config))

    def configure_savings(
        self,
        monthly_expense: float,
        is_job_stable: bool,
        has_dependents: bool,
    ) -> SavingsConfig:
        """Size the emergency fund and mark the savings engine configured."""
        multiplier = emergency_fund_multiplier(is_job_stable, has_dependents)
        config = SavingsConfig(
            monthly_expense=monthly_expense,
            is_job_stable=is_job_stable,
            has_dependents=has_dependents,
            months_multiplier=multiplier,
            target_amount=monthly_expense * multiplier,
            is_configured=True,
        )
        self.update_savings_config(config)
        return config

    def update_income_target(self, target: IncomeTarget) -> None:
        self._set("update_income_target", "income_target", IncomeTarget.model_validate(target))

    def update_growth_strategy(self, **updates: Any) -> GrowthStrategy:
        return self._merge("update_growth_strategy", "growth_strategy", updates)

    def update_tax_profile(self, **updates: Any) -> TaxProfile:
        return self._merge("update_tax_profile", "tax_profile", updates)

    def update_mission(self, text: str) -> None:
        self._set("update_mission", "mission_statement", text)

    def set_risk_profile(self, profile: Optional[RiskProfile]) -> None:
        if profile is not None:
            profile = RiskProfile.model_validate(profile)
        self._set("set_risk_profile", "risk_profile", profile)

    def set_life_goals(self, goals: list[LifeGoal]) -> None:
        """
        Replace the ranked life goals. The first time the list goes from
        empty to non-empty, one Vision task is created per goal.
        """
        goals = tuple(LifeGoal.model_validate(g) for g in goals)

        def derive(root: AppData) -> AppData:
            tasks = root.tasks
            if not root.life_goals and goals:
                tasks = tasks + tuple(
                    Task(
                        id=self._id_factory(),
                        title=f"Plan strategy for: {goal.title}",
                        category=TaskCategory.VISION,
                        priority=(
                            Priority.P1 if goal.type == LifeGoalType.MUST_HAVE else Priority.P3
                        ),
                        completed=False,
                        is_today_focus=False,
                    )
                    for goal in goals
                )
            return root.model_copy(update={"life_goals": goals, "tasks": tasks})

        self._commit("set_life_goals", "life_goals", derive)
