"""
Budget Service

Per-category monthly limits. Budgets are advisory: they are stored and
read back, but nothing compares them with spending.
"""

from typing import Optional, Union

from subtrack.models.context import CallerContext
from subtrack.models.subscription import BudgetLimit, Category
from subtrack.services.storage import TrackerStorage


class BudgetService:
    """Owner-scoped budget limits."""

    def __init__(self, storage: TrackerStorage):
        self._storage = storage

    def set_budget(
        self,
        context: CallerContext,
        category: Union[str, Category],
        monthly_limit: int,
    ) -> BudgetLimit:
        """
        Insert or replace the limit for a category.

        Raises:
            InvalidCategory: If category is not a supported category
        """
        budget = BudgetLimit(
            category=Category.parse(category),
            monthly_limit=monthly_limit,
        )
        with self._storage.transaction():
            self._storage.put_budget(context.owner, budget)
        return budget

    def get_budget(
        self,
        context: CallerContext,
        category: Union[str, Category],
    ) -> Optional[BudgetLimit]:
        return self._storage.get_budget(context.owner, Category.parse(category))

    def list_budgets(self, context: CallerContext) -> list[BudgetLimit]:
        return self._storage.list_budgets(context.owner)
