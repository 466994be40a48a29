# planbarometro/infrastructure/repositories_best_practice.py
from __future__ import annotations

import builtins
from typing import Any

from sqlalchemy import or_
from sqlalchemy.orm import Session

from .exceptions import BestPracticeNotFoundError
from .logging import log_database_operation as log_op
from .models import BestPracticeORM, PracticeRecommendationORM
from .repositories_base import BaseRepository


class BestPracticeRepo(BaseRepository[BestPracticeORM]):
    model = BestPracticeORM

    def __init__(self, session: Session):
        super().__init__(session)

    # -------- Read --------

    @log_op("best_practice.get_required")
    def get_required(self, id_: Any, not_found=None) -> BestPracticeORM:
        practice = super().get_required(id_, not_found or BestPracticeNotFoundError)
        if not practice.is_active:
            raise (not_found or BestPracticeNotFoundError)(id_)
        return practice

    @log_op("best_practice.list_active")
    def list_active(
        self, limit: int | None = None, offset: int | None = None
    ) -> builtins.list[BestPracticeORM]:
        return self.list(
            self.model.is_active.is_(True),
            order_by=[self.model.id.asc()],
            limit=limit,
            offset=offset,
        )

    @log_op("best_practice.list_by_country")
    def list_by_country(self, country: str) -> builtins.list[BestPracticeORM]:
        return self.list(
            self.model.is_active.is_(True),
            self.model.country.ilike(f"%{country}%"),
            order_by=[self.model.id.asc()],
        )

    @log_op("best_practice.search")
    def search(self, query: str) -> builtins.list[BestPracticeORM]:
        pattern = f"%{query}%"
        return self.list(
            self.model.is_active.is_(True),
            or_(
                self.model.title.ilike(pattern),
                self.model.description.ilike(pattern),
                self.model.institution.ilike(pattern),
            ),
            order_by=[self.model.id.asc()],
        )

    def count_active(self) -> int:
        return self.count(self.model.is_active.is_(True))

    # -------- Write --------

    @log_op("best_practice.create")
    def create(self, **fields: Any) -> BestPracticeORM:
        return super().create(**fields)

    @log_op("best_practice.retire")
    def retire(self, obj: BestPracticeORM) -> BestPracticeORM:
        """Soft delete: retired practices stay in the table but are never listed."""
        return self.update(obj, is_active=False)


class PracticeRecommendationRepo(BaseRepository[PracticeRecommendationORM]):
    model = PracticeRecommendationORM

    def __init__(self, session: Session):
        super().__init__(session)

    @log_op("recommendation.list_by_practice")
    def list_by_practice(self, practice_id: int) -> builtins.list[PracticeRecommendationORM]:
        return self.list(
            self.model.practice_id == practice_id, order_by=[self.model.id.asc()]
        )

    @log_op("recommendation.list_by_criterion")
    def list_by_criterion(self, criterion_name: str) -> builtins.list[PracticeRecommendationORM]:
        return self.list(
            self.model.criterion_name.ilike(f"%{criterion_name}%"),
            order_by=[self.model.id.asc()],
        )

    @log_op("recommendation.create")
    def create(self, **fields: Any) -> PracticeRecommendationORM:
        return super().create(**fields)
