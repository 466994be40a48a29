# planbarometro/infrastructure/repositories_evaluation.py
from __future__ import annotations

import builtins
from typing import Any

from sqlalchemy.orm import Session

from .exceptions import EvaluationNotFoundError
from .logging import log_database_operation as log_op
from .models import EvaluationORM
from .repositories_base import BaseRepository


class EvaluationRepo(BaseRepository[EvaluationORM]):
    model = EvaluationORM

    def __init__(self, session: Session):
        super().__init__(session)

    # -------- Read --------

    @log_op("evaluation.get")
    def get(self, id_: Any) -> EvaluationORM | None:
        return super().get(id_)

    @log_op("evaluation.get_required")
    def get_required(self, id_: Any, not_found=None) -> EvaluationORM:
        return super().get_required(id_, not_found or EvaluationNotFoundError)

    @log_op("evaluation.list_all")
    def list_all(
        self, limit: int | None = None, offset: int | None = None
    ) -> builtins.list[EvaluationORM]:
        # Newest first; id breaks ties between snapshots created in the same instant
        return self.list(
            order_by=[self.model.created_at.desc(), self.model.id.desc()],
            limit=limit,
            offset=offset,
        )

    @log_op("evaluation.list_by_model")
    def list_by_model(self, model_id: str) -> builtins.list[EvaluationORM]:
        return self.list(
            self.model.model == model_id,
            order_by=[self.model.created_at.desc(), self.model.id.desc()],
        )

    @log_op("evaluation.list_by_exercise")
    def list_by_exercise(self, exercise_code: str) -> builtins.list[EvaluationORM]:
        return self.list(
            self.model.exercise_code == exercise_code,
            order_by=[self.model.created_at.desc(), self.model.id.desc()],
        )

    # -------- Write --------

    @log_op("evaluation.create")
    def create(self, **fields: Any) -> EvaluationORM:
        return super().create(**fields)

    @log_op("evaluation.update")
    def update(self, obj: EvaluationORM, **fields: Any) -> EvaluationORM:
        return super().update(obj, **fields)

    @log_op("evaluation.delete")
    def delete(self, obj: EvaluationORM) -> None:
        super().delete(obj)
