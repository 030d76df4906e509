from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Dict, List, Mapping, Optional, Sequence
from .config import REQUIRED_ROLES, ROLES
from .utils import norm_header


@dataclass(frozen=True)
class ColumnSchema:
    # роль -> реальный заголовок из листа (или None)
    date: Optional[str] = None
    sign_in: Optional[str] = None
    tutor: Optional[str] = None
    subject: Optional[str] = None
    duration: Optional[str] = None

    def get(self, role: str) -> Optional[str]:
        return getattr(self, role)

    def as_dict(self) -> Dict[str, Optional[str]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @property
    def is_domain_data(self) -> bool:
        # журнал занятий: есть дата, время входа, тьютор и предмет; длительность не обязательна
        return all(self.get(r) for r in REQUIRED_ROLES)

    @property
    def has_duration(self) -> bool:
        return bool(self.duration)


def find_column(headers: Sequence[str], candidates: Sequence[str]) -> Optional[str]:
    """
    Первый кандидат (в порядке приоритета), совпавший с заголовком после нормализации.
    Возвращает заголовок в исходном написании.
    """
    by_norm: Dict[str, str] = {}
    for h in headers:
        by_norm.setdefault(norm_header(h), h)
    for c in candidates:
        hit = by_norm.get(norm_header(c))
        if hit is not None and norm_header(hit):
            return hit
    return None


def resolve_columns(headers: Sequence[str], candidates: Mapping[str, Sequence[str]]) -> ColumnSchema:
    return ColumnSchema(**{role: find_column(headers, candidates.get(role, [])) for role in ROLES})


def missing_roles(schema: ColumnSchema) -> List[str]:
    return [r for r in REQUIRED_ROLES if not schema.get(r)]
