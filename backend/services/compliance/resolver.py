"""Pick the requirement template that applies to a vendor or tenant.

An organization may keep its own copy of a system default template. Both
are keyed by ``TemplateKey(category, risk_level)``; within one key the
organization's template shadows the system default. When an organization
has several templates for the same key, the newest ``created_at`` wins and
the greater ``id`` breaks a remaining tie.
"""

from datetime import datetime
from typing import Iterable

from schemas.compliance import EntityContext, RequirementTemplate, TemplateKey
from services.compliance.errors import NoTemplateFound

_NEVER = datetime.min


def _precedence(template: RequirementTemplate):
    created = template.created_at
    if created is not None and created.tzinfo is not None:
        created = created.replace(tzinfo=None) - created.utcoffset()
    return (template.is_org_owned, created or _NEVER, template.id)


def _group_by_key(candidates: Iterable[RequirementTemplate]) -> dict[TemplateKey, RequirementTemplate]:
    winners: dict[TemplateKey, RequirementTemplate] = {}
    for template in candidates:
        current = winners.get(template.key)
        if current is None or _precedence(template) > _precedence(current):
            winners[template.key] = template
    return winners


def effective_templates(candidates: Iterable[RequirementTemplate]) -> list[RequirementTemplate]:
    """One template per (category, risk_level), shadowed defaults removed."""
    winners = _group_by_key(candidates)
    return [winners[key] for key in sorted(winners)]


def resolve_effective_template(
    entity: EntityContext,
    candidates: Iterable[RequirementTemplate],
) -> RequirementTemplate:
    if entity.assigned_template is not None:
        return entity.assigned_template

    same_category = [t for t in candidates if t.category == entity.category]
    if not same_category:
        raise NoTemplateFound(entity.category)

    winner = _group_by_key(same_category).get(entity.key)
    if winner is None:
        raise NoTemplateFound(entity.category, entity.risk_level)
    return winner
