from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import ValidationError

from common.fee_rules.catalog import RuleCatalogEntry, build_catalog
from common.fee_rules.config import FeeRulesConfig
from common.fee_rules.errors import RuleSetLoadError
from common.fee_rules.registry import registry
from pipelines.rule_config_store import JsonFileRuleConfigStore, RuleConfigStore


router = APIRouter(prefix="/rules", tags=["rules"])


def get_rule_config_store() -> RuleConfigStore:
    return JsonFileRuleConfigStore()


def _load(store: RuleConfigStore) -> FeeRulesConfig:
    try:
        return store.load()
    except RuleSetLoadError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def _entry(config: FeeRulesConfig, rule_id: str) -> RuleCatalogEntry:
    try:
        catalog = build_catalog(config)
    except ValidationError as exc:
        raise HTTPException(status_code=500, detail=f"Stored rule parameters are invalid: {exc}") from exc
    return next(e for e in catalog if e.rule_id == rule_id)


@router.get("", response_model=list[RuleCatalogEntry])
def list_rules(store: RuleConfigStore = Depends(get_rule_config_store)):
    config = _load(store)
    try:
        return build_catalog(config)
    except ValidationError as exc:
        raise HTTPException(status_code=500, detail=f"Stored rule parameters are invalid: {exc}") from exc


@router.get("/{rule_id}", response_model=RuleCatalogEntry)
def get_rule(rule_id: str, store: RuleConfigStore = Depends(get_rule_config_store)):
    if rule_id not in registry:
        raise HTTPException(status_code=404, detail=f"Unknown rule: {rule_id}")
    return _entry(_load(store), rule_id)


@router.put("/{rule_id}", response_model=RuleCatalogEntry)
def update_rule(
    rule_id: str,
    parameters: dict[str, Any] = Body(...),
    store: RuleConfigStore = Depends(get_rule_config_store),
):
    """Replace a rule's parameters. They take effect from the next billing batch."""
    if rule_id not in registry:
        raise HTTPException(status_code=404, detail=f"Unknown rule: {rule_id}")
    cfg_model = registry.get(rule_id).config_model
    try:
        validated = cfg_model.model_validate(parameters)
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=exc.errors(include_url=False, include_context=False)) from exc

    config = _load(store).with_rule_parameters(rule_id, validated.model_dump(mode="json", exclude_unset=True))
    store.save(config)
    return _entry(config, rule_id)
