"""Structural validation followed by the rule engine, reported together."""
from __future__ import annotations

from typing import Any, Mapping, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from . import rules
from .errors import FieldError, ValidationError, merge_field_errors

M = TypeVar("M", bound=BaseModel)


def field_errors_from_pydantic(exc: PydanticValidationError) -> list[FieldError]:
    errors = []
    for issue in exc.errors():
        loc = [str(part) for part in issue["loc"] if part not in ("body", "query", "path")]
        message = issue["msg"]
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        errors.append(FieldError(".".join(loc) or "body", message))
    return errors


def _wire_name(model: type[BaseModel], name: str) -> str:
    field = model.model_fields.get(name)
    if field is None or field.alias is None:
        return to_camel(name)
    return field.alias


def _from_wire(model: type[BaseModel], raw: Mapping[str, Any], skip: set[str]) -> dict[str, Any]:
    """Map wire keys back to attribute names, dropping fields that failed."""
    out = {}
    for name, field in model.model_fields.items():
        alias = field.alias or name
        if alias in skip or name in skip:
            continue
        if alias in raw:
            out[name] = raw[alias]
        elif name in raw:
            out[name] = raw[name]
    return out


def parse(model: type[M], raw: Any) -> M:
    """Plain structural validation for request shapes without cross-field rules."""
    if not isinstance(raw, Mapping):
        raise ValidationError.single("body", "Request body must be a JSON object")
    try:
        return model.model_validate(raw)
    except PydanticValidationError as exc:
        raise ValidationError(field_errors_from_pydantic(exc)) from None


def validate_job_post(
    model: type[M], raw: Any, base: Mapping[str, Any] | None = None
) -> tuple[M, dict[str, Any]]:
    """Validate a create/update body against ``model`` and the rule engine.

    ``base`` is the stored post for updates; rules are evaluated on
    ``base`` overlaid with the submitted fields. Returns the parsed payload
    and the submitted fields by attribute name. Raises ``ValidationError``
    listing every structural and rule violation.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError.single("body", "Request body must be a JSON object")

    try:
        payload = model.model_validate(raw)
    except PydanticValidationError as exc:
        structural = field_errors_from_pydantic(exc)
        failed = {e.field.split(".")[0] for e in structural}
        candidate = {**(base or {}), **_from_wire(model, raw, skip=failed)}
        violations = rules.evaluate(candidate, check_values=False)
        raise ValidationError(merge_field_errors(structural, _to_wire(model, violations))) from None

    submitted = payload.model_dump(exclude_unset=True)
    candidate = {**(base or {}), **submitted}
    violations = rules.evaluate(candidate)
    if violations:
        raise ValidationError(_to_wire(model, violations))
    return payload, submitted


def _to_wire(model: type[BaseModel], errors: list[FieldError]) -> list[FieldError]:
    return [FieldError(_wire_name(model, e.field), e.message) for e in errors]
