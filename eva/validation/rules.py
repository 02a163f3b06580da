"""
Motor de validación declarativo.

Un rule-set es un dict `campo -> [regla, regla, ...]`. Las reglas se ejecutan en
el orden declarado (presencia y tipo primero, consultas a BD al final); la primera
que falla corta el resto de reglas de ESE campo, pero todos los campos se validan
y se devuelve el mapa completo de errores.

    reglas = {
        "name": [Required(), IsString(), MaxLength(255)],
        "code": [Required(), IsString(), MaxLength(100), Unique(Equipo, "code")],
        "servicio_id": [Nullable(), IsInteger(), Exists(Servicio)],
    }
    datos = validate(db, reglas, payload, partial=False, instance_id=None)
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

from email_validator import EmailNotValidError, validate_email
from sqlalchemy import func
from sqlalchemy.orm import Session

from eva.core.errors import ValidationFailed


class RuleFailed(Exception):
    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class _Stop(Exception):
    """Valor nulo aceptado: no se evalúan más reglas del campo."""


@dataclass
class RuleContext:
    db: Session | None
    data: Mapping[str, Any]
    instance_id: int | None = None
    clean: dict[str, Any] = field(default_factory=dict)


class Rule:
    message = "El campo {field} no es válido."

    def fail(self, fld: str, **kw) -> RuleFailed:
        return RuleFailed(self.message.format(field=fld, **kw))

    def __call__(self, ctx: RuleContext, fld: str, value: Any) -> Any:
        raise NotImplementedError


# ───────────────────────────────────────────────────────────────────────────────
# Presencia
# ───────────────────────────────────────────────────────────────────────────────

def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "") or value == []


class Required(Rule):
    message = "El campo {field} es obligatorio."

    def __call__(self, ctx, fld, value):
        if _is_empty(value):
            raise self.fail(fld)
        return value


class Nullable(Rule):
    """Permite null (o string vacío) y detiene el resto de reglas del campo."""

    def __call__(self, ctx, fld, value):
        if _is_empty(value):
            raise _Stop()
        return value

# ───────────────────────────────────────────────────────────────────────────────
# Tipos (normalizan el valor)
# ───────────────────────────────────────────────────────────────────────────────

class IsString(Rule):
    message = "El campo {field} debe ser texto."

    def __call__(self, ctx, fld, value):
        if not isinstance(value, str):
            raise self.fail(fld)
        return value.strip()


class IsInteger(Rule):
    message = "El campo {field} debe ser un número entero."

    def __call__(self, ctx, fld, value):
        if isinstance(value, bool):
            raise self.fail(fld)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise self.fail(fld)


class IsNumeric(Rule):
    message = "El campo {field} debe ser numérico."

    def __call__(self, ctx, fld, value):
        if isinstance(value, bool):
            raise self.fail(fld)
        try:
            num = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise self.fail(fld)
        if not num.is_finite():
            raise self.fail(fld)
        return num


_TRUE = {"1", "true", "si", "sí", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}


class IsBoolean(Rule):
    message = "El campo {field} debe ser verdadero o falso."

    def __call__(self, ctx, fld, value):
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            v = value.strip().lower()
            if v in _TRUE:
                return True
            if v in _FALSE:
                return False
        raise self.fail(fld)


def parse_date(value: Any) -> date | datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    s = value.strip()
    try:
        if len(s) <= 10:
            return date.fromisoformat(s)
        return datetime.fromisoformat(s.replace("Z", "+00:00")).replace(tzinfo=None)
    except ValueError:
        return None


class IsDate(Rule):
    """Acepta 'YYYY-MM-DD' (date) o ISO-8601 con hora (datetime)."""

    message = "El campo {field} debe ser una fecha válida."

    def __init__(self, with_time: bool = False):
        self.with_time = with_time

    def __call__(self, ctx, fld, value):
        parsed = parse_date(value)
        if parsed is None:
            raise self.fail(fld)
        if self.with_time and not isinstance(parsed, datetime):
            return datetime.combine(parsed, datetime.min.time())
        if not self.with_time and isinstance(parsed, datetime):
            return parsed.date()
        return parsed


class IsEmail(Rule):
    message = "El campo {field} debe ser un correo electrónico válido."

    def __call__(self, ctx, fld, value):
        if not isinstance(value, str):
            raise self.fail(fld)
        try:
            return validate_email(value.strip(), check_deliverability=False).normalized
        except EmailNotValidError:
            raise self.fail(fld)

# ───────────────────────────────────────────────────────────────────────────────
# Tamaño / rango / enumeración
# ───────────────────────────────────────────────────────────────────────────────

class MaxLength(Rule):
    message = "El campo {field} no debe superar {n} caracteres."

    def __init__(self, n: int):
        self.n = n

    def __call__(self, ctx, fld, value):
        if len(str(value)) > self.n:
            raise self.fail(fld, n=self.n)
        return value


class MinLength(Rule):
    message = "El campo {field} debe tener al menos {n} caracteres."

    def __init__(self, n: int):
        self.n = n

    def __call__(self, ctx, fld, value):
        if len(str(value)) < self.n:
            raise self.fail(fld, n=self.n)
        return value


class MinValue(Rule):
    message = "El campo {field} debe ser al menos {n}."

    def __init__(self, n):
        self.n = n

    def __call__(self, ctx, fld, value):
        if value < self.n:
            raise self.fail(fld, n=self.n)
        return value


class MaxValue(Rule):
    message = "El campo {field} no debe ser mayor que {n}."

    def __init__(self, n):
        self.n = n

    def __call__(self, ctx, fld, value):
        if value > self.n:
            raise self.fail(fld, n=self.n)
        return value


class InChoices(Rule):
    message = "El valor seleccionado para {field} no es válido. Opciones: {choices}."

    def __init__(self, *choices: str):
        self.choices = choices

    def __call__(self, ctx, fld, value):
        if value not in self.choices:
            raise self.fail(fld, choices=", ".join(self.choices))
        return value


class AfterField(Rule):
    """Compara contra otro campo ya normalizado (o el valor actual del registro)."""

    message = "El campo {field} debe ser una fecha posterior a {other}."

    def __init__(self, other: str, or_equal: bool = False):
        self.other = other
        self.or_equal = or_equal
        if or_equal:
            self.message = "El campo {field} debe ser una fecha posterior o igual a {other}."

    def __call__(self, ctx, fld, value):
        ref = ctx.clean.get(self.other)
        if ref is None:
            ref = parse_date(ctx.data.get(self.other))
        if ref is None:
            return value
        a, b = _comparable(value, ref)
        if a < b or (a == b and not self.or_equal):
            raise self.fail(fld, other=self.other)
        return value


def _comparable(a, b):
    if isinstance(a, datetime) and not isinstance(b, datetime):
        return a.date(), b
    if isinstance(b, datetime) and not isinstance(a, datetime):
        return a, b.date()
    return a, b

# ───────────────────────────────────────────────────────────────────────────────
# Reglas con ida y vuelta a BD (siempre al final de la lista)
# ───────────────────────────────────────────────────────────────────────────────

class Unique(Rule):
    message = "El valor del campo {field} ya está en uso."

    def __init__(self, model, column: str | None = None, case_insensitive: bool = True):
        self.model = model
        self.column = column
        self.case_insensitive = case_insensitive

    def __call__(self, ctx, fld, value):
        col = getattr(self.model, self.column or fld)
        q = ctx.db.query(self.model.id)
        if self.case_insensitive and isinstance(value, str):
            q = q.filter(func.lower(col) == value.lower())
        else:
            q = q.filter(col == value)
        if ctx.instance_id is not None:
            q = q.filter(self.model.id != ctx.instance_id)
        if ctx.db.query(q.exists()).scalar():
            raise self.fail(fld)
        return value


class Exists(Rule):
    message = "El {field} seleccionado no existe."

    def __init__(self, model, column: str = "id"):
        self.model = model
        self.column = column

    def __call__(self, ctx, fld, value):
        col = getattr(self.model, self.column)
        found = ctx.db.query(ctx.db.query(col).filter(col == value).exists()).scalar()
        if not found:
            raise self.fail(fld)
        return value

# ───────────────────────────────────────────────────────────────────────────────
# Motor
# ───────────────────────────────────────────────────────────────────────────────

RuleSet = Mapping[str, Sequence[Rule]]


def run_rules(
    db: Session | None,
    rules: RuleSet,
    data: Mapping[str, Any],
    partial: bool = False,
    instance_id: int | None = None,
) -> tuple[dict[str, Any], dict[str, list[str]]]:
    """Devuelve (datos_normalizados, errores). No lanza."""
    data = data or {}
    ctx = RuleContext(db=db, data=data, instance_id=instance_id)
    errors: dict[str, list[str]] = {}

    for fld, chain in rules.items():
        present = fld in data
        if not present:
            if partial:
                continue
            if not any(isinstance(r, Required) for r in chain):
                continue

        value = data.get(fld)
        # null explícito en un campo sin Nullable ni Required
        if value is None and present and not any(isinstance(r, (Nullable, Required)) for r in chain):
            errors[fld] = [f"El campo {fld} no puede ser nulo."]
            continue
        try:
            for rule in chain:
                value = rule(ctx, fld, value)
        except _Stop:
            ctx.clean[fld] = None
            continue
        except RuleFailed as e:
            errors[fld] = [e.message]
            continue

        ctx.clean[fld] = value

    return ctx.clean, errors


def validate(
    db: Session | None,
    rules: RuleSet,
    data: Mapping[str, Any],
    partial: bool = False,
    instance_id: int | None = None,
) -> dict[str, Any]:
    """Valida y normaliza. Lanza ValidationFailed (422) con TODOS los errores."""
    clean, errors = run_rules(db, rules, data, partial=partial, instance_id=instance_id)
    if errors:
        raise ValidationFailed(errors)
    return clean
