from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ValidationError

from app.common.logging_setup import get_logger
from app.schemas.products import ProductCreationRequest

logger = get_logger(__name__)

# tipo de erro do pydantic -> regra "humana" usada nas mensagens
_REGRA_POR_TIPO: dict[str, str] = {
    "missing": "required",
    "string_too_short": "required",
    "string_type": "string",
    "string_too_long": "max",
    "list_type": "array",
    "too_short": "min",
    "model_type": "object",
    "model_attributes_type": "object",
    "dict_type": "object",
    "decimal_parsing": "numeric",
    "decimal_type": "numeric",
    "finite_number": "numeric",
    "greater_than_equal": "min",
    "int_parsing": "integer",
    "int_type": "integer",
    "int_from_float": "integer",
    "url_invalid": "url",
}

# (campo com índices trocados por "*", regra) -> mensagem
MENSAGENS: dict[tuple[str, str], str] = {
    ("title", "required"): "The product title is required.",
    ("title", "string"): "The title must be a string.",
    ("title", "max"): "The title may not be greater than 255 characters.",
    ("description", "string"): "The description must be a string.",
    ("variations", "required"): "At least one product variation is required.",
    ("variations", "min"): "At least one product variation is required.",
    ("variations", "array"): "The variations field must be an array.",
    ("variations.*", "object"): "Each variation must be an object.",
    ("variations.*.title", "required"): 'Each variation must have a title (e.g., "Red / Small").',
    ("variations.*.title", "max"): "The variation title may not be greater than 255 characters.",
    ("variations.*.price", "required"): "Each variation must have a price.",
    ("variations.*.price", "numeric"): "The price must be a valid number.",
    ("variations.*.price", "min"): "The price must be at least 0.",
    ("variations.*.inventory_quantity", "integer"): "Inventory quantity must be a whole number.",
    ("variations.*.inventory_quantity", "min"): "Inventory quantity must be at least 0.",
    ("variations.*.images", "array"): "The images field must be an array.",
    ("variations.*.images.*.src", "required"): "Each image must have a source URL.",
    ("variations.*.images.*.src", "url"): "Each image source must be a valid URL.",
}


class ValidationOutcome(BaseModel):
    """Ou `payload` (válido) ou `errors` (campo -> mensagens), nunca os dois."""

    payload: ProductCreationRequest | None = None
    errors: dict[str, list[str]] | None = None

    @property
    def ok(self) -> bool:
        return self.payload is not None


def _regra(err: dict[str, Any]) -> str:
    # null explícito conta como campo ausente
    if "input" in err and err["input"] is None and err["type"] != "missing":
        return "required"
    return _REGRA_POR_TIPO.get(err["type"], err["type"])


def _mapear_erros(exc: ValidationError) -> dict[str, list[str]]:
    erros: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        campo = ".".join(str(p) for p in loc)
        modelo = ".".join("*" if isinstance(p, int) else str(p) for p in loc)
        msg = MENSAGENS.get((modelo, _regra(err)), err.get("msg", "Invalid value."))
        lista = erros.setdefault(campo, [])
        if msg not in lista:
            lista.append(msg)
    return erros


def validate_product_payload(raw: Any) -> ValidationOutcome:
    """
    Valida o body (já decodificado de JSON) contra o schema de criação de produto.

    Body que não é objeto JSON é tratado como objeto vazio. Todos os campos
    inválidos são reportados de uma vez, com chaves no formato
    `variations.0.images.0.src`.
    """
    dados = raw if isinstance(raw, dict) else {}
    try:
        payload = ProductCreationRequest.model_validate(dados)
    except ValidationError as e:
        erros = _mapear_erros(e)
        logger.info("product_payload_invalid", extra={"fields": sorted(erros)})
        return ValidationOutcome(errors=erros)
    return ValidationOutcome(payload=payload)
