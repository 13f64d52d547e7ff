from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    StringConstraints,
    TypeAdapter,
    field_validator,
)
from pydantic_core import PydanticCustomError

_HTTP_URL = TypeAdapter(HttpUrl)


def _validar_url(valor: str) -> str:
    # valida como URL absoluta http(s), mas devolve a string original
    try:
        _HTTP_URL.validate_python(valor)
    except ValueError:
        raise PydanticCustomError("url_invalid", "Input should be a valid URL") from None
    return valor


TituloStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
UrlStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1), AfterValidator(_validar_url)]


class ProductImage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    src: UrlStr = Field(..., description="URL absoluta da imagem")


class ProductVariation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: TituloStr = Field(..., description='Título da variação (ex.: "Red / Small")')
    price: Annotated[Decimal, Field(ge=0)] = Field(..., description="Preço, >= 0")
    inventory_quantity: Annotated[int, Field(ge=0)] | None = Field(
        None, description="Estoque inicial na location escolhida"
    )
    images: list[ProductImage] | None = Field(None, description="Imagens associadas à variação")


class ProductCreationRequest(BaseModel):
    model_config = ConfigDict(
        extra="ignore",
        json_schema_extra={
            "example": {
                "title": "Camiseta Básica",
                "description": "<p>100% algodão</p>",
                "variations": [
                    {
                        "title": "Red / Small",
                        "price": "10.00",
                        "inventory_quantity": 5,
                        "images": [{"src": "https://cdn.example.com/red-small.jpg"}],
                    }
                ],
            }
        },
    )

    title: TituloStr = Field(..., description="Título do produto")
    description: str | None = Field(None, description="Descrição (HTML aceito pela Shopify)")
    variations: Annotated[list[ProductVariation], Field(min_length=1)]

    @field_validator("description", mode="before")
    @classmethod
    def _descricao_vazia_vira_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class ShopifyCredentials(BaseModel):
    shop_domain: str
    access_token: str
    location_id: str | None = None


class ProductCreationResult(BaseModel):
    """Resultado devolvido pelo cliente externo (sucesso, rejeição ou falha)."""

    success: bool
    message: str
    product: dict[str, Any] | None = None
    errors: dict[str, Any] | None = None
    error: str | None = None


class ProductCreationResponse(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "message": "The given data was invalid.",
                "data": None,
                "errors": {"variations.0.price": ["Each variation must have a price."]},
            }
        }
    )

    success: bool = Field(..., description="true quando o produto foi criado")
    message: str
    data: dict[str, Any] | None = Field(None, description="Produto criado, como devolvido pela Shopify")
    errors: dict[str, Any] | str | None = Field(
        None, description="Mapa campo -> mensagens, ou descrição opaca da falha"
    )
