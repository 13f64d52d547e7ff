from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from app.schemas.products import ProductCreationResponse
from app.services.product_creation import ProductCreationHandler

router = APIRouter(prefix="/api", tags=["Produtos"])


def get_product_handler(request: Request) -> ProductCreationHandler:
    return request.app.state.product_handler


@router.post(
    "/products",
    response_model=ProductCreationResponse,
    status_code=201,
    summary="Criar produto com variações na Shopify",
    description="""
Cria um produto e suas variações na loja indicada pelos headers
`X-Shopify-Shop-Domain` e `X-Shopify-Access-Token`.

- `400`: headers de credencial ausentes (o body nem é validado).
- `422`: body inválido, ou a Shopify rejeitou o conteúdo (`errors` por campo).
- `500`: falha de rede/autenticação/5xx na Shopify (`errors` com a descrição).

`location_id` no body é opcional; sem ele, usa `SHOPIFY_LOCATION_ID`.
""",
    responses={
        400: {"model": ProductCreationResponse},
        422: {"model": ProductCreationResponse},
        500: {"model": ProductCreationResponse},
    },
)
async def criar_produto(
    request: Request,
    handler: ProductCreationHandler = Depends(get_product_handler),
) -> JSONResponse:
    raw = await request.body()
    # decodificação, validação e chamada à Shopify são bloqueantes: rodam fora do event loop
    status, resposta = await run_in_threadpool(handler.handle, request.headers, raw)
    return JSONResponse(status_code=status, content=resposta.model_dump(mode="json"))
