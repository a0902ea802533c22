"""FastAPI 로 구현한 RESTful 서비스 앱.

엔드포인트는 요청에서 자격 증명과 페이로드만 꺼내 :class:`OperationBus` 에
넘기고, 결과(:class:`Ok` / :class:`Failure`)를 HTTP 응답으로 바꿉니다. 실패
종류별 HTTP 상태 코드는 :attr:`ErrorKind.status_code` 에 정의되어 있습니다.
"""
from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import APIRouter, Body, Depends, FastAPI, Header, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from sweetshop.bootstrap import SweetShopApp, bootstrap
from sweetshop.config import SweetShop
from sweetshop.core import ErrorKind, Failure, Result
from sweetshop.domain import utcnow
from sweetshop.logging import get_logger
from sweetshop.security import parse_bearer

logger = get_logger("sweetshop.api")

router = APIRouter(prefix="/api")


def get_shop(request: Request) -> SweetShopApp:
    return request.app.state.shop


def get_credential(authorization: Optional[str] = Header(None)) -> Optional[str]:
    """``Authorization: Bearer <token>`` 헤더에서 토큰을 꺼냅니다."""
    return parse_bearer(authorization)


def failure_response(failure: Failure) -> JSONResponse:
    return JSONResponse(failure.to_dict(), status_code=failure.kind.status_code)


def respond(
    result: Result[Any],
    render: Callable[[Any], dict[str, Any]],
    status_code: int = 200,
) -> JSONResponse:
    """연산 결과를 JSON 응답으로 바꿉니다."""
    if not result.ok:
        return failure_response(result)
    return JSONResponse(jsonable_encoder(render(result.value)), status_code=status_code)


def sweet_message(message: str) -> Callable[[Any], dict[str, Any]]:
    return lambda sweet: {"message": message, "sweet": sweet.to_dict()}


def sweet_list(sweets: list[Any]) -> dict[str, Any]:
    return {"sweets": [it.to_dict() for it in sweets]}


# Sweets


@router.post("/sweets", status_code=201)
def create_sweet(
    payload: Any = Body(None),
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    """``POST /api/sweets`` 새 품목을 등록합니다."""
    result = shop.bus.dispatch("sweets.create", credential, payload)
    return respond(result, sweet_message("Sweet created successfully"), 201)


@router.get("/sweets")
def list_sweets(
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    return respond(shop.bus.dispatch("sweets.list", credential), sweet_list)


@router.get("/sweets/search")
def search_sweets(
    request: Request,
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    """``GET /api/sweets/search?name=&category=&minPrice=&maxPrice=``"""
    # 빈 쿼리 값은 조건이 없는 것으로 봅니다.
    criteria = {k: v for k, v in request.query_params.items() if v != ""}
    result = shop.bus.dispatch("sweets.search", credential, criteria)
    return respond(result, sweet_list)


@router.get("/sweets/{id}")
def get_sweet(
    id: str,
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    result = shop.bus.dispatch("sweets.get", credential, id=id)
    return respond(result, lambda sweet: {"sweet": sweet.to_dict()})


@router.put("/sweets/{id}")
def update_sweet(
    id: str,
    payload: Any = Body(None),
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    result = shop.bus.dispatch("sweets.update", credential, payload, id=id)
    return respond(result, sweet_message("Sweet updated successfully"))


@router.delete("/sweets/{id}")
def delete_sweet(
    id: str,
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    """``DELETE /api/sweets/{id}`` 관리자만 호출할 수 있습니다."""
    result = shop.bus.dispatch("sweets.delete", credential, id=id)
    return respond(result, sweet_message("Sweet deleted successfully"))


# Inventory


@router.post("/sweets/{id}/purchase")
def purchase_sweet(
    id: str,
    payload: Any = Body(None),
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    result = shop.bus.dispatch("sweets.purchase", credential, payload, id=id)
    return respond(result, sweet_message("Sweet purchased successfully"))


@router.post("/sweets/{id}/restock")
def restock_sweet(
    id: str,
    payload: Any = Body(None),
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    """``POST /api/sweets/{id}/restock`` 관리자만 호출할 수 있습니다."""
    result = shop.bus.dispatch("sweets.restock", credential, payload, id=id)
    return respond(result, sweet_message("Sweet restocked successfully"))


# Users


@router.post("/users/register", status_code=201)
def register_user(
    payload: Any = Body(None),
    shop: SweetShopApp = Depends(get_shop),
):
    result = shop.bus.dispatch("users.register", payload=payload)
    return respond(
        result,
        lambda user: {"message": "User created successfully", "user": user.to_dict()},
        201,
    )


@router.post("/users/login")
def login_user(
    payload: Any = Body(None),
    shop: SweetShopApp = Depends(get_shop),
):
    result = shop.bus.dispatch("users.login", payload=payload)
    return respond(
        result,
        lambda it: {
            "message": "Login successful",
            "token": it["token"],
            "user": it["user"].to_dict(),
        },
    )


@router.get("/users/profile")
def get_profile(
    credential: Optional[str] = Depends(get_credential),
    shop: SweetShopApp = Depends(get_shop),
):
    result = shop.bus.dispatch("users.profile", credential)
    return respond(result, lambda user: {"user": user.to_dict()})


@router.get("/health")
def health():
    return {"status": "OK", "timestamp": utcnow().isoformat()}


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """본문을 JSON 으로 해석할 수 없는 요청을 ``ValidationFailed`` 로 응답합니다."""
    details = []
    for err in exc.errors():
        loc = ".".join(str(it) for it in err.get("loc", ()) if it != "body")
        details.append(f"{loc or 'body'}: {err.get('msg', 'invalid value')}")
    failure = Failure(
        ErrorKind.VALIDATION_FAILED,
        "Please check your request body for valid JSON syntax",
        tuple(details),
    )
    return failure_response(failure)


def init_app(
    config: Optional[SweetShop] = None, shop: Optional[SweetShopApp] = None
) -> FastAPI:
    """FastAPI 앱을 초기화 합니다.

    `shop` 이 주어지지 않으면 `config` 로 :func:`~sweetshop.bootstrap.bootstrap`
    을 호출해 DB를 초기화하고 서비스를 조립합니다.
    """
    shop = shop or bootstrap(config)
    app = FastAPI(title=shop.config.title)
    app.state.shop = shop
    app.include_router(router)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    @app.get("/")
    def read_root():
        return {"message": f"{shop.config.title} is running!"}

    logger.info("API initialized: %s", shop.config.name)
    return app


def create_app() -> FastAPI:
    """uvicorn 팩토리(``--factory``)용 앱 생성 함수. 프로세스 기본 설정을 사용합니다."""
    return init_app()
