from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware

from .config import Settings, configure_logging
from .errors import (
    CustomerNotFoundError,
    DuplicateCustomerError,
    InvalidNameError,
    InvalidPhoneError,
    NotEligibleError,
)
from .models import (
    CardView,
    ConnectionStatus,
    CustomerRecord,
    CustomerResponse,
    PunchCard,
    RegisterCustomerRequest,
)
from .service import LoyaltyService


def create_app(
    service: Optional[LoyaltyService] = None,
    settings: Optional[Settings] = None,
    root_path: str = "",
) -> FastAPI:
    if service is None:
        settings = settings or Settings.from_env()
        configure_logging(settings.log_level)
        service = LoyaltyService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # The first connection attempt blocks on the network
        await run_in_threadpool(service.start)
        yield

    app = FastAPI(
        title="Waffle Punch Card API",
        description="Loyalty punch cards keyed by phone number, stored locally and mirrored to the cloud when available",
        version="1.0.0",
        root_path=root_path,
        lifespan=lifespan,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health", tags=["System"])
    def health_check():
        return {"status": "healthy", "service": "punchcard"}

    @app.get("/connection", response_model=ConnectionStatus, tags=["System"])
    def get_connection() -> ConnectionStatus:
        return service.get_connection_state()

    @app.post("/connection/retry", response_model=ConnectionStatus, tags=["System"])
    def retry_connection() -> ConnectionStatus:
        return service.reconnect()

    @app.get("/customers/{phone}", response_model=CustomerRecord, tags=["Customers"])
    def lookup_customer(phone: str) -> CustomerRecord:
        try:
            return service.lookup_customer(phone)
        except InvalidPhoneError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except CustomerNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    @app.post("/customers", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED, tags=["Customers"])
    def register_customer(request: RegisterCustomerRequest) -> CustomerResponse:
        try:
            return service.register_customer(request)
        except DuplicateCustomerError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
        except (InvalidPhoneError, InvalidNameError) as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    @app.post("/customers/{phone}/punches", response_model=CustomerResponse, tags=["Punch Cards"])
    def add_punch(phone: str) -> CustomerResponse:
        try:
            return service.add_punch(phone)
        except CustomerNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    @app.post("/customers/{phone}/redemptions", response_model=CustomerResponse, tags=["Punch Cards"])
    def redeem_reward(phone: str) -> CustomerResponse:
        try:
            return service.redeem_reward(phone)
        except CustomerNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except NotEligibleError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    @app.get("/customers/{phone}/card", response_model=PunchCard, tags=["Punch Cards"])
    def view_card(phone: str, view: CardView = CardView.STAFF) -> PunchCard:
        try:
            return service.view_card(phone, view)
        except InvalidPhoneError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except CustomerNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return app


_app: Optional[FastAPI] = None


def __getattr__(name: str):
    # Built on first access so importing the module has no side effects
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
