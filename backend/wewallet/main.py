from fastapi import FastAPI, Depends, Header, HTTPException, Query, status, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from sqlalchemy.orm import Session
from typing import Optional
import hmac
import logging
import time

from .config import settings
from .database import get_db
from .models import TradeDirection, TradeStatus, WithdrawStatus
from .models.trade import TradeCreate, TradeCreateResponse, TradeList, TradeRead, TradeResolve, TradeResolveResponse
from .models.user import UserCreate, UserList, UserRead
from .models.withdrawal import WithdrawCreate, WithdrawList, WithdrawManage, WithdrawRead, WithdrawResponse
from .services.exceptions import TradingError
from .services.outcome_oracle import OutcomeOracle, RandomOutcomeOracle
from .services.settlement_service import SettlementEngine
from .services.trade_store import TradeStore
from .services.user_service import UserService
from .services.withdrawal_service import WithdrawalService

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

# Create limiter instance
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)
app = FastAPI(title="WeWallet Trading API",
             description="Binary trade settlement, balances and withdraw requests",
             version="1.0.0")

# Add rate limiter error handler
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request timing middleware
@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Process-Time"] = str(process_time)
    return response

# Domain errors carry their own HTTP status and stable kind
async def trading_error_handler(request: Request, exc: TradingError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

app.add_exception_handler(TradingError, trading_error_handler)

# --- Dependency Injectors ---
_default_oracle = RandomOutcomeOracle()

def get_outcome_oracle() -> OutcomeOracle:
    return _default_oracle

def get_settlement_engine(
    db: Session = Depends(get_db),
    oracle: OutcomeOracle = Depends(get_outcome_oracle)
) -> SettlementEngine:
    return SettlementEngine(db, oracle)

def get_user_service(db: Session = Depends(get_db)) -> UserService:
    return UserService(db, default_balance=settings.default_user_balance)

def get_withdrawal_service(db: Session = Depends(get_db)) -> WithdrawalService:
    return WithdrawalService(db)

def get_trade_store(db: Session = Depends(get_db)) -> TradeStore:
    return TradeStore(db)

def is_admin(x_admin_key: Optional[str] = Header(None)) -> bool:
    if not settings.admin_api_key or not x_admin_key:
        return False
    return hmac.compare_digest(x_admin_key, settings.admin_api_key)

def require_admin(admin: bool = Depends(is_admin)) -> None:
    if not admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin key required")


@app.get("/")
async def root():
    return {"message": "WeWallet Trading API"}

@app.get("/health")
def health():
    return {"ok": True}

# --- Users ---
@app.post("/api/users", response_model=UserRead, status_code=status.HTTP_201_CREATED,
          dependencies=[Depends(require_admin)])
def create_user(user: UserCreate, user_service: UserService = Depends(get_user_service)):
    db_user = user_service.create_user(user.email, user.wallet_address, user.balance)
    return UserRead.model_validate(db_user)

@app.get("/api/users", response_model=UserList)
def list_users(user_service: UserService = Depends(get_user_service)):
    users = [UserRead.model_validate(u) for u in user_service.list_users()]
    return UserList(users=users, count=len(users))

@app.get("/api/users/{user_id}", response_model=UserRead)
def get_user(user_id: str, user_service: UserService = Depends(get_user_service)):
    return UserRead.model_validate(user_service.get_user(user_id))

# --- Binary trades ---
@app.post("/api/trades/create", response_model=TradeCreateResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.trade_rate_limit)
def create_trade(
    request: Request,
    trade_request: TradeCreate,
    engine: SettlementEngine = Depends(get_settlement_engine)
):
    trade = engine.create_trade(
        trade_request.user_id,
        trade_request.coin,
        trade_request.direction,
        trade_request.amount,
        trade_request.timeframe_seconds
    )
    return TradeCreateResponse(
        trade=TradeRead.model_validate(trade),
        message="Binary trade created successfully",
        potential_return=trade.potential_return
    )

@app.post("/api/trades/resolve", response_model=TradeResolveResponse)
@limiter.limit(settings.trade_rate_limit)
def resolve_trade(
    request: Request,
    resolve_request: TradeResolve,
    engine: SettlementEngine = Depends(get_settlement_engine),
    admin: bool = Depends(is_admin)
):
    if resolve_request.manual_result is not None and not admin:
        logger.warning("Rejected manual resolution of trade %s without admin key", resolve_request.trade_id)
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Manual resolution requires admin key")

    settlement = engine.resolve_trade(resolve_request.trade_id, resolve_request.manual_result)
    result = settlement.result
    message = f"Trade resolved: {result.value}"
    if result == TradeStatus.WON:
        message += f" - Payout: ${settlement.payout:.2f}"
    return TradeResolveResponse(
        trade=TradeRead.model_validate(settlement.trade),
        result=result,
        payout=settlement.payout,
        balance=settlement.balance,
        message=message
    )

@app.get("/api/trades", response_model=TradeList)
def list_trades(
    user_id: Optional[str] = None,
    trade_status: Optional[TradeStatus] = Query(None, alias="status"),
    direction: Optional[TradeDirection] = None,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    trade_store: TradeStore = Depends(get_trade_store)
):
    trades = trade_store.list(user_id=user_id, status=trade_status, direction=direction, limit=limit)
    return TradeList(trades=[TradeRead.model_validate(t) for t in trades], count=len(trades))

@app.get("/api/trades/pending", response_model=TradeList)
def list_pending_trades(trade_store: TradeStore = Depends(get_trade_store)):
    trades = trade_store.list_pending()
    return TradeList(trades=[TradeRead.model_validate(t) for t in trades], count=len(trades))

@app.get("/api/trades/{trade_id}", response_model=TradeRead)
def get_trade(trade_id: int, trade_store: TradeStore = Depends(get_trade_store)):
    return TradeRead.model_validate(trade_store.get(trade_id))

# --- Withdraw requests ---
@app.post("/api/withdraw/create", response_model=WithdrawResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.trade_rate_limit)
def create_withdraw_request(
    request: Request,
    withdraw: WithdrawCreate,
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service)
):
    withdraw_request = withdrawal_service.create_request(
        withdraw.user_id, withdraw.amount, withdraw.proof_image, withdraw.tx_hash
    )
    return WithdrawResponse(
        withdraw_request=WithdrawRead.model_validate(withdraw_request),
        message="Withdraw request submitted successfully"
    )

@app.get("/api/withdraw/list", response_model=WithdrawList)
def list_withdraw_requests(
    user_id: Optional[str] = None,
    request_status: Optional[WithdrawStatus] = Query(None, alias="status"),
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service)
):
    requests = withdrawal_service.list_requests(user_id=user_id, status=request_status)
    return WithdrawList(
        withdraw_requests=[WithdrawRead.model_validate(r) for r in requests],
        count=len(requests)
    )

@app.patch("/api/withdraw/manage", response_model=WithdrawResponse, dependencies=[Depends(require_admin)])
def manage_withdraw_request(
    decision: WithdrawManage,
    withdrawal_service: WithdrawalService = Depends(get_withdrawal_service)
):
    withdraw_request = withdrawal_service.process_request(decision.request_id, decision.status)
    return WithdrawResponse(
        withdraw_request=WithdrawRead.model_validate(withdraw_request),
        message=f"Withdraw request {withdraw_request.status.value.lower()} successfully"
    )
