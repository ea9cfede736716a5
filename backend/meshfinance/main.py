import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from meshfinance.core.config import settings
from meshfinance.api.routes.auth import router as auth_router
from meshfinance.api.routes.transactions import router as tx_router
from meshfinance.api.routes.recurring import router as recurring_router
from meshfinance.api.routes.settings import router as settings_router
from meshfinance.api.routes.bank_accounts import router as bank_accounts_router
from meshfinance.api.routes.categories import router as categories_router
from meshfinance.api.routes.credit_card import router as credit_card_router
from meshfinance.api.routes.dashboard import router as dashboard_router
from meshfinance.api.routes.trash import router as trash_router
from meshfinance.api.routes.audit import router as audit_router

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title="Mesh Finance")

origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}

app.include_router(auth_router)
app.include_router(tx_router)
app.include_router(recurring_router)
app.include_router(settings_router)
app.include_router(bank_accounts_router)
app.include_router(categories_router)
app.include_router(credit_card_router)
app.include_router(dashboard_router)
app.include_router(trash_router)
app.include_router(audit_router)
