# restaurant_pos/main.py
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from restaurant_pos.config import settings
from restaurant_pos.database import init_db

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

# Router imports
from restaurant_pos.routes.auth import router as auth_router
from restaurant_pos.routes.admin import router as admin_router
from restaurant_pos.routes.logs import router as logs_router
from restaurant_pos.routes.categories import router as categories_router
from restaurant_pos.routes.products import router as products_router
from restaurant_pos.routes.orders import router as orders_router
from restaurant_pos.routes.expenses import router as expenses_router
from restaurant_pos.routes.settings import router as settings_router
from restaurant_pos.routes.stats import router as stats_router
from restaurant_pos.routes.realtime import router as realtime_router

# Initialization
init_db()

app = FastAPI(title="Restaurant POS API", version="1.0.0")

# CORS: local dev frontends plus the deployed one from settings
origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]

if settings.FRONTEND_URL:
    origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router registration
app.include_router(auth_router)
app.include_router(admin_router)
app.include_router(logs_router)
app.include_router(categories_router)
app.include_router(products_router)
app.include_router(orders_router)
app.include_router(expenses_router)
app.include_router(settings_router)
app.include_router(stats_router)
app.include_router(realtime_router)

@app.get("/")
def read_root():
    return {"message": "Restaurant POS API is running"}
