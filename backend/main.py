# backend/main.py
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from utils.errors import ShopError

from routes.cart import router as cart_router
from routes.products import router as products_router
from routes.campaigns import router as campaigns_router, seller_router, admin_router
from routes.orders import router as orders_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

init_db()

app = FastAPI(title="Storefront Pricing API", version="1.0.0")

# CORS Configuration
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


# Typed pricing/cart/campaign failures keep their status and machine code
@app.exception_handler(ShopError)
async def shop_error_handler(request: Request, exc: ShopError):
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


app.include_router(cart_router)
app.include_router(products_router)
app.include_router(campaigns_router)
app.include_router(seller_router)
app.include_router(admin_router)
app.include_router(orders_router)


@app.get("/")
def read_root():
    return {"message": "Storefront Pricing API is running"}
